"""
Salesboard Reporting Service

A FastAPI-based service that seeds a record store with product sale
transactions from an external JSON feed and serves month-scoped reports
over them:

1. Paginated, searchable transaction listings
2. Sale statistics (total amount, sold and unsold item counts)
3. A price-range histogram (bar chart)
4. A category breakdown (pie chart)
5. A combined report of all of the above

Reports are read-only; the only write is the /init bootstrap, which
imports the whole feed every time it is called.
"""
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from salesboard import metrics
from salesboard.api import EndpointError, router
from salesboard.config import settings
from salesboard.database import create_tables, engine
from salesboard.logging import (
    configure_logging,
    get_logger,
    set_request_context,
    clear_request_context,
    generate_request_id,
)

# Configure structured logging
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info(
        "service_starting",
        service_name=settings.service_name,
        seed_data_url=settings.seed_data_url,
    )

    # Create tables if they don't exist
    await create_tables()

    logger.info("service_started", service_name=settings.service_name, port=settings.port)

    yield

    logger.info("service_stopping", service_name=settings.service_name)
    await engine.dispose()


app = FastAPI(
    title="Salesboard Reporting Service",
    description="Monthly sales statistics and charts over product transactions",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    """
    Middleware for request tracing, logging, and metrics.

    Sets up request context with:
    - request_id: Unique identifier for tracing
    - Timing for duration_ms calculation
    - Prometheus metrics collection
    """
    method = request.method
    path = request.url.path

    # Skip logging/metrics for health and metrics endpoints
    if path in ("/health", "/metrics"):
        return await call_next(request)

    request_id = request.headers.get("X-Request-ID") or generate_request_id()
    set_request_context(request_id)

    # Store request_id in request state for access in route handlers
    request.state.request_id = request_id

    start_time = time.perf_counter()

    logger.info("request_received", method=method, path=path)

    try:
        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000

        logger.info(
            "request_completed",
            method=method,
            path=path,
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2),
        )

        metrics.HTTP_REQUESTS.labels(
            method=method,
            endpoint=path,
            status=response.status_code
        ).inc()

        metrics.HTTP_REQUEST_LATENCY.labels(
            method=method,
            endpoint=path
        ).observe(duration_ms / 1000)

        response.headers["X-Request-ID"] = request_id

        return response

    except Exception as e:
        duration_ms = (time.perf_counter() - start_time) * 1000

        logger.error(
            "request_failed",
            method=method,
            path=path,
            duration_ms=round(duration_ms, 2),
            error=str(e),
        )

        metrics.HTTP_REQUESTS.labels(
            method=method,
            endpoint=path,
            status=500
        ).inc()

        raise

    finally:
        clear_request_context()


@app.exception_handler(EndpointError)
async def endpoint_error_handler(request: Request, exc: EndpointError):
    """Render a failed operation as a plain-text 500."""
    request_id = getattr(request.state, "request_id", "unknown")

    logger.error(
        "endpoint_error",
        path=request.url.path,
        message=exc.message,
        cause=repr(exc.__cause__) if exc.__cause__ else None,
    )

    return PlainTextResponse(
        exc.message,
        status_code=500,
        headers={"X-Request-ID": request_id},
    )


# Include API routes
app.include_router(router)


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "ok", "service": settings.service_name}


@app.get("/metrics")
async def metrics_endpoint():
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
