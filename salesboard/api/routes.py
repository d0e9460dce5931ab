"""API route handlers for the Salesboard reporting service."""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import async_sessionmaker

from salesboard.config import settings
from salesboard.database import get_session_factory
from salesboard.logging import get_logger, set_request_context
from salesboard.queries import PageParams
from salesboard.schemas import (
    BarChartBucket,
    CombinedResponse,
    PieChartSlice,
    StatisticsResponse,
    TransactionSchema,
)
from salesboard.services.reports import ReportService
from salesboard.services.seed_client import SeedFetchError
from salesboard.services.seeder import SeedService

logger = get_logger(__name__)

router = APIRouter(prefix=settings.api_prefix, tags=["transactions"])


class EndpointError(Exception):
    """Raised by a handler whose underlying operation failed; rendered as a plain 500."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


def _set_context(request: Request, month: Optional[str]) -> None:
    request_id = getattr(request.state, "request_id", "unknown")
    set_request_context(request_id, month=month)


@router.get("/init", response_class=PlainTextResponse)
async def initialize_database(
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    """
    Seed the record store from the external feed.

    Inserts every feed record on every call; calling twice duplicates the data.
    """
    seed_service = SeedService(session_factory)

    try:
        inserted = await seed_service.initialize()
    except SeedFetchError as e:
        logger.error("seed_failed", stage="fetch", status_code=e.status_code, error=e.detail)
        raise EndpointError("Error initializing database") from e
    except Exception as e:
        logger.error("seed_failed", stage="insert", error=str(e))
        raise EndpointError("Error initializing database") from e

    logger.info("seed_completed", record_count=inserted)
    return "Database initialized with seed data"


@router.get("/transactions", response_model=list[TransactionSchema])
async def list_transactions(
    request: Request,
    month: Optional[str] = None,
    search: str = "",
    page: Optional[str] = None,
    per_page: Optional[str] = Query(None, alias="perPage"),
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    """
    List one page of the month's transactions.

    ``search`` matches title, description or price text, case-insensitively.
    Page parameters that don't parse are ignored rather than rejected.
    """
    _set_context(request, month)
    params = PageParams(month=month, search=search, page=page, per_page=per_page)

    try:
        return await ReportService(session_factory).list_transactions(params)
    except Exception as e:
        raise EndpointError("Error fetching transactions") from e


@router.get("/statistics", response_model=StatisticsResponse)
async def get_statistics(
    request: Request,
    month: Optional[str] = None,
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    """Total sale amount and sold/unsold item counts for the month."""
    _set_context(request, month)

    try:
        return await ReportService(session_factory).get_statistics(month)
    except Exception as e:
        raise EndpointError("Error fetching statistics") from e


@router.get("/bar-chart", response_model=list[BarChartBucket])
async def get_bar_chart(
    request: Request,
    month: Optional[str] = None,
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    """Number of the month's items in each fixed price range."""
    _set_context(request, month)

    try:
        return await ReportService(session_factory).get_bar_chart(month)
    except Exception as e:
        raise EndpointError("Error fetching bar chart data") from e


@router.get("/pie-chart", response_model=list[PieChartSlice])
async def get_pie_chart(
    request: Request,
    month: Optional[str] = None,
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    """Number of the month's items per category."""
    _set_context(request, month)

    try:
        return await ReportService(session_factory).get_pie_chart(month)
    except Exception as e:
        raise EndpointError("Error fetching pie chart data") from e


@router.get("/combined", response_model=CombinedResponse)
async def get_combined(
    request: Request,
    month: Optional[str] = None,
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    """
    The month's full report: every transaction plus statistics, bar chart
    and pie chart. All parts are fetched concurrently; if any fails the
    whole response fails.
    """
    _set_context(request, month)

    try:
        return await ReportService(session_factory).get_combined(month)
    except Exception as e:
        raise EndpointError("Error fetching combined data") from e
