"""Client for the external seed feed of product transactions."""
import time
from typing import Any, Optional

import httpx

from salesboard.config import settings
from salesboard.logging import get_logger
from salesboard import metrics

logger = get_logger(__name__)


class SeedFetchError(Exception):
    """Raised when the seed feed cannot be fetched or isn't a record list."""
    def __init__(self, status_code: int, detail: str):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Seed feed error {status_code}: {detail}")


class SeedClient:
    """Client for downloading the seed feed."""

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the seed client.

        Args:
            url: Feed URL. Defaults to settings.seed_data_url.
            timeout: Request timeout in seconds. Defaults to settings.seed_timeout_seconds.
            transport: Optional httpx transport, used to stub the feed.
        """
        self.url = url or settings.seed_data_url
        self.timeout = timeout or settings.seed_timeout_seconds
        self.transport = transport

    async def fetch_records(self) -> list[dict[str, Any]]:
        """
        Download the feed.

        Returns:
            The feed's JSON array of transaction records, untouched

        Raises:
            SeedFetchError: If the feed can't be fetched or isn't a JSON array
        """
        start_time = time.perf_counter()

        logger.info("seed_fetch_started", url=self.url)

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(self.url)
                response.raise_for_status()
                data = response.json()

            except httpx.HTTPStatusError as e:
                duration_seconds = time.perf_counter() - start_time

                logger.error(
                    "seed_fetch_http_error",
                    url=self.url,
                    status_code=e.response.status_code,
                    duration_ms=round(duration_seconds * 1000, 2),
                    error=str(e),
                )
                metrics.record_seed_fetch(success=False, latency_seconds=duration_seconds, error_type="http_error")

                raise SeedFetchError(e.response.status_code, str(e))

            except httpx.RequestError as e:
                duration_seconds = time.perf_counter() - start_time

                logger.error(
                    "seed_fetch_request_error",
                    url=self.url,
                    duration_ms=round(duration_seconds * 1000, 2),
                    error=str(e),
                )
                error_type = "timeout" if isinstance(e, httpx.TimeoutException) else "connection_error"
                metrics.record_seed_fetch(success=False, latency_seconds=duration_seconds, error_type=error_type)

                raise SeedFetchError(500, f"Request failed: {e}")

            except ValueError as e:
                duration_seconds = time.perf_counter() - start_time
                logger.error("seed_fetch_invalid_json", url=self.url, error=str(e))
                metrics.record_seed_fetch(success=False, latency_seconds=duration_seconds, error_type="invalid_payload")

                raise SeedFetchError(502, f"Feed is not valid JSON: {e}")

        duration_seconds = time.perf_counter() - start_time

        if not isinstance(data, list):
            logger.error("seed_fetch_invalid_payload", url=self.url, payload_type=type(data).__name__)
            metrics.record_seed_fetch(success=False, latency_seconds=duration_seconds, error_type="invalid_payload")
            raise SeedFetchError(502, "Feed is not a JSON array")

        logger.info(
            "seed_fetch_completed",
            url=self.url,
            record_count=len(data),
            duration_ms=round(duration_seconds * 1000, 2),
        )
        metrics.record_seed_fetch(success=True, latency_seconds=duration_seconds)

        return data
