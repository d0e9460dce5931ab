"""Tests for the seed feed client, with the feed stubbed by httpx.MockTransport."""
import asyncio

import httpx
import pytest

from salesboard.config import settings
from salesboard.services.seed_client import SeedClient, SeedFetchError
from tests.conftest import SAMPLE_RECORDS

FEED_URL = "https://feed.example/product_transaction.json"


def _client(handler) -> SeedClient:
    return SeedClient(url=FEED_URL, timeout=5.0, transport=httpx.MockTransport(handler))


class TestSeedClient:
    """Fetching and validating the feed payload."""

    def test_returns_records_untouched(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert str(request.url) == FEED_URL
            return httpx.Response(200, json=SAMPLE_RECORDS)

        records = asyncio.run(_client(handler).fetch_records())

        assert records == SAMPLE_RECORDS

    def test_http_error_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, text="missing")

        with pytest.raises(SeedFetchError) as exc_info:
            asyncio.run(_client(handler).fetch_records())

        assert exc_info.value.status_code == 404

    def test_connection_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(SeedFetchError) as exc_info:
            asyncio.run(_client(handler).fetch_records())

        assert exc_info.value.status_code == 500
        assert "connection refused" in exc_info.value.detail

    def test_invalid_json(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>not json</html>")

        with pytest.raises(SeedFetchError) as exc_info:
            asyncio.run(_client(handler).fetch_records())

        assert exc_info.value.status_code == 502

    def test_payload_must_be_a_list(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"transactions": SAMPLE_RECORDS})

        with pytest.raises(SeedFetchError, match="not a JSON array"):
            asyncio.run(_client(handler).fetch_records())

    def test_defaults_come_from_settings(self):
        client = SeedClient()
        assert client.url == settings.seed_data_url
        assert client.timeout == settings.seed_timeout_seconds
