"""Report service that assembles month reports from independent store queries."""
import asyncio
import time
from typing import Any, Optional

from sqlalchemy import Select
from sqlalchemy.ext.asyncio import async_sessionmaker

from salesboard import metrics
from salesboard.logging import get_logger
from salesboard.queries import (
    PRICE_RANGES,
    PageParams,
    PriceRange,
    category_counts_query,
    month_transactions_query,
    price_range_count_query,
    sold_count_query,
    total_sale_amount_query,
    transactions_query,
)
from salesboard.schemas import (
    BarChartBucket,
    CombinedResponse,
    PieChartSlice,
    StatisticsResponse,
    TransactionSchema,
)

logger = get_logger(__name__)


class ReportService:
    """
    Service for building transaction reports.

    Each store query runs in its own session, so independent queries of a
    report are issued concurrently with ``asyncio.gather`` and joined before
    the report is returned. A failing query fails the whole report; its
    siblings are left to finish rather than cancelled.
    """

    def __init__(self, session_factory: async_sessionmaker):
        """
        Initialize the report service.

        Args:
            session_factory: Factory for short-lived async sessions on the record store
        """
        self.session_factory = session_factory

    async def _scalar(self, stmt: Select) -> Any:
        async with self.session_factory() as session:
            return (await session.execute(stmt)).scalar_one()

    async def _records(self, stmt: Select) -> list[TransactionSchema]:
        async with self.session_factory() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [TransactionSchema.model_validate(row) for row in rows]

    async def _timed(self, report: str, month: Optional[str], coro):
        start_time = time.perf_counter()
        try:
            result = await coro
        except Exception as e:
            duration_seconds = time.perf_counter() - start_time
            logger.error(
                "report_failed",
                report=report,
                month=month,
                duration_ms=round(duration_seconds * 1000, 2),
                error=str(e),
            )
            metrics.record_report(report, success=False, latency_seconds=duration_seconds)
            raise

        duration_seconds = time.perf_counter() - start_time
        logger.info(
            "report_completed",
            report=report,
            month=month,
            duration_ms=round(duration_seconds * 1000, 2),
        )
        metrics.record_report(report, success=True, latency_seconds=duration_seconds)
        return result

    async def list_transactions(self, params: PageParams) -> list[TransactionSchema]:
        """
        List one page of the month's records matching the search text.

        Args:
            params: Raw month, search, page and perPage values

        Returns:
            Matching records in insertion order
        """
        return await self._timed(
            "transactions", params.month, self._records(transactions_query(params))
        )

    async def get_statistics(self, month: Optional[str]) -> StatisticsResponse:
        """Total sale amount and sold/unsold counts for the month."""
        return await self._timed("statistics", month, self._statistics(month))

    async def get_bar_chart(self, month: Optional[str]) -> list[BarChartBucket]:
        """Record counts for each of the fixed price ranges."""
        return await self._timed("bar_chart", month, self._bar_chart(month))

    async def get_pie_chart(self, month: Optional[str]) -> list[PieChartSlice]:
        """Record counts per category."""
        return await self._timed("pie_chart", month, self._pie_chart(month))

    async def get_combined(self, month: Optional[str]) -> CombinedResponse:
        """
        Build the full month report.

        The unpaginated record list, statistics, bar chart and pie chart are
        fetched concurrently. Nothing is returned unless all of them succeed.
        """
        return await self._timed("combined", month, self._combined(month))

    async def _statistics(self, month: Optional[str]) -> StatisticsResponse:
        total_amount, sold, not_sold = await asyncio.gather(
            self._scalar(total_sale_amount_query(month)),
            self._scalar(sold_count_query(month, True)),
            self._scalar(sold_count_query(month, False)),
        )
        return StatisticsResponse(
            total_sale_amount=total_amount or 0,
            total_sold_items=sold,
            total_not_sold_items=not_sold,
        )

    async def _bucket(self, month: Optional[str], bucket: PriceRange) -> BarChartBucket:
        count = await self._scalar(price_range_count_query(month, bucket))
        return BarChartBucket(range=bucket.label, count=count)

    async def _bar_chart(self, month: Optional[str]) -> list[BarChartBucket]:
        return list(
            await asyncio.gather(*(self._bucket(month, bucket) for bucket in PRICE_RANGES))
        )

    async def _pie_chart(self, month: Optional[str]) -> list[PieChartSlice]:
        async with self.session_factory() as session:
            rows = (await session.execute(category_counts_query(month))).all()
        return [PieChartSlice(category=category, count=count) for category, count in rows]

    async def _combined(self, month: Optional[str]) -> CombinedResponse:
        transactions, statistics, bar_chart, pie_chart = await asyncio.gather(
            self._records(month_transactions_query(month)),
            self._statistics(month),
            self._bar_chart(month),
            self._pie_chart(month),
        )
        return CombinedResponse(
            transactions=transactions,
            statistics=statistics,
            bar_chart=bar_chart,
            pie_chart=pie_chart,
        )
