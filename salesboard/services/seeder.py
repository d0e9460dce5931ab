"""Seed service that bootstraps the record store from the external feed."""
from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from salesboard.logging import TimedOperation, get_logger
from salesboard.models import ProductTransaction
from salesboard.services.seed_client import SeedClient
from salesboard import metrics

logger = get_logger(__name__)


class SeedService:
    """
    Imports the seed feed into the record store.

    Every call inserts every feed record again: there is no duplicate
    detection, upsert or schema validation.
    """

    def __init__(self, session_factory: async_sessionmaker, seed_client: Optional[SeedClient] = None):
        self.session_factory = session_factory
        self.seed_client = seed_client or SeedClient()

    async def initialize(self) -> int:
        """
        Fetch the feed and insert all of its records.

        Returns:
            Number of records inserted

        Raises:
            SeedFetchError: If the feed can't be fetched
        """
        records = await self.seed_client.fetch_records()

        with TimedOperation("seed_insert", logger, record_count=len(records)):
            async with self.session_factory() as session:
                session.add_all([ProductTransaction.from_feed(record) for record in records])
                await session.commit()

        metrics.record_seeded_records(len(records))
        return len(records)
