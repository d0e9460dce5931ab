"""Record store engine and session management."""
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from salesboard.config import settings

engine = create_async_engine(
    settings.database_url,
    pool_pre_ping=True,  # Enable connection health checks
)

# Every query opens its own session so fan-out branches never share a connection
SessionLocal = async_sessionmaker(engine, expire_on_commit=False)

Base = declarative_base()


async def create_tables() -> None:
    """Create the record store tables if they don't exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def get_session_factory() -> async_sessionmaker:
    """Dependency that provides the shared session factory."""
    return SessionLocal
