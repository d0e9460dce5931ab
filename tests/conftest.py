"""Shared fixtures: a throwaway SQLite record store and an API client bound to it."""
import os
import tempfile

# The app builds its engine at import time; keep it away from a real database.
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///" + os.path.join(tempfile.mkdtemp(), "salesboard.db"),
)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, func, select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import NullPool

from salesboard.database import Base, get_session_factory
from salesboard.main import app
from salesboard.models import ProductTransaction


SAMPLE_RECORDS = [
    {"id": 1, "title": "Fjallraven Backpack", "price": 109.95, "description": "Your perfect pack for everyday use",
     "category": "men's clothing", "image": "https://example.com/1.jpg", "sold": False,
     "dateOfSale": "2021-11-27T20:29:54+05:30"},
    {"id": 2, "title": "Mens Casual T-Shirts", "price": 22.3, "description": "Slim-fitting style",
     "category": "men's clothing", "image": "https://example.com/2.jpg", "sold": False,
     "dateOfSale": "2021-10-27T20:29:54+05:30"},
    {"id": 3, "title": "Mens Cotton Jacket", "price": 615.89, "description": "Great outerwear jackets",
     "category": "men's clothing", "image": "https://example.com/3.jpg", "sold": True,
     "dateOfSale": "2022-07-27T20:29:54+05:30"},
    {"id": 4, "title": "Solid Gold Petite Micropave", "price": 168, "description": "Satisfaction guaranteed",
     "category": "jewelery", "image": "https://example.com/4.jpg", "sold": False,
     "dateOfSale": "2021-11-27T20:29:54+05:30"},
    {"id": 5, "title": "WD 4TB Gaming Drive", "price": 114, "description": "Expand your PS4 gaming experience",
     "category": "electronics", "image": "https://example.com/5.jpg", "sold": True,
     "dateOfSale": "2022-03-27T20:29:54+05:30"},
    {"id": 6, "title": "Samsung 49-Inch Monitor", "price": 999.99, "description": "Super ultrawide screen",
     "category": "electronics", "image": "https://example.com/6.jpg", "sold": True,
     "dateOfSale": "2021-11-05T20:29:54+05:30"},
    {"id": 7, "title": "Rain Jacket Women", "price": 100, "description": "Lightweight windbreaker",
     "category": "women's clothing", "image": "https://example.com/7.jpg", "sold": True,
     "dateOfSale": "2022-03-15T20:29:54+05:30"},
    {"id": 8, "title": "Opna Short Sleeve", "price": 7.95, "description": "Moisture wicking fabric",
     "category": "women's clothing", "image": "https://example.com/8.jpg", "sold": False,
     "dateOfSale": "2011-03-05T20:29:54+05:30"},
    {"id": 9, "title": "DANVOUY Womens T Shirt", "price": 12.99, "description": "Casual short sleeve",
     "category": "women's clothing", "image": "https://example.com/9.jpg", "sold": True,
     "dateOfSale": "2021-11-01T20:29:54+05:30"},
    {"id": 10, "title": "Silicon Power SSD", "price": 100.5, "description": "3D NAND flash",
     "category": "electronics", "image": "https://example.com/10.jpg", "sold": False,
     "dateOfSale": "2022-07-08T20:29:54+05:30"},
]


def make_records(count: int, month: str = "09") -> list[dict]:
    """Generate ``count`` simple records all sold in the given month."""
    return [
        {
            "id": 100 + i,
            "title": f"Item {i}",
            "price": 10.0 * (i + 1),
            "description": "Generated item",
            "category": "misc",
            "image": None,
            "sold": i % 2 == 0,
            "dateOfSale": f"2022-{month}-{(i % 28) + 1:02d}T10:00:00+05:30",
        }
        for i in range(count)
    ]


def in_month(record: dict, month: str) -> bool:
    """Reference month predicate: substring match on the date text."""
    return f"{month}-" in record["dateOfSale"]


class RecordStore:
    """Synchronous view of the SQLite file the API reads from."""

    def __init__(self, path):
        self.path = path
        self.engine = create_engine(f"sqlite:///{path}")
        Base.metadata.create_all(self.engine)

    def insert(self, records: list[dict]) -> None:
        with Session(self.engine) as session:
            session.add_all([ProductTransaction.from_feed(record) for record in records])
            session.commit()

    def scalar(self, stmt):
        with Session(self.engine) as session:
            return session.execute(stmt).scalar_one()

    def scalars(self, stmt) -> list:
        with Session(self.engine) as session:
            return list(session.execute(stmt).scalars().all())

    def rows(self, stmt) -> list:
        with Session(self.engine) as session:
            return [tuple(row) for row in session.execute(stmt).all()]

    def count(self) -> int:
        return self.scalar(select(func.count()).select_from(ProductTransaction))

    def close(self) -> None:
        self.engine.dispose()


@pytest.fixture
def store(tmp_path):
    """An empty record store with tables created."""
    record_store = RecordStore(tmp_path / "store.db")
    yield record_store
    record_store.close()


@pytest.fixture
def seeded_store(store):
    """A record store holding SAMPLE_RECORDS."""
    store.insert(SAMPLE_RECORDS)
    return store


def _async_factory(path) -> async_sessionmaker:
    engine = create_async_engine(f"sqlite+aiosqlite:///{path}", poolclass=NullPool)
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
def session_factory(store):
    """Async session factory over the same file as ``store``."""
    return _async_factory(store.path)


@pytest.fixture
def client(session_factory):
    """API client whose handlers read and write the test store."""
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def broken_client(tmp_path):
    """API client pointed at a store without tables, so every query fails."""
    factory = _async_factory(tmp_path / "empty.db")
    app.dependency_overrides[get_session_factory] = lambda: factory
    yield TestClient(app)
    app.dependency_overrides.clear()
