"""SQLAlchemy ORM models for the transaction record store."""
from typing import Any

from sqlalchemy import Boolean, Column, Float, Integer, Text

from salesboard.database import Base


class ProductTransaction(Base):
    """A product sale record imported from the seed feed."""
    __tablename__ = "product_transaction"

    record_id = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(Integer, index=True)  # Feed identifier, repeated on every re-seed
    title = Column(Text)
    description = Column(Text)
    price = Column(Float)
    category = Column(Text, index=True)
    sold = Column(Boolean)
    date_of_sale = Column(Text, index=True)  # Kept as the feed's ISO string
    image = Column(Text)

    @classmethod
    def from_feed(cls, record: dict[str, Any]) -> "ProductTransaction":
        """Build a row from one feed record, taking fields as-is."""
        return cls(
            id=record.get("id"),
            title=record.get("title"),
            description=record.get("description"),
            price=record.get("price"),
            category=record.get("category"),
            sold=record.get("sold"),
            date_of_sale=record.get("dateOfSale"),
            image=record.get("image"),
        )
