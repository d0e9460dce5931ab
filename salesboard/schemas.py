"""Pydantic schemas for report responses."""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TransactionSchema(BaseModel):
    """A single transaction record as returned by the API."""
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None
    sold: Optional[bool] = None
    date_of_sale: Optional[str] = Field(None, serialization_alias="dateOfSale")
    image: Optional[str] = None


class StatisticsResponse(BaseModel):
    """Response body for GET /statistics."""
    total_sale_amount: float = Field(
        ..., serialization_alias="totalSaleAmount", description="Sum of prices in the month"
    )
    total_sold_items: int = Field(..., serialization_alias="totalSoldItems")
    total_not_sold_items: int = Field(..., serialization_alias="totalNotSoldItems")


class BarChartBucket(BaseModel):
    """Record count for one price range."""
    range: str = Field(..., description='Bucket label, "min-max"')
    count: int


class PieChartSlice(BaseModel):
    """Record count for one category."""
    category: Optional[str]
    count: int


class CombinedResponse(BaseModel):
    """Response body for GET /combined."""
    transactions: list[TransactionSchema]
    statistics: StatisticsResponse
    bar_chart: list[BarChartBucket] = Field(..., serialization_alias="barChart")
    pie_chart: list[PieChartSlice] = Field(..., serialization_alias="pieChart")
