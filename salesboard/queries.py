"""
Query Builder

Pure functions translating report requests into SQLAlchemy statements
against the ``product_transaction`` table. Nothing here touches the store;
the statements are executed by ``ReportService``.

MONTH FILTER:
-------------
The month is matched as the substring ``"MM-"`` anywhere in the stored
``dateOfSale`` text, not as a calendar boundary. "11" therefore matches
November of every year, and also a date such as "2011-03-01". Without a
month the fragment is just ``"-"``, which every ISO date contains, so the
filter stays in the statement but selects everything.

PRICE BUCKETS:
--------------
Ten fixed ranges, inclusive on both ends:

    0-100, 101-200, 201-300, ..., 801-900, 901-Infinity

Integer prices land in exactly one bucket. A fractional price strictly
between two ranges (e.g. 100.5) lands in none.

PAGINATION:
-----------
``page`` defaults to 1 and ``perPage`` to 10. Values arrive as raw query
strings and are never rejected: an unparseable ``page`` or ``perPage``
drops the offset, an unparseable ``perPage`` drops the limit.
"""
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import Select, Text, cast, func, or_, select
from sqlalchemy.sql.elements import ColumnElement

from salesboard.models import ProductTransaction

DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 10


@dataclass(frozen=True)
class PriceRange:
    """A histogram bucket; ``max`` of None means unbounded."""
    min: int
    max: Optional[int] = None

    @property
    def label(self) -> str:
        upper = "Infinity" if self.max is None else str(self.max)
        return f"{self.min}-{upper}"

    def clause(self) -> ColumnElement[bool]:
        lower = ProductTransaction.price >= self.min
        if self.max is None:
            return lower
        return lower & (ProductTransaction.price <= self.max)


PRICE_RANGES: tuple[PriceRange, ...] = (
    PriceRange(0, 100),
    PriceRange(101, 200),
    PriceRange(201, 300),
    PriceRange(301, 400),
    PriceRange(401, 500),
    PriceRange(501, 600),
    PriceRange(601, 700),
    PriceRange(701, 800),
    PriceRange(801, 900),
    PriceRange(901),
)


def _parse_int(value: Optional[str], default: int) -> Optional[int]:
    """Parse a query string integer; None when it isn't one."""
    if value is None:
        return default
    try:
        return int(str(value).strip())
    except ValueError:
        return None


@dataclass(frozen=True)
class PageParams:
    """Raw listing parameters as they arrive on the query string."""
    month: Optional[str] = None
    search: str = ""
    page: Optional[str] = None
    per_page: Optional[str] = None

    @property
    def offset(self) -> Optional[int]:
        page = _parse_int(self.page, DEFAULT_PAGE)
        per_page = _parse_int(self.per_page, DEFAULT_PER_PAGE)
        if page is None or per_page is None:
            return None
        return max(0, (page - 1) * per_page)

    @property
    def limit(self) -> Optional[int]:
        per_page = _parse_int(self.per_page, DEFAULT_PER_PAGE)
        if not per_page:
            return None  # zero or garbage: unlimited
        return abs(per_page)


def month_clause(month: Optional[str]) -> ColumnElement[bool]:
    """Select records whose dateOfSale text contains ``"<month>-"``."""
    return ProductTransaction.date_of_sale.contains(f"{month or ''}-", autoescape=True)


def search_clause(search: Optional[str]) -> Optional[ColumnElement[bool]]:
    """Case-insensitive substring match on title, description or price text."""
    if not search:
        return None
    return or_(
        ProductTransaction.title.icontains(search, autoescape=True),
        ProductTransaction.description.icontains(search, autoescape=True),
        cast(ProductTransaction.price, Text).icontains(search, autoescape=True),
    )


def month_transactions_query(month: Optional[str]) -> Select:
    """Every record in the month, unpaginated, in insertion order."""
    return (
        select(ProductTransaction)
        .where(month_clause(month))
        .order_by(ProductTransaction.record_id)
    )


def transactions_query(params: PageParams) -> Select:
    """One page of month records matching the search text."""
    stmt = month_transactions_query(params.month)

    matches = search_clause(params.search)
    if matches is not None:
        stmt = stmt.where(matches)

    if params.offset:
        stmt = stmt.offset(params.offset)
    if params.limit is not None:
        stmt = stmt.limit(params.limit)
    return stmt


def total_sale_amount_query(month: Optional[str]) -> Select:
    """Sum of prices in the month, 0 when nothing matches."""
    return select(func.coalesce(func.sum(ProductTransaction.price), 0)).where(
        month_clause(month)
    )


def sold_count_query(month: Optional[str], sold: bool) -> Select:
    """Number of month records with the given sold flag."""
    return (
        select(func.count())
        .select_from(ProductTransaction)
        .where(month_clause(month), ProductTransaction.sold.is_(sold))
    )


def price_range_count_query(month: Optional[str], bucket: PriceRange) -> Select:
    """Number of month records priced within ``bucket``."""
    return (
        select(func.count())
        .select_from(ProductTransaction)
        .where(month_clause(month), bucket.clause())
    )


def category_counts_query(month: Optional[str]) -> Select:
    """``(category, count)`` rows for the month."""
    return (
        select(ProductTransaction.category, func.count().label("count"))
        .where(month_clause(month))
        .group_by(ProductTransaction.category)
        .order_by(ProductTransaction.category)
    )
