"""Product query building.

Translates the loosely typed listing options received from clients into a
normalized ``ProductQuery``: a filter predicate, a sort spec and a page
window. Store adapters execute the query; ``PaginatedResult`` carries the
page back together with its pagination metadata.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Generic, TypeVar

from catalog_api.domain.entities import Product
from catalog_api.domain.exceptions import ValidationError

T = TypeVar("T")

# Options understood by build_query, as sent on the wire
RECOGNIZED_OPTIONS = frozenset(
    {
        "category",
        "minPrice",
        "maxPrice",
        "minRating",
        "search",
        "userId",
        "sortBy",
        "sortOrder",
        "page",
        "limit",
    }
)

DEFAULT_SORT_FIELD = "createdAt"


@dataclass(frozen=True)
class QueryConfig:
    """Policy knobs for query building.

    Attributes:
        lenient_numeric_parsing: Treat unparseable numeric options as absent
            instead of rejecting them.
        default_limit: Page size when ``limit`` is absent.
        max_limit: Upper bound for ``limit``.
        max_page: Upper bound for ``page``.
    """

    lenient_numeric_parsing: bool = True
    default_limit: int = 10
    max_limit: int = 100
    max_page: int = 100_000


@dataclass(frozen=True)
class ProductFilter:
    """Filter predicate over products.

    All present conditions must hold. ``search`` matches when either the
    name or the description contains it, ignoring case.

    Attributes:
        category: Exact category.
        min_price: Inclusive lower price bound.
        max_price: Inclusive upper price bound.
        min_rating: Inclusive lower rating bound.
        search: Case-insensitive substring for name or description.
        owner_id: Exact owner.
    """

    category: str | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    min_rating: Decimal | None = None
    search: str | None = None
    owner_id: str | None = None

    @property
    def is_empty(self) -> bool:
        """Check if no condition is set."""
        return self == ProductFilter()

    def matches(self, product: Product) -> bool:
        """Evaluate the predicate against a product.

        Args:
            product: Product to test.

        Returns:
            True if every present condition holds.
        """
        if self.category is not None and product.category != self.category:
            return False
        if self.min_price is not None and product.price < self.min_price:
            return False
        if self.max_price is not None and product.price > self.max_price:
            return False
        if self.min_rating is not None and product.rating < self.min_rating:
            return False
        if self.owner_id is not None and product.owner_id != self.owner_id:
            return False
        if self.search is not None:
            needle = self.search.casefold()
            haystacks = (product.name or "", product.description or "")
            if not any(needle in text.casefold() for text in haystacks):
                return False
        return True


@dataclass(frozen=True)
class SortSpec:
    """Sort specification.

    ``field`` is kept exactly as requested; adapters decide how to handle
    fields they cannot sort on.
    """

    field: str = DEFAULT_SORT_FIELD
    descending: bool = True

    @property
    def order(self) -> str:
        """Sort order as ``asc``/``desc``."""
        return "desc" if self.descending else "asc"


@dataclass(frozen=True)
class ProductQuery:
    """Normalized listing query.

    Attributes:
        filter: Filter predicate.
        sort: Sort specification.
        page: Page number (1-indexed).
        limit: Items per page.
    """

    filter: ProductFilter = field(default_factory=ProductFilter)
    sort: SortSpec = field(default_factory=SortSpec)
    page: int = 1
    limit: int = 10

    @property
    def skip(self) -> int:
        """Calculate offset from page number."""
        return (self.page - 1) * self.limit


@dataclass
class PaginatedResult(Generic[T]):
    """Paginated result container.

    Attributes:
        items: List of items.
        total: Total count of matching items.
        page: Current page.
        limit: Items per page.
    """

    items: list[T]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        """Calculate total pages."""
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def has_next(self) -> bool:
        """Check if there's a next page."""
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        """Check if there's a previous page."""
        return self.page > 1

    def pagination(self) -> dict[str, int]:
        """Pagination metadata as sent to clients."""
        return {
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "totalPages": self.total_pages,
        }


def _is_absent(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def parse_decimal(value: Any) -> Decimal | None:
    """Parse a finite decimal from a string or number.

    Args:
        value: Raw value.

    Returns:
        Parsed decimal, or None when the value is not a finite number.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        number = Decimal(str(value))
    elif isinstance(value, str):
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            return None
    else:
        return None
    return number if number.is_finite() else None


def _numeric_option(params: Mapping[str, Any], name: str, config: QueryConfig) -> Decimal | None:
    raw = params.get(name)
    if _is_absent(raw):
        return None
    number = parse_decimal(raw)
    if number is None and not config.lenient_numeric_parsing:
        raise ValidationError(f"'{name}' must be a number", fields=[name])
    return number


def _bounded_integer_option(
    params: Mapping[str, Any],
    name: str,
    default: int,
    maximum: int,
    config: QueryConfig,
) -> int:
    number = _numeric_option(params, name, config)
    if number is None:
        return default
    # Compare as Decimal so that huge exponents never become huge ints
    if number < 1:
        return 1
    if number > maximum:
        return maximum
    return int(number)


def _text_option(params: Mapping[str, Any], name: str) -> str | None:
    raw = params.get(name)
    if _is_absent(raw):
        return None
    return str(raw)


def build_query(
    params: Mapping[str, Any],
    config: QueryConfig | None = None,
) -> ProductQuery:
    """Build a normalized product query from listing options.

    Unrecognized options are ignored. Empty values count as absent. Page
    and limit are clamped to at least 1, page to ``config.max_page`` and
    limit to ``config.max_limit``.

    Args:
        params: Listing options keyed by their wire names.
        config: Query policy, defaults to lenient parsing.

    Returns:
        Normalized product query.

    Raises:
        ValidationError: If a numeric option is malformed and lenient
            parsing is disabled.
    """
    config = config or QueryConfig()
    params = {k: v for k, v in params.items() if k in RECOGNIZED_OPTIONS}

    product_filter = ProductFilter(
        category=_text_option(params, "category"),
        min_price=_numeric_option(params, "minPrice", config),
        max_price=_numeric_option(params, "maxPrice", config),
        min_rating=_numeric_option(params, "minRating", config),
        search=_text_option(params, "search"),
        owner_id=_text_option(params, "userId"),
    )

    sort_order = _text_option(params, "sortOrder") or "desc"
    sort = SortSpec(
        field=_text_option(params, "sortBy") or DEFAULT_SORT_FIELD,
        descending=sort_order.strip().lower() != "asc",
    )

    page = _bounded_integer_option(params, "page", 1, config.max_page, config)
    limit = _bounded_integer_option(
        params, "limit", config.default_limit, config.max_limit, config
    )

    return ProductQuery(filter=product_filter, sort=sort, page=page, limit=limit)
