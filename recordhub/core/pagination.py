"""
Pagination, sorting and search helpers for SQLAlchemy list queries.

Two halves:

- ``build_page_request`` turns untrusted query parameters into a
  ``PageRequest``. It never raises: anything invalid silently falls back to
  the configured default. Numbers are read the lenient way a leading-integer
  cast reads them, so a present but non-numeric ``per_page`` becomes 1 and
  ``page`` is capped so its offset fits a 64-bit integer.
- ``paginate`` / ``paginate_with_search_callback`` apply a ``PageRequest``
  to a ``select()`` and return a ``Page`` with its metadata.

Search uses a case-insensitive substring match with ``%`` and ``_`` in the
search text escaped. Ordering is by the single requested sort field; rows
with equal sort values come back in whatever order the database picks, so
ties are not stable across pages.
"""
import math
import re
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from fastapi import Request
from pydantic import BaseModel
from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")

SORT_ORDERS = ("asc", "desc")

# Largest offset a signed 64-bit LIMIT/OFFSET can carry
MAX_OFFSET = 2 ** 63 - 1

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

SearchCallback = Callable[[Select, str], Select]


@dataclass(frozen=True)
class PaginationConfig:
    """Per-endpoint pagination settings."""
    max_per_page: int = 100
    default_per_page: int = 15
    default_sort_field: str = "id"
    default_sort_order: str = "desc"
    allowed_sort_fields: tuple[str, ...] = ("id", "created_at", "updated_at")
    search_param: str = "search"


@dataclass(frozen=True)
class PageRequest:
    """Normalized pagination, sorting and search parameters."""
    page: int = 1
    per_page: int = 15
    sort_field: str | None = None
    sort_order: str = "desc"
    search: str | None = None
    filters: Mapping[str, Any] = field(default_factory=dict)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page

    def has_search(self) -> bool:
        return bool(self.search)

    def has_filters(self) -> bool:
        return bool(self.filters)

    def get_filter(self, key: str, default: Any = None) -> Any:
        return self.filters.get(key, default)


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of results plus the metadata describing the full result set."""
    items: list[T]
    current_page: int
    per_page: int
    total: int
    last_page: int

    def map(self, fn: Callable[[T], Any]) -> "Page[Any]":
        """Return the same page with every item transformed by ``fn``."""
        return Page(
            items=[fn(item) for item in self.items],
            current_page=self.current_page,
            per_page=self.per_page,
            total=self.total,
            last_page=self.last_page,
        )


class PageMeta(BaseModel):
    """Pagination metadata returned alongside list responses."""
    current_page: int
    per_page: int
    total: int
    last_page: int


def page_meta(page: Page) -> PageMeta:
    return PageMeta(
        current_page=page.current_page,
        per_page=page.per_page,
        total=page.total,
        last_page=page.last_page,
    )


def _parse_int(value: Any) -> int:
    """Leading-integer cast: "12abc" is 12, "2.5" is 2 and anything non-numeric is 0."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    match = _LEADING_INT.match(str(value))
    if not match:
        return 0
    digits = match.group(1)
    if len(digits.lstrip("+-")) > 19:
        return -MAX_OFFSET if digits.startswith("-") else MAX_OFFSET
    return int(digits)


def build_page_request(raw: Mapping[str, Any], config: PaginationConfig | None = None) -> PageRequest:
    """
    Build a ``PageRequest`` from raw request input.

    Args:
        raw: Untrusted parameters (query string, JSON body, ...)
        config: Endpoint settings; defaults to ``PaginationConfig()``

    Returns:
        A valid ``PageRequest``. Invalid values degrade to defaults.
    """
    config = config or PaginationConfig()

    raw_per_page = raw.get("per_page", raw.get("perPage"))
    if raw_per_page is None:
        per_page = config.default_per_page
    else:
        per_page = min(_parse_int(raw_per_page), config.max_per_page)
    per_page = max(1, per_page)

    raw_page = raw.get("page")
    page = max(1, _parse_int(raw_page)) if raw_page is not None else 1
    page = min(page, MAX_OFFSET // per_page + 1)

    sort_field = raw.get("sort_field")
    if sort_field not in config.allowed_sort_fields:
        sort_field = config.default_sort_field

    sort_order = raw.get("sort_order")
    sort_order = sort_order.lower() if isinstance(sort_order, str) else None
    if sort_order not in SORT_ORDERS:
        sort_order = config.default_sort_order

    search = raw.get(config.search_param)
    if not isinstance(search, str):
        search = None

    filters = raw.get("filters")
    if not isinstance(filters, Mapping):
        filters = {}

    return PageRequest(
        page=page,
        per_page=per_page,
        sort_field=sort_field,
        sort_order=sort_order,
        search=search,
        filters=dict(filters),
    )


def page_request_dependency(config: PaginationConfig) -> Callable[[Request], Awaitable[PageRequest]]:
    """
    FastAPI dependency factory reading pagination parameters from the query string.

    ``filters[status]=open`` style parameters are collected into ``filters``.

    Usage:
        RECORDS_PAGINATION = PaginationConfig(allowed_sort_fields=("id", "text_field"))

        @router.get("")
        async def list_records(params: PageRequest = Depends(page_request_dependency(RECORDS_PAGINATION))):
            ...
    """
    async def dependency(request: Request) -> PageRequest:
        raw: dict[str, Any] = {}
        filters: dict[str, Any] = {}
        for key, value in request.query_params.items():
            if key.startswith("filters[") and key.endswith("]"):
                filters[key[len("filters["):-1]] = value
            else:
                raw[key] = value
        if filters:
            raw["filters"] = filters
        return build_page_request(raw, config)

    return dependency


def _column(query: Select, name: str):
    entity = query.column_descriptions[0]["entity"]
    return getattr(entity, name)


def _apply_sort(query: Select, params: PageRequest) -> Select:
    if not params.sort_field:
        return query
    column = _column(query, params.sort_field)
    return query.order_by(column.asc() if params.sort_order == "asc" else column.desc())


async def _fetch_page(db: AsyncSession, query: Select, params: PageRequest) -> Page:
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = int((await db.execute(count_query)).scalar_one())

    items = []
    if params.offset < total:
        statement = _apply_sort(query, params).offset(params.offset).limit(params.per_page)
        result = await db.execute(statement)
        items = list(result.scalars().all())

    return Page(
        items=items,
        current_page=params.page,
        per_page=params.per_page,
        total=total,
        last_page=max(1, math.ceil(total / params.per_page)),
    )


async def paginate(
    db: AsyncSession,
    query: Select,
    params: PageRequest,
    searchable_fields: Sequence[str] = (),
) -> Page:
    """
    Apply search, sorting and offset/limit to ``query`` and execute it.

    Args:
        db: Database session
        query: A ``select(Model)`` with any constraints already applied
        params: Normalized page request
        searchable_fields: Column names matched against the search text (OR-combined)

    Returns:
        Page of ORM instances. A page past the end has no items but keeps the real totals.
    """
    if params.has_search() and searchable_fields:
        query = query.where(
            or_(*(_column(query, name).icontains(params.search, autoescape=True) for name in searchable_fields))
        )
    return await _fetch_page(db, query, params)


async def paginate_with_search_callback(
    db: AsyncSession,
    query: Select,
    params: PageRequest,
    search_callback: SearchCallback | None = None,
) -> Page:
    """
    Like ``paginate`` but lets the caller apply the search.

    ``search_callback(query, search)`` is only invoked when a search is present and
    must return the constrained query (``Select`` objects are immutable).
    """
    if params.has_search() and search_callback is not None:
        query = search_callback(query, params.search)
    return await _fetch_page(db, query, params)
