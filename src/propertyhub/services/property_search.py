"""Listing search: filter, sort and reveal-count pagination.

Everything here is a pure function of ``(items, state)``. Items can be ORM
rows, Pydantic models or plain dicts; the input sequence is never mutated.
Sorting relies on ``sorted`` being stable, also with ``reverse=True``, so
listings with equal keys keep their incoming relative order.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Iterable, Sequence

from propertyhub.domain.enums import SortOption

PAGE_SIZE = 9
ALL_TYPES = "all"

_TEXT_FIELDS = ("title", "location", "city", "state")


def _get(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def _as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value.replace(tzinfo=None) if value.tzinfo else value
    if isinstance(value, str) and value:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        return parsed.replace(tzinfo=None) if parsed.tzinfo else parsed
    return datetime.min


@dataclass(frozen=True)
class PropertyFilters:
    """User-controlled filter inputs. Blank or None means 'no constraint'."""

    query: str = ""
    property_type: str = ALL_TYPES
    min_price: int | None = None
    max_price: int | None = None
    sort: SortOption = SortOption.NEWEST


def matches_query(item: Any, query: str) -> bool:
    needle = query.strip().lower()
    if not needle:
        return True
    return any(needle in str(_get(item, f) or "").lower() for f in _TEXT_FIELDS)


def matches_type(item: Any, property_type: str | None) -> bool:
    if not property_type or property_type == ALL_TYPES:
        return True
    return _get(item, "property_type") == property_type


def matches_price(item: Any, min_price: int | None, max_price: int | None) -> bool:
    """Inclusive bounds checked against the listing's starting price."""
    price = _get(item, "price_min")
    if price is None:
        return min_price is None and max_price is None
    if min_price is not None and price < min_price:
        return False
    if max_price is not None and price > max_price:
        return False
    return True


def filter_properties(items: Iterable[Any], filters: PropertyFilters) -> list[Any]:
    return [
        item for item in items
        if matches_query(item, filters.query)
        and matches_type(item, filters.property_type)
        and matches_price(item, filters.min_price, filters.max_price)
    ]


def sort_properties(items: Iterable[Any], sort: SortOption | str) -> list[Any]:
    sort = SortOption(sort)
    if sort is SortOption.PRICE_ASC:
        return sorted(items, key=lambda p: _get(p, "price_min") or 0)
    if sort is SortOption.PRICE_DESC:
        return sorted(items, key=lambda p: _get(p, "price_min") or 0, reverse=True)
    if sort is SortOption.AREA_ASC:
        return sorted(items, key=lambda p: _get(p, "area") or 0)
    if sort is SortOption.AREA_DESC:
        return sorted(items, key=lambda p: _get(p, "area") or 0, reverse=True)
    return sorted(items, key=lambda p: _as_datetime(_get(p, "created_at")), reverse=True)


def filter_and_sort(items: Iterable[Any], filters: PropertyFilters) -> list[Any]:
    return sort_properties(filter_properties(items, filters), filters.sort)


@dataclass
class RevealCursor:
    """How many results are revealed so far. Grows one page at a time."""

    page_size: int = PAGE_SIZE
    count: int = field(default=-1)

    def __post_init__(self):
        if self.page_size < 1:
            raise ValueError("page_size must be positive")
        if self.count < 0:
            self.count = self.page_size

    def load_more(self) -> int:
        self.count += self.page_size
        return self.count

    def reset(self) -> None:
        self.count = self.page_size

    def visible(self, results: Sequence[Any]) -> list[Any]:
        return list(results[: self.count])

    def has_more(self, total: int) -> bool:
        return self.count < total


@dataclass(frozen=True)
class SearchPage:
    items: list[Any]
    total: int
    shown: int
    page_size: int
    has_more: bool

    @property
    def empty(self) -> bool:
        return self.total == 0


@dataclass
class QueryState:
    """Filter inputs plus the reveal cursor they own.

    Replacing any filter input goes through ``with_filters``, which hands back
    a state whose cursor is reset to a single page.
    """

    filters: PropertyFilters = field(default_factory=PropertyFilters)
    cursor: RevealCursor = field(default_factory=RevealCursor)

    def with_filters(self, **changes) -> "QueryState":
        new_filters = replace(self.filters, **changes)
        cursor = RevealCursor(page_size=self.cursor.page_size)
        if new_filters == self.filters:
            cursor.count = self.cursor.count
        return QueryState(filters=new_filters, cursor=cursor)

    def load_more(self) -> None:
        self.cursor.load_more()

    def page(self, items: Iterable[Any]) -> SearchPage:
        results = filter_and_sort(items, self.filters)
        visible = self.cursor.visible(results)
        return SearchPage(
            items=visible,
            total=len(results),
            shown=len(visible),
            page_size=self.cursor.page_size,
            has_more=self.cursor.has_more(len(results)),
        )


def search(
    items: Iterable[Any],
    filters: PropertyFilters,
    pages: int = 1,
    page_size: int = PAGE_SIZE,
) -> SearchPage:
    """One-shot search: ``pages`` reveals worth of the filtered, sorted list."""
    state = QueryState(filters=filters, cursor=RevealCursor(page_size=page_size))
    for _ in range(max(pages, 1) - 1):
        state.load_more()
    return state.page(items)
