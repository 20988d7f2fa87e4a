from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from fieldsales_console.app.domain.resources import read_field


@dataclass(frozen=True)
class SortState:
    column: str
    descending: bool = False

    @property
    def direction(self) -> str:
        return "desc" if self.descending else "asc"


@dataclass(frozen=True)
class PageSlice:
    rows: list[Any]
    total: int


def clean_filters(filters: Mapping[str, Any] | None) -> dict[str, Any]:
    return {key: value for key, value in (filters or {}).items() if value not in (None, "")}


def toggle_sort(current: SortState | None, column: str) -> SortState:
    if current is not None and current.column == column:
        return SortState(column, descending=not current.descending)
    return SortState(column)


def max_page(total: int, page_size: int) -> int:
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    return math.ceil(total / page_size)


def _sort_value(value: Any) -> tuple[int, int, Any]:
    # (is_empty, type_rank, comparable); strings compare case-folded.
    if value is None or (isinstance(value, str) and not value.strip()):
        return (1, 0, 0)
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, (bool, int, float, Decimal)):
        return (0, 0, value)
    if isinstance(value, datetime):
        return (0, 1, value.timestamp())
    if isinstance(value, date):
        return (0, 1, datetime(value.year, value.month, value.day).timestamp())
    return (0, 2, str(value).casefold())


def matches_search(row: Any, term: str, fields: Iterable[str]) -> bool:
    needle = term.strip().casefold()
    if not needle:
        return True
    for name in fields:
        value = read_field(row, name)
        if value is not None and needle in str(value).casefold():
            return True
    return False


def _same(actual: Any, expected: Any) -> bool:
    if isinstance(actual, Enum):
        actual = actual.value
    return actual == expected or str(actual) == str(expected)


def matches_filters(row: Any, filters: Mapping[str, Any]) -> bool:
    return all(_same(read_field(row, name), expected) for name, expected in clean_filters(filters).items())


def sort_rows(rows: Iterable[Any], sort: SortState | None, key_field: str | None = None) -> list[Any]:
    if sort is None:
        return list(rows)

    def _key(row: Any) -> tuple[tuple[int, int, Any], tuple[int, int, Any]]:
        tie_break = _sort_value(read_field(row, key_field)) if key_field else (1, 0, 0)
        return _sort_value(read_field(row, sort.column)), tie_break

    return sorted(rows, key=_key, reverse=sort.descending)


def paginate(rows: Sequence[Any], page: int, page_size: int) -> list[Any]:
    start = (max(page, 1) - 1) * page_size
    return list(rows[start : start + page_size])


def apply(
    rows: Iterable[Any],
    *,
    search: str = "",
    search_fields: Iterable[str] = (),
    filters: Mapping[str, Any] | None = None,
    sort: SortState | None = None,
    page: int = 1,
    page_size: int = 10,
    key_field: str | None = None,
) -> PageSlice:
    fields = tuple(search_fields)
    narrowed = [row for row in rows if matches_search(row, search, fields) and matches_filters(row, filters or {})]
    ordered = sort_rows(narrowed, sort, key_field)
    return PageSlice(rows=paginate(ordered, page, page_size), total=len(ordered))
