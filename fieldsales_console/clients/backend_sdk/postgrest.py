"""Query specs for the PostgREST collections and their URL encoding.

A ``QuerySpec`` is an immutable description of one select: the collection,
the projected columns, ANDed filters (optionally with a single OR group), the
ordering, the row window and whether an exact count is wanted. ``to_params``
turns it into the ``(key, value)`` pairs PostgREST expects, e.g.
``("created_at", "gte.2026-01-01T00:00:00+00:00")`` or
``("or", "(name.ilike.*abc*,city.ilike.*abc*)")``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, Union

# Characters that must be quoted inside in.(...) lists and or=(...) trees.
_RESERVED = set(',.:()"\\')
_CONTENT_RANGE_RE = re.compile(r"^(?:\d+-\d+|\*)/(\d+|\*)$")


def format_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def quote(value: str) -> str:
    if any(char in _RESERVED for char in value) or value != value.strip():
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return value


@dataclass(frozen=True)
class Filter:
    column: str
    operator: str
    value: Any = None
    negate: bool = False

    def _expression(self, nested: bool) -> str:
        prefix = "not." if self.negate else ""
        if self.operator == "in":
            items = ",".join(quote(format_value(item)) for item in self.value)
            return f"{prefix}in.({items})"
        raw = format_value(self.value)
        if nested:
            raw = quote(raw)
        return f"{prefix}{self.operator}.{raw}"

    def encode(self) -> tuple[str, str]:
        return self.column, self._expression(nested=False)

    def encode_nested(self) -> str:
        return f"{self.column}.{self._expression(nested=True)}"


@dataclass(frozen=True)
class AnyOf:
    filters: tuple[Filter, ...]

    def encode(self) -> tuple[str, str]:
        return "or", "(" + ",".join(item.encode_nested() for item in self.filters) + ")"


Clause = Union[Filter, AnyOf]


@dataclass(frozen=True)
class OrderBy:
    column: str
    descending: bool = False

    def encode(self) -> str:
        return f"{self.column}.{'desc' if self.descending else 'asc'}"


@dataclass(frozen=True)
class QuerySpec:
    table: str
    select: str = "*"
    filters: tuple[Clause, ...] = ()
    order: tuple[OrderBy, ...] = ()
    offset: int | None = None
    limit: int | None = None
    count: bool = False

    def filter_params(self) -> list[tuple[str, str]]:
        return [clause.encode() for clause in self.filters]

    def to_params(self) -> list[tuple[str, str]]:
        params = [("select", self.select), *self.filter_params()]
        if self.order:
            params.append(("order", ",".join(item.encode() for item in self.order)))
        if self.offset is not None:
            params.append(("offset", str(self.offset)))
        if self.limit is not None:
            params.append(("limit", str(self.limit)))
        return params


def eq(column: str, value: Any) -> Filter:
    return Filter(column, "eq", value)


def in_(column: str, values: Iterable[Any]) -> Filter:
    return Filter(column, "in", tuple(values))


def gte(column: str, value: Any) -> Filter:
    return Filter(column, "gte", value)


def lt(column: str, value: Any) -> Filter:
    return Filter(column, "lt", value)


def ilike(column: str, pattern: str) -> Filter:
    return Filter(column, "ilike", pattern)


def not_null(column: str) -> Filter:
    return Filter(column, "is", None, negate=True)


def contains_any(columns: Iterable[str], term: str) -> AnyOf:
    return AnyOf(tuple(ilike(column, f"*{term}*") for column in columns))


def parse_content_range(header: str | None) -> int | None:
    if not header:
        return None
    match = _CONTENT_RANGE_RE.match(header.strip())
    if match is None or match.group(1) == "*":
        return None
    return int(match.group(1))
