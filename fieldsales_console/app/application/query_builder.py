from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from fieldsales_console.app.application.pipeline import SortState, clean_filters
from fieldsales_console.app.application.time_ranges import resolve_preset
from fieldsales_console.app.domain.models.identity import Identity
from fieldsales_console.app.domain.policies.scope_policy import Scope
from fieldsales_console.app.domain.resources import FilterKind, PagingMode, ResourceDefinition
from fieldsales_console.clients.backend_sdk.postgrest import Clause, OrderBy, QuerySpec, contains_any, eq, gte, lt

ALL_TIME = "all"


@dataclass
class ListQuery:
    page: int = 1
    page_size: int = 10
    search: str = ""
    filters: dict[str, Any] = field(default_factory=dict)
    sort: SortState | None = None
    active_only: bool = True


def default_sort(resource: ResourceDefinition) -> SortState:
    return SortState(resource.default_sort_column, resource.default_sort_descending)


def applicable_filters(
    resource: ResourceDefinition,
    filters: Mapping[str, Any],
    identity: Identity | None,
) -> dict[str, Any]:
    """Known, non-empty filters the identity may use; admin-only ones are dropped for managers."""
    applicable: dict[str, Any] = {}
    for name, value in clean_filters(filters).items():
        definition = resource.filters.get(name)
        if definition is None:
            raise ValueError(f"Unknown filter for {resource.name}: {name}")
        if definition.admin_only and not (identity and identity.is_admin):
            continue
        applicable[name] = value
    return applicable


def filter_clauses(
    resource: ResourceDefinition,
    filters: Mapping[str, Any],
    identity: Identity | None,
    now: datetime | None = None,
) -> list[Clause]:
    clauses: list[Clause] = []
    for name, value in applicable_filters(resource, filters, identity).items():
        definition = resource.filters[name]
        if definition.kind is FilterKind.TIME_RANGE:
            if str(value).strip().lower() == ALL_TIME:
                continue
            start, end = resolve_preset(str(value), now)
            clauses.extend([gte(definition.column, start), lt(definition.column, end)])
        else:
            clauses.append(eq(definition.column, value))
    return clauses


def build_query(
    resource: ResourceDefinition,
    scope: Scope,
    query: ListQuery,
    *,
    identity: Identity | None = None,
    now: datetime | None = None,
) -> QuerySpec:
    if scope.denies_all:
        raise ValueError("Cannot build a query for a deny-all scope")

    clauses: list[Clause] = list(scope.clauses())
    flag = resource.soft_flag
    if not (flag.toggleable and not query.active_only):
        clauses.append(eq(flag.column, flag.visible_value))
    clauses.extend(filter_clauses(resource, query.filters, identity, now))

    term = query.search.strip()
    if term and resource.pushes_search:
        clauses.append(contains_any(resource.search_fields, term))

    sort = query.sort or default_sort(resource)
    if sort.column not in resource.sortable:
        raise ValueError(f"{resource.name} cannot be sorted by {sort.column}")

    offset = limit = None
    if resource.paging is PagingMode.SERVER:
        offset = (max(query.page, 1) - 1) * query.page_size
        limit = query.page_size

    return QuerySpec(
        table=resource.table,
        select=resource.select,
        filters=tuple(clauses),
        order=_order_clauses(resource, sort),
        offset=offset,
        limit=limit,
        count=resource.paging is PagingMode.SERVER,
    )


def _order_clauses(resource: ResourceDefinition, sort: SortState) -> tuple[OrderBy, ...]:
    # Aggregated columns such as total_amount do not exist on the view; the pipeline sorts those.
    if resource.aggregated:
        return (OrderBy("created_at", descending=True), OrderBy(resource.key_field))
    primary = OrderBy(sort.column, sort.descending)
    if sort.column == resource.key_field:
        return (primary,)
    return (primary, OrderBy(resource.key_field, sort.descending))
