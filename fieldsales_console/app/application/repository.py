from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from fieldsales_console.app.application.aggregation import aggregate_orders
from fieldsales_console.app.application.pipeline import PageSlice, apply
from fieldsales_console.app.application.query_builder import ListQuery, applicable_filters, build_query, default_sort
from fieldsales_console.app.application.time_ranges import local_now
from fieldsales_console.app.domain.models.identity import Identity
from fieldsales_console.app.domain.policies.scope_policy import Scope, ScopeDeniedError, get_scope
from fieldsales_console.app.domain.resources import FilterKind, PagingMode, ResourceDefinition
from fieldsales_console.app.infrastructure.logging.logger import get_logger, log_action
from fieldsales_console.clients.backend_sdk.clients.tables import TableClient
from fieldsales_console.clients.backend_sdk.exceptions import QueryError
from fieldsales_console.clients.backend_sdk.postgrest import QuerySpec, eq


def team_officer_ids(tables: TableClient, manager_id: str) -> list[str]:
    # Inactive officers stay in the team so their history remains visible.
    result = tables.select(
        QuerySpec(table="sales_officers", select="sales_officers_id", filters=(eq("reporting_manager_id", manager_id),))
    )
    return [str(row["sales_officers_id"]) for row in result.rows if row.get("sales_officers_id")]


def parse_rows(resource: ResourceDefinition, raw_rows: list[dict[str, Any]]) -> list[Any]:
    try:
        return [resource.row_model.model_validate(raw) for raw in raw_rows]
    except ValidationError as exc:
        raise QueryError(
            code="INVALID_ROW",
            message=f"Unexpected {resource.name} row shape",
            details=exc.errors(include_url=False),
            status_code=0,
        ) from exc


class ResourceRepository:
    """Fetches pages of one resource and soft-deletes its rows on behalf of an identity."""

    def __init__(
        self,
        resource: ResourceDefinition,
        tables: TableClient,
        identity: Identity | None,
        *,
        now: Callable[[], datetime] = local_now,
        logger: logging.Logger | None = None,
    ) -> None:
        self.resource = resource
        self._tables = tables
        self._identity = identity
        self._now = now
        self._logger = logger or get_logger(__name__)

    def scope(self) -> Scope:
        return get_scope(self._identity, self.resource, lambda manager_id: team_officer_ids(self._tables, manager_id))

    def fetch_page(self, query: ListQuery) -> PageSlice:
        scope = self.scope()
        if scope.denies_all:
            self._log("fetch", "denied", reason=getattr(scope, "reason", None))
            return PageSlice(rows=[], total=0)

        spec = build_query(self.resource, scope, query, identity=self._identity, now=self._now())
        result = self._tables.select(spec)
        rows = [row for row in parse_rows(self.resource, result.rows) if scope.matches(row)]

        if self.resource.paging is PagingMode.SERVER:
            total = result.count if result.count is not None else len(rows)
            page = PageSlice(rows=rows, total=total)
        else:
            if self.resource.aggregated:
                rows = aggregate_orders(rows)
            page = apply(
                rows,
                search=query.search,
                search_fields=self.resource.search_fields,
                filters=self._client_filters(query),
                sort=query.sort or default_sort(self.resource),
                page=query.page,
                page_size=query.page_size,
                key_field=self.resource.key_field,
            )
        self._log("fetch", "success", page=query.page, total=page.total)
        return page

    def soft_delete(self, resource_id: str) -> None:
        identity = self._identity
        if identity is None or identity.role not in self.resource.deactivate_roles:
            raise ScopeDeniedError(
                self.resource.name,
                identity.role if identity else None,
                f"Only administrators can deactivate {self.resource.name.replace('_', ' ')}",
            )
        match = [eq(self.resource.key_field, resource_id)]
        if not identity.is_admin:
            scope = self.scope()
            if scope.denies_all:
                raise ScopeDeniedError(self.resource.name, identity.role, "Nothing in your team can be deactivated")
            if self.resource.mutation_scope_field:
                match.extend(scope.clauses())
            elif scope.clauses():
                # the write table lacks the scope column, so check visibility through the read view
                self._require_visible(resource_id, scope, identity)
        flag = self.resource.soft_flag
        self._tables.update(self.resource.writable_table, match, {flag.column: flag.deactivated_value})

    def _require_visible(self, resource_id: str, scope: Scope, identity: Identity) -> None:
        key = self.resource.key_field
        result = self._tables.select(
            QuerySpec(
                table=self.resource.table,
                select=key,
                filters=(eq(key, resource_id), *scope.clauses()),
                limit=1,
            )
        )
        if not result.rows:
            self._log("deactivate", "denied", resource_id=resource_id)
            raise ScopeDeniedError(self.resource.name, identity.role, f"Cannot deactivate {resource_id}: it is outside your team")

    def _client_filters(self, query: ListQuery) -> dict[str, Any]:
        filters: dict[str, Any] = {}
        for name, value in applicable_filters(self.resource, query.filters, self._identity).items():
            definition = self.resource.filters[name]
            if definition.kind is FilterKind.EQUALS:
                filters[definition.column] = value
        return filters

    def _log(self, action: str, outcome: str, **extra: Any) -> None:
        log_action(
            self._logger,
            module=self.resource.name,
            action=action,
            actor_role=self._identity.role.value if self._identity else None,
            actor_id=self._identity.id if self._identity else None,
            outcome=outcome,
            **extra,
        )
