from __future__ import annotations

from fieldsales_console.app.application.repository import team_officer_ids
from fieldsales_console.app.domain.models.identity import Identity
from fieldsales_console.app.domain.policies.scope_policy import get_scope
from fieldsales_console.app.domain.resources import ResourceDefinition
from fieldsales_console.clients.backend_sdk.clients.tables import TableClient
from fieldsales_console.clients.backend_sdk.postgrest import OrderBy, QuerySpec, eq, not_null

_OPTION_COLUMNS = {
    "shops": ("territory", "city", "state"),
    "products": ("category",),
    "schemes": ("scheme_scope",),
}


class LoadFilterOptionsUseCase:
    """Distinct values for the dropdown filters of a resource, restricted to what the identity can see."""

    def __init__(self, tables: TableClient, identity: Identity | None) -> None:
        self.tables = tables
        self.identity = identity

    def execute(self, resource: ResourceDefinition) -> dict[str, list[dict[str, str]] | list[str]]:
        options: dict[str, list[dict[str, str]] | list[str]] = {}
        if resource.name == "orders":
            options["sales_officer"] = self._people("sales_officers", "sales_officers_id")
            if self.identity is not None and self.identity.is_admin:
                options["area_manager"] = self._people("area_sales_managers", "asm_user_id")
            return options
        if resource.name == "sales_officers":
            if self.identity is not None and self.identity.is_admin:
                options["reporting_manager"] = self._people("area_sales_managers", "asm_user_id")
            return options

        columns = _OPTION_COLUMNS.get(resource.name, ())
        if not columns:
            return options
        scope = get_scope(self.identity, resource, lambda manager_id: team_officer_ids(self.tables, manager_id))
        filter_names = {definition.column: name for name, definition in resource.filters.items()}
        for column in columns:
            name = filter_names.get(column, column)
            if scope.denies_all:
                options[name] = []
                continue
            flag = resource.soft_flag
            result = self.tables.select(
                QuerySpec(
                    table=resource.table,
                    select=column,
                    filters=(*scope.clauses(), eq(flag.column, flag.visible_value), not_null(column)),
                )
            )
            options[name] = sorted({str(row[column]) for row in result.rows if row.get(column) not in (None, "")})
        return options

    def _people(self, table: str, key: str) -> list[dict[str, str]]:
        definition = self._scoped_people_filters(table)
        if definition is None:
            return []
        result = self.tables.select(
            QuerySpec(
                table=table,
                select=f"{key},name",
                filters=(eq("is_active", True), *definition),
                order=(OrderBy("name"),),
            )
        )
        return [{"id": str(row[key]), "name": str(row.get("name") or "")} for row in result.rows if row.get(key)]

    def _scoped_people_filters(self, table: str) -> tuple | None:
        if self.identity is None:
            return None
        if self.identity.is_admin:
            return ()
        if table == "sales_officers":
            return (eq("reporting_manager_id", self.identity.id),)
        return None
