from __future__ import annotations

from fieldsales_console.app.application.aggregation import summarize_shop
from fieldsales_console.app.application.repository import parse_rows, team_officer_ids
from fieldsales_console.app.core.config import settings
from fieldsales_console.app.domain.models.entities import ShopSummary
from fieldsales_console.app.domain.models.identity import Identity
from fieldsales_console.app.domain.policies.scope_policy import ScopeDeniedError, get_scope
from fieldsales_console.app.domain.resources import ORDERS, SHOPS
from fieldsales_console.clients.backend_sdk.clients.tables import TableClient
from fieldsales_console.clients.backend_sdk.exceptions import NotFoundError
from fieldsales_console.clients.backend_sdk.models_rows import VisitRow
from fieldsales_console.clients.backend_sdk.postgrest import QuerySpec, eq, in_


class LoadShopDetailsUseCase:
    def __init__(self, tables: TableClient, identity: Identity | None) -> None:
        self.tables = tables
        self.identity = identity

    def execute(self, shop_id: str) -> ShopSummary:
        scope = get_scope(self.identity, SHOPS, lambda manager_id: team_officer_ids(self.tables, manager_id))
        if scope.denies_all:
            raise ScopeDeniedError(SHOPS.name, self.identity.role if self.identity else None)

        shop_result = self.tables.select(
            QuerySpec(
                table=SHOPS.table,
                filters=(eq("shop_id", shop_id), eq("is_deleted", False), *scope.clauses()),
                limit=1,
            )
        )
        shops = parse_rows(SHOPS, shop_result.rows)
        if not shops:
            raise NotFoundError(code="SHOP_NOT_FOUND", message=f"Shop {shop_id} not found", details=None, status_code=404)
        shop = shops[0]

        visit_result = self.tables.select(
            QuerySpec(table="visits", filters=(eq("shop_id", shop_id), eq("is_deleted", False)))
        )
        visits = [VisitRow.model_validate(row) for row in visit_result.rows]

        lines = []
        if visits:
            order_result = self.tables.select(
                QuerySpec(
                    table=ORDERS.table,
                    filters=(in_("visit_id", [visit.visit_id for visit in visits]), eq("is_deleted", False)),
                )
            )
            lines = parse_rows(ORDERS, order_result.rows)

        return summarize_shop(
            shop,
            visits,
            lines,
            top_n=settings.TOP_N,
            recent_limit=settings.RECENT_ORDERS_LIMIT,
            default_currency=settings.DEFAULT_CURRENCY,
        )
