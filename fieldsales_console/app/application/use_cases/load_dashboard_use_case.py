from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

from fieldsales_console.app.application.aggregation import aggregate_orders, monthly_sales, percent_change, recent_activity
from fieldsales_console.app.application.repository import parse_rows, team_officer_ids
from fieldsales_console.app.application.time_ranges import add_months, local_now
from fieldsales_console.app.core.config import settings
from fieldsales_console.app.domain.models.entities import DashboardStats, Order
from fieldsales_console.app.domain.models.identity import Identity
from fieldsales_console.app.domain.policies.scope_policy import ScopeDeniedError, get_scope
from fieldsales_console.app.domain.resources import ORDERS, SALES_OFFICERS, SHOPS
from fieldsales_console.clients.backend_sdk.clients.tables import TableClient
from fieldsales_console.clients.backend_sdk.postgrest import QuerySpec, eq


def _window_total(orders: list[Order], start: datetime, end: datetime) -> tuple[Decimal, int]:
    selected = [order for order in orders if order.created_at is not None and start <= order.created_at < end]
    return sum((order.total_amount for order in selected), Decimal("0")), len(selected)


class LoadDashboardUseCase:
    def __init__(self, tables: TableClient, identity: Identity | None, now: Callable[[], datetime] = local_now) -> None:
        self.tables = tables
        self.identity = identity
        self.now = now

    def execute(self) -> DashboardStats:
        if self.identity is None:
            raise ScopeDeniedError("dashboard", None, "Sign in to view the dashboard")

        teams: dict[str, list[str]] = {}

        def lookup(manager_id: str) -> list[str]:
            if manager_id not in teams:
                teams[manager_id] = team_officer_ids(self.tables, manager_id)
            return teams[manager_id]

        order_scope = get_scope(self.identity, ORDERS, lookup)
        orders: list[Order] = []
        if not order_scope.denies_all:
            result = self.tables.select(
                QuerySpec(
                    table=ORDERS.table,
                    filters=(*order_scope.clauses(), eq("is_deleted", False)),
                )
            )
            orders = aggregate_orders(parse_rows(ORDERS, result.rows))

        shop_scope = get_scope(self.identity, SHOPS, lookup)
        active_shops = 0
        if not shop_scope.denies_all:
            active_shops = self.tables.count(
                QuerySpec(table=SHOPS.table, select="shop_id", filters=(*shop_scope.clauses(), eq("is_deleted", False)))
            )

        officer_scope = get_scope(self.identity, SALES_OFFICERS, lookup)
        active_officers = self.tables.count(
            QuerySpec(
                table=SALES_OFFICERS.table,
                select="sales_officers_id",
                filters=(*officer_scope.clauses(), eq("is_active", True)),
            )
        )

        now = self.now()
        current_start = add_months(now, -1)
        previous_start = add_months(now, -2)
        current_sales, current_orders = _window_total(orders, current_start, now)
        previous_sales, previous_orders = _window_total(orders, previous_start, current_start)

        return DashboardStats(
            total_sales=sum((order.total_amount for order in orders), Decimal("0")),
            orders_count=len(orders),
            active_shops=active_shops,
            active_sales_officers=active_officers,
            monthly_sales=monthly_sales(orders, now, settings.DASHBOARD_MONTHS),
            sales_change_percent=percent_change(current_sales, previous_sales),
            orders_change_percent=percent_change(current_orders, previous_orders),
            recent_activity=recent_activity(orders, now, settings.RECENT_ACTIVITY_LIMIT),
        )
