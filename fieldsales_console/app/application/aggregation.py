from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from datetime import datetime
from decimal import Decimal

from fieldsales_console.app.application.pipeline import SortState, sort_rows
from fieldsales_console.app.application.time_ranges import month_starts, relative_time
from fieldsales_console.app.domain.models.entities import (
    ActivityItem,
    MonthlySales,
    Order,
    OrderProduct,
    ShopSummary,
    TopProduct,
    TopSalesOfficer,
)
from fieldsales_console.clients.backend_sdk.models_rows import OrderLineRow, ShopRow, VisitRow

_POINT_RE = re.compile(r"^POINT\s*\(\s*(-?[\d.]+)\s+(-?[\d.]+)\s*\)$", re.IGNORECASE)
_PAIR_RE = re.compile(r"^\s*(-?[\d.]+)\s*,\s*(-?[\d.]+)\s*$")


def aggregate_orders(rows: Iterable[OrderLineRow]) -> list[Order]:
    """Group order-line rows into orders, in order of first appearance.

    The first row of a group seeds the order's scalar fields. Every row becomes
    a product line. Free lines (``free_qty > 0``) stay in ``products`` but never
    add to ``total_amount``.
    """
    grouped: dict[str, Order] = {}
    for row in rows:
        order = grouped.get(row.order_id)
        if order is None:
            order = Order(
                order_id=row.order_id,
                visit_id=row.visit_id,
                created_at=row.created_at,
                currency=row.currency,
                sales_officers_id=row.sales_officers_id,
                sales_officer_name=row.sales_officer_name,
                shop_id=row.shop_id,
                shop_name=row.shop_name,
                area_sales_manager_id=row.area_sales_manager_id,
                area_sales_manager_name=row.area_sales_manager_name,
            )
            grouped[row.order_id] = order
        line = OrderProduct(
            product_id=row.product_id,
            product_name=row.product_name,
            quantity=row.quantity,
            amount=row.amount,
            free_qty=row.free_qty,
        )
        order.products.append(line)
        if not line.is_free:
            order.total_amount += line.amount
    return list(grouped.values())


def top_products(orders: Iterable[Order], n: int = 3) -> list[TopProduct]:
    table: dict[str, TopProduct] = {}
    for order in orders:
        for line in order.products:
            if line.product_id is None:
                continue
            entry = table.setdefault(line.product_id, TopProduct(line.product_id, line.product_name))
            entry.quantity += line.units
            if not line.is_free:
                entry.amount += line.amount
    # sorted() is stable with reverse=True, so ties keep first appearance.
    return sorted(table.values(), key=lambda entry: entry.amount, reverse=True)[:n]


def top_sales_officers(orders: Sequence[Order], visits: Iterable[VisitRow] = (), n: int = 3) -> list[TopSalesOfficer]:
    visit_officers = {order.visit_id: order.sales_officers_id for order in reversed(orders) if order.visit_id}
    names = {order.sales_officers_id: order.sales_officer_name for order in orders if order.sales_officers_id}
    table: dict[str, TopSalesOfficer] = {}

    def _entry(officer_id: str) -> TopSalesOfficer:
        return table.setdefault(officer_id, TopSalesOfficer(officer_id, names.get(officer_id)))

    for visit in visits:
        officer_id = visit.sales_officers_id or visit_officers.get(visit.visit_id)
        if officer_id:
            _entry(officer_id).visit_count += 1
    for order in orders:
        if not order.sales_officers_id:
            continue
        entry = _entry(order.sales_officers_id)
        entry.order_count += 1
        entry.total_amount += order.total_amount
    return sorted(table.values(), key=lambda entry: entry.total_amount, reverse=True)[:n]


def recent_orders(orders: Iterable[Order], n: int = 5) -> list[Order]:
    return sort_rows(orders, SortState("created_at", descending=True), key_field="order_id")[:n]


def format_gps_location(value: str | None) -> str | None:
    """Render stored coordinates as ``lat,lon``; ``POINT(lon lat)`` and ``lon,lat`` are both swapped."""
    if not value:
        return None
    point = _POINT_RE.match(value.strip())
    if point:
        lon, lat = point.groups()
        return f"{lat},{lon}"
    pair = _PAIR_RE.match(value)
    if pair:
        lon, lat = pair.groups()
        return f"{lat},{lon}"
    return value


def summarize_shop(
    shop: ShopRow,
    visits: Sequence[VisitRow],
    rows: Iterable[OrderLineRow],
    *,
    top_n: int = 3,
    recent_limit: int = 5,
    default_currency: str = "INR",
) -> ShopSummary:
    orders = aggregate_orders(rows)
    currency = next((order.currency for order in orders if order.currency), None) or default_currency
    return ShopSummary(
        shop=shop,
        gps_location=format_gps_location(shop.gps_location),
        recent_orders=recent_orders(orders, recent_limit),
        order_count=len(orders),
        total_sales=sum((order.total_amount for order in orders), Decimal("0")),
        currency=currency,
        top_products=top_products(orders, top_n),
        top_sales_officers=top_sales_officers(orders, visits, top_n),
    )


def monthly_sales(orders: Iterable[Order], now: datetime, months: int = 6) -> list[MonthlySales]:
    starts = month_starts(now, months)
    buckets = {start.strftime("%Y-%m"): Decimal("0") for start in starts}
    for order in orders:
        if order.created_at is None:
            continue
        label = order.created_at.astimezone(now.tzinfo).strftime("%Y-%m") if now.tzinfo else order.created_at.strftime("%Y-%m")
        if label in buckets:
            buckets[label] += order.total_amount
    return [MonthlySales(month=label, amount=amount) for label, amount in buckets.items()]


def percent_change(current: Decimal | int, previous: Decimal | int) -> int:
    if not previous:
        return 100 if current else 0
    return round((Decimal(current) - Decimal(previous)) / Decimal(previous) * 100)


def recent_activity(orders: Iterable[Order], now: datetime, n: int = 5) -> list[ActivityItem]:
    items = []
    for order in recent_orders(orders, n):
        product = order.products[0].product_name if order.products else None
        items.append(
            ActivityItem(
                order_id=order.order_id,
                description=(
                    f"{order.sales_officer_name or 'Unknown officer'} placed order for "
                    f"{product or 'products'} at {order.shop_name or 'a shop'}"
                ),
                created_at=order.created_at,
                relative_time=relative_time(order.created_at, now),
            )
        )
    return items
