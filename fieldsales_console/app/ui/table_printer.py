from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from fieldsales_console.app.domain.resources import read_field

EMPTY_VALUE = "-"

LIST_COLUMNS: dict[str, list[tuple[str, str]]] = {
    "orders": [("order_id", "Order"), ("shop_name", "Shop"), ("sales_officer_name", "Officer"), ("total_amount", "Total"), ("created_at", "Created")],
    "shops": [("shop_id", "Shop"), ("name", "Name"), ("city", "City"), ("territory", "Territory"), ("owner_name", "Owner")],
    "products": [("product_id", "Product"), ("name", "Name"), ("category", "Category"), ("mrp", "MRP"), ("net_ptr", "Net PTR")],
    "sales_officers": [("sales_officers_id", "Officer"), ("employee_id", "Employee"), ("name", "Name"), ("reporting_manager_name", "Manager"), ("is_active", "Status")],
    "area_sales_managers": [("asm_user_id", "Manager"), ("employee_id", "Employee"), ("name", "Name"), ("phone_number", "Phone"), ("is_active", "Status")],
    "schemes": [("scheme_id", "Scheme"), ("scheme_text", "Text"), ("scheme_scope", "Scope"), ("scheme_min_price", "Min price")],
}


def normalize_value(value: Any) -> str:
    if value is None:
        return EMPTY_VALUE
    if isinstance(value, str):
        return value.strip() or EMPTY_VALUE
    if isinstance(value, bool):
        return "ACTIVE" if value else "INACTIVE"
    if isinstance(value, datetime):
        return value.astimezone().strftime("%Y-%m-%d %H:%M")
    if isinstance(value, Decimal):
        return f"{value:.2f}"
    return str(value)


def print_table(title: str, rows: list[Any], columns: list[tuple[str, str]]) -> None:
    print(f"\n{title}")
    if not rows:
        print("(no results)")
        return

    widths = []
    for key, header in columns:
        max_cell = max(len(normalize_value(read_field(row, key))) for row in rows)
        widths.append(max(len(header), max_cell))

    print(" | ".join(header.ljust(widths[idx]) for idx, (_, header) in enumerate(columns)))
    print("-+-".join("-" * width for width in widths))
    for row in rows:
        print(" | ".join(normalize_value(read_field(row, key)).ljust(widths[idx]) for idx, (key, _) in enumerate(columns)))
