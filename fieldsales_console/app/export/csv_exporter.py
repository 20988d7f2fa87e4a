from __future__ import annotations

import csv
import io
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any

from fieldsales_console.app.core.config import settings
from fieldsales_console.app.domain.resources import read_field


@dataclass(frozen=True)
class ExportColumn:
    label: str
    value: Callable[[Any], Any]


def _field(name: str, default: str = "") -> Callable[[Any], Any]:
    return lambda row: _cell(read_field(row, name), default)


def _cell(value: Any, default: str = "") -> str:
    if value is None or value == "":
        return default
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, bool):
        return "Yes" if value else "No"
    return str(value)


def _status(row: Any) -> str:
    return "Active" if read_field(row, "is_active") else "Inactive"


def _order_total(row: Any) -> str:
    currency = read_field(row, "currency") or settings.DEFAULT_CURRENCY
    return f"{read_field(row, 'total_amount')} {currency}"


EXPORT_COLUMNS: dict[str, tuple[ExportColumn, ...]] = {
    "orders": (
        ExportColumn("Order ID", _field("order_id")),
        ExportColumn("Total Amount", _order_total),
        ExportColumn("Sales Officer", _field("sales_officer_name")),
        ExportColumn("Shop", _field("shop_name")),
        ExportColumn("Area Manager", _field("area_sales_manager_name")),
        ExportColumn("Created At", _field("created_at")),
    ),
    "shops": (
        ExportColumn("Shop ID", _field("shop_id")),
        ExportColumn("Name", _field("name")),
        ExportColumn("Address", _field("address")),
        ExportColumn("Territory", _field("territory")),
        ExportColumn("City", _field("city")),
        ExportColumn("State", _field("state")),
        ExportColumn("Country", lambda row: _cell(read_field(row, "country"), settings.DEFAULT_COUNTRY)),
        ExportColumn("Owner", _field("owner_name")),
        ExportColumn("Phone", _field("phone_number")),
        ExportColumn("Created At", _field("created_at")),
    ),
    "sales_officers": (
        ExportColumn("Employee ID", _field("employee_id")),
        ExportColumn("Name", _field("name")),
        ExportColumn("Phone", _field("phone_number")),
        ExportColumn("Address", _field("address")),
        ExportColumn("ID Type", _field("id_type")),
        ExportColumn("ID Number", _field("id_no")),
        ExportColumn("Reporting Manager", _field("reporting_manager_name")),
        ExportColumn("Status", _status),
        ExportColumn("Created At", _field("created_at")),
    ),
    "area_sales_managers": (
        ExportColumn("Employee ID", _field("employee_id")),
        ExportColumn("Name", _field("name")),
        ExportColumn("Phone", _field("phone_number")),
        ExportColumn("Address", _field("address")),
        ExportColumn("ID Type", _field("id_type")),
        ExportColumn("ID Number", _field("id_no")),
        ExportColumn("Status", _status),
        ExportColumn("Created At", _field("created_at")),
    ),
    "products": (
        ExportColumn("Product ID", _field("product_id")),
        ExportColumn("Name", _field("name")),
        ExportColumn("Category", _field("category")),
        ExportColumn("Unit", _field("unit_of_measure")),
        ExportColumn("MRP", _field("mrp")),
        ExportColumn("PTR", _field("ptr")),
        ExportColumn("Net PTR", _field("net_ptr")),
        ExportColumn("GST %", _field("gst_percent")),
        ExportColumn("Currency", lambda row: _cell(read_field(row, "currency"), settings.DEFAULT_CURRENCY)),
        ExportColumn("Created At", _field("created_at")),
    ),
    "schemes": (
        ExportColumn("Scheme ID", _field("scheme_id")),
        ExportColumn("Scheme", _field("scheme_text")),
        ExportColumn("Scope", _field("scheme_scope")),
        ExportColumn("Minimum Price", _field("scheme_min_price")),
        ExportColumn("Status", _status),
        ExportColumn("Created At", _field("created_at")),
    ),
}


def export_filename(resource: str, today: date | None = None) -> str:
    return f"{resource.replace('_', '-')}-export-{(today or date.today()).isoformat()}.csv"


def render_csv(resource: str, rows: Iterable[Any]) -> str:
    try:
        columns = EXPORT_COLUMNS[resource]
    except KeyError as exc:
        raise ValueError(f"No CSV layout for {resource}") from exc
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow([column.label for column in columns])
    for row in rows:
        writer.writerow([column.value(row) for column in columns])
    return buffer.getvalue()


def export_current_view(
    *,
    resource: str,
    rows: Iterable[Any],
    output_dir: str | None = None,
    today: date | None = None,
) -> Path:
    destination = Path(output_dir or settings.EXPORTS_DIR)
    destination.mkdir(parents=True, exist_ok=True)
    path = destination / export_filename(resource, today)
    path.write_text(render_csv(resource, rows), encoding="utf-8")
    return path
