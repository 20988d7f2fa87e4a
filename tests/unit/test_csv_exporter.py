from datetime import date, datetime, timezone
from decimal import Decimal
from pathlib import Path

import pytest

from fieldsales_console.app.domain.models.entities import Order
from fieldsales_console.app.export.csv_exporter import export_current_view, export_filename, render_csv
from fieldsales_console.clients.backend_sdk.models_rows import SalesOfficerRow, ShopRow


def test_orders_csv_quotes_only_when_needed() -> None:
    order = Order(
        order_id="o-1",
        created_at=datetime(2026, 10, 2, 10, 0, tzinfo=timezone.utc),
        currency=None,
        sales_officer_name="Ravi",
        shop_name='Joe "Big" Store, Pune',
        area_sales_manager_name=None,
        total_amount=Decimal("650.50"),
    )

    text = render_csv("orders", [order])

    assert text.splitlines() == [
        "Order ID,Total Amount,Sales Officer,Shop,Area Manager,Created At",
        'o-1,650.50 INR,Ravi,"Joe ""Big"" Store, Pune",,2026-10-02',
    ]


def test_shop_country_defaults_and_officer_status() -> None:
    shops = render_csv("shops", [ShopRow(shop_id="shop-1", name="Anand Stores", city="Pune")])
    officers = render_csv(
        "sales_officers",
        [
            SalesOfficerRow(sales_officers_id="S1", name="Ravi", is_active=True),
            SalesOfficerRow(sales_officers_id="S2", name="Sita", is_active=False),
        ],
    )

    assert shops.splitlines()[1] == "shop-1,Anand Stores,,,Pune,,India,,,"
    assert [line.split(",")[7] for line in officers.splitlines()[1:]] == ["Active", "Inactive"]


def test_export_writes_dated_file(tmp_path: Path) -> None:
    path = export_current_view(
        resource="sales_officers",
        rows=[{"employee_id": "E1", "name": "Ravi", "is_active": True}],
        output_dir=str(tmp_path),
        today=date(2026, 10, 18),
    )

    assert path == tmp_path / "sales-officers-export-2026-10-18.csv"
    assert path.read_text(encoding="utf-8").startswith("Employee ID,Name,Phone")


def test_empty_view_exports_header_only() -> None:
    assert render_csv("schemes", []) == "Scheme ID,Scheme,Scope,Minimum Price,Status,Created At\n"
    assert export_filename("area_sales_managers", date(2026, 1, 5)) == "area-sales-managers-export-2026-01-05.csv"


def test_unknown_resource_is_rejected() -> None:
    with pytest.raises(ValueError):
        render_csv("visits", [])
