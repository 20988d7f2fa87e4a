from decimal import Decimal
from urllib.parse import parse_qsl, urlsplit

import pytest
import responses

from fieldsales_console.app.application.use_cases.load_shop_details_use_case import LoadShopDetailsUseCase
from fieldsales_console.app.domain.models.identity import Identity
from fieldsales_console.clients.backend_sdk.clients.tables import TableClient
from fieldsales_console.clients.backend_sdk.exceptions import NotFoundError

BASE = "https://backend.test/rest/v1"


def _line(order_id: str, visit_id: str, officer: str, product: str, quantity: int, amount: str, free_qty: int = 0, day: int = 1) -> dict:
    return {
        "order_id": order_id,
        "visit_id": visit_id,
        "created_at": f"2026-10-{day:02d}T10:00:00+00:00",
        "currency": "INR",
        "sales_officers_id": officer,
        "sales_officer_name": {"S1": "Ravi", "S2": "Sita"}[officer],
        "shop_id": "shop-1",
        "shop_name": "Anand Stores",
        "product_id": product,
        "product_name": product.title(),
        "quantity": quantity,
        "amount": amount,
        "free_qty": free_qty,
    }


@responses.activate
def test_manager_shop_summary(tables: TableClient, manager: Identity) -> None:
    responses.add(responses.GET, f"{BASE}/sales_officers", json=[{"sales_officers_id": "S1"}, {"sales_officers_id": "S2"}])
    responses.add(
        responses.GET,
        f"{BASE}/shops",
        json=[{"shop_id": "shop-1", "name": "Anand Stores", "gps_location": "POINT(73.85 18.52)", "created_by": "S1"}],
    )
    responses.add(
        responses.GET,
        f"{BASE}/visits",
        json=[
            {"visit_id": "v-1", "shop_id": "shop-1", "sales_officers_id": "S1"},
            {"visit_id": "v-2", "shop_id": "shop-1", "sales_officers_id": "S2"},
            {"visit_id": "v-3", "shop_id": "shop-1", "sales_officers_id": "S2"},
        ],
    )
    responses.add(
        responses.GET,
        f"{BASE}/orders_view",
        json=[
            _line("o-1", "v-1", "S1", "soap", 10, "500", day=1),
            _line("o-1", "v-1", "S1", "soap", 0, "0", free_qty=1, day=1),
            _line("o-2", "v-2", "S2", "shampoo", 2, "120", day=3),
            _line("o-2", "v-2", "S2", "oil", 1, "80", day=3),
        ],
    )

    summary = LoadShopDetailsUseCase(tables, manager).execute("shop-1")

    assert summary.gps_location == "18.52,73.85"
    assert summary.order_count == 2
    assert summary.total_sales == Decimal("700")
    assert summary.currency == "INR"
    assert [order.order_id for order in summary.recent_orders] == ["o-2", "o-1"]
    assert [(entry.product_id, entry.quantity) for entry in summary.top_products] == [("soap", 11), ("shampoo", 2), ("oil", 1)]
    assert [(entry.sales_officers_id, entry.visit_count) for entry in summary.top_sales_officers] == [("S1", 1), ("S2", 2)]

    shop_params = parse_qsl(urlsplit(responses.calls[1].request.url).query)
    assert ("created_by", "in.(S1,S2)") in shop_params
    order_params = parse_qsl(urlsplit(responses.calls[3].request.url).query)
    assert ("visit_id", "in.(v-1,v-2,v-3)") in order_params


@responses.activate
def test_shop_without_visits_skips_order_lookup(tables: TableClient, admin: Identity) -> None:
    responses.add(responses.GET, f"{BASE}/shops", json=[{"shop_id": "shop-9", "name": "New Shop"}])
    responses.add(responses.GET, f"{BASE}/visits", json=[])

    summary = LoadShopDetailsUseCase(tables, admin).execute("shop-9")

    assert summary.order_count == 0
    assert summary.top_products == []
    assert summary.total_sales == Decimal("0")
    assert len(responses.calls) == 2


@responses.activate
def test_shop_outside_scope_is_not_found(tables: TableClient, manager: Identity) -> None:
    responses.add(responses.GET, f"{BASE}/sales_officers", json=[{"sales_officers_id": "S1"}])
    responses.add(responses.GET, f"{BASE}/shops", json=[])

    with pytest.raises(NotFoundError) as excinfo:
        LoadShopDetailsUseCase(tables, manager).execute("shop-elsewhere")

    assert excinfo.value.code == "SHOP_NOT_FOUND"
