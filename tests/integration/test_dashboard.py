from datetime import datetime, timezone
from decimal import Decimal
from urllib.parse import parse_qsl, urlsplit

import responses

from fieldsales_console.app.application.use_cases.load_dashboard_use_case import LoadDashboardUseCase
from fieldsales_console.app.domain.models.identity import Identity
from fieldsales_console.clients.backend_sdk.clients.tables import TableClient

BASE = "https://backend.test/rest/v1"
NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def _line(order_id: str, created_at: str, amount: str) -> dict:
    return {
        "order_id": order_id,
        "created_at": created_at,
        "sales_officers_id": "S1",
        "sales_officer_name": "Ravi",
        "shop_name": "Anand Stores",
        "product_id": "p-1",
        "product_name": "Soap",
        "quantity": 1,
        "amount": amount,
        "free_qty": 0,
    }


@responses.activate
def test_admin_dashboard(tables: TableClient, admin: Identity) -> None:
    responses.add(
        responses.GET,
        f"{BASE}/orders_view",
        json=[
            _line("o-1", "2026-10-10T09:00:00+00:00", "150"),
            _line("o-2", "2026-09-01T09:00:00+00:00", "100"),
            _line("o-3", "2026-07-05T09:00:00+00:00", "30"),
        ],
    )
    responses.add(responses.HEAD, f"{BASE}/shops", headers={"Content-Range": "*/12"})
    responses.add(responses.HEAD, f"{BASE}/sales_officers", headers={"Content-Range": "*/4"})

    stats = LoadDashboardUseCase(tables, admin, now=lambda: NOW).execute()

    assert stats.total_sales == Decimal("280")
    assert stats.orders_count == 3
    assert stats.active_shops == 12
    assert stats.active_sales_officers == 4
    assert stats.sales_change_percent == 50
    assert stats.orders_change_percent == 0
    assert [(point.month, point.amount) for point in stats.monthly_sales] == [
        ("2026-05", Decimal("0")),
        ("2026-06", Decimal("0")),
        ("2026-07", Decimal("30")),
        ("2026-08", Decimal("0")),
        ("2026-09", Decimal("100")),
        ("2026-10", Decimal("150")),
    ]
    assert stats.recent_activity[0].order_id == "o-1"
    assert stats.recent_activity[0].relative_time == "8 days ago"


@responses.activate
def test_manager_without_team_sees_zeroes(tables: TableClient, manager: Identity) -> None:
    responses.add(responses.GET, f"{BASE}/sales_officers", json=[])
    responses.add(responses.HEAD, f"{BASE}/sales_officers", headers={"Content-Range": "*/0"})

    stats = LoadDashboardUseCase(tables, manager, now=lambda: NOW).execute()

    assert stats.orders_count == 0
    assert stats.active_shops == 0
    assert stats.active_sales_officers == 0
    assert stats.sales_change_percent == 0
    assert [call.request.method for call in responses.calls] == ["GET", "HEAD"]
    head_params = parse_qsl(urlsplit(responses.calls[1].request.url).query)
    assert ("reporting_manager_id", "eq.M1") in head_params


@responses.activate
def test_timestamps_without_offset_are_read_as_utc(tables: TableClient, admin: Identity) -> None:
    responses.add(responses.GET, f"{BASE}/orders_view", json=[_line("o-9", "2026-10-17T12:00:00", "75")])
    responses.add(responses.HEAD, f"{BASE}/shops", headers={"Content-Range": "*/1"})
    responses.add(responses.HEAD, f"{BASE}/sales_officers", headers={"Content-Range": "*/1"})

    stats = LoadDashboardUseCase(tables, admin, now=lambda: NOW).execute()

    assert stats.sales_change_percent == 100
    assert stats.monthly_sales[-1].amount == Decimal("75")
    assert stats.recent_activity[0].relative_time == "1 day ago"
