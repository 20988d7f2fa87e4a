from urllib.parse import parse_qsl, urlsplit

import responses

from fieldsales_console.app.application.use_cases.load_filter_options_use_case import LoadFilterOptionsUseCase
from fieldsales_console.app.domain.models.identity import Identity
from fieldsales_console.app.domain.resources import ORDERS, PRODUCTS, SHOPS
from fieldsales_console.clients.backend_sdk.clients.tables import TableClient

BASE = "https://backend.test/rest/v1"


@responses.activate
def test_manager_shop_options_are_distinct_and_scoped(tables: TableClient, manager: Identity) -> None:
    responses.add(responses.GET, f"{BASE}/sales_officers", json=[{"sales_officers_id": "S1"}])
    responses.add(
        responses.GET,
        f"{BASE}/shops",
        json=[
            {"territory": "West", "city": "Pune", "state": "MH"},
            {"territory": "West", "city": "Nashik", "state": "MH"},
            {"territory": "North", "city": None, "state": "DL"},
        ],
    )

    options = LoadFilterOptionsUseCase(tables, manager).execute(SHOPS)

    assert options == {
        "territory": ["North", "West"],
        "city": ["Nashik", "Pune"],
        "state": ["DL", "MH"],
    }
    shop_calls = [call for call in responses.calls if "/shops" in call.request.url]
    assert len(shop_calls) == 3
    params = parse_qsl(urlsplit(shop_calls[0].request.url).query)
    assert ("created_by", "in.(S1)") in params
    assert ("territory", "not.is.null") in params


@responses.activate
def test_product_categories_use_active_flag(tables: TableClient, admin: Identity) -> None:
    responses.add(responses.GET, f"{BASE}/products", json=[{"category": "Soaps"}, {"category": "Oils"}, {"category": "Soaps"}])

    options = LoadFilterOptionsUseCase(tables, admin).execute(PRODUCTS)

    assert options == {"category": ["Oils", "Soaps"]}
    assert ("is_active", "eq.true") in parse_qsl(urlsplit(responses.calls[0].request.url).query)


@responses.activate
def test_manager_order_options_list_only_own_officers(tables: TableClient, manager: Identity) -> None:
    responses.add(
        responses.GET,
        f"{BASE}/sales_officers",
        json=[{"sales_officers_id": "S1", "name": "Ravi"}, {"sales_officers_id": "S2", "name": "Sita"}],
    )

    options = LoadFilterOptionsUseCase(tables, manager).execute(ORDERS)

    assert options == {"sales_officer": [{"id": "S1", "name": "Ravi"}, {"id": "S2", "name": "Sita"}]}
    params = parse_qsl(urlsplit(responses.calls[0].request.url).query)
    assert ("reporting_manager_id", "eq.M1") in params
    assert ("order", "name.asc") in params


@responses.activate
def test_admin_order_options_include_area_managers(tables: TableClient, admin: Identity) -> None:
    responses.add(responses.GET, f"{BASE}/sales_officers", json=[{"sales_officers_id": "S1", "name": "Ravi"}])
    responses.add(responses.GET, f"{BASE}/area_sales_managers", json=[{"asm_user_id": "M1", "name": "Manoj"}])

    options = LoadFilterOptionsUseCase(tables, admin).execute(ORDERS)

    assert options["area_manager"] == [{"id": "M1", "name": "Manoj"}]
