import pytest
import responses
from responses import matchers

from fieldsales_console.clients.backend_sdk.clients.tables import TableClient
from fieldsales_console.clients.backend_sdk.postgrest import OrderBy, QuerySpec, eq


@responses.activate
def test_select_sends_auth_headers_and_reads_exact_count(tables: TableClient) -> None:
    responses.add(
        responses.GET,
        "https://backend.test/rest/v1/area_sales_managers",
        match=[
            matchers.header_matcher(
                {"apikey": "anon-key", "Authorization": "Bearer user-token", "Prefer": "count=exact"}
            ),
            matchers.query_param_matcher(
                {"select": "*", "is_active": "eq.true", "order": "name.asc", "offset": "0", "limit": "10"}
            ),
        ],
        json=[{"asm_user_id": "M1", "name": "Manoj"}],
        headers={"Content-Range": "0-0/1"},
        status=206,
    )

    result = tables.select(
        QuerySpec(
            table="area_sales_managers",
            filters=(eq("is_active", True),),
            order=(OrderBy("name"),),
            offset=0,
            limit=10,
            count=True,
        )
    )

    assert result.rows == [{"asm_user_id": "M1", "name": "Manoj"}]
    assert result.count == 1


@responses.activate
def test_count_uses_head_request(tables: TableClient) -> None:
    responses.add(
        responses.HEAD,
        "https://backend.test/rest/v1/shops",
        match=[matchers.query_param_matcher({"select": "shop_id", "is_deleted": "eq.false"})],
        headers={"Content-Range": "*/7"},
        status=200,
    )

    total = tables.count(QuerySpec(table="shops", select="shop_id", filters=(eq("is_deleted", False),)))

    assert total == 7


@responses.activate
def test_update_patches_matching_rows(tables: TableClient) -> None:
    responses.add(
        responses.PATCH,
        "https://backend.test/rest/v1/shops",
        match=[
            matchers.query_param_matcher({"shop_id": "eq.shop-1"}),
            matchers.json_params_matcher({"is_deleted": True}),
            matchers.header_matcher({"Prefer": "return=representation"}),
        ],
        json=[{"shop_id": "shop-1", "is_deleted": True}],
        status=200,
    )

    rows = tables.update("shops", [eq("shop_id", "shop-1")], {"is_deleted": True})

    assert rows == [{"shop_id": "shop-1", "is_deleted": True}]


def test_update_without_filter_is_refused(tables: TableClient) -> None:
    with pytest.raises(ValueError):
        tables.update("shops", [], {"is_deleted": True})
