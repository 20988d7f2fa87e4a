import pytest
import requests
import responses

from fieldsales_console.clients.backend_sdk.error_mapper import map_error
from fieldsales_console.clients.backend_sdk.exceptions import (
    ApiError,
    AuthError,
    BadRequestError,
    NotFoundError,
    QueryError,
    ServerError,
    TransportError,
)
from fieldsales_console.clients.backend_sdk.http_client import HttpClient


@responses.activate
def test_get_is_retried_after_server_error(http: HttpClient) -> None:
    url = "https://backend.test/rest/v1/products"
    responses.add(responses.GET, url, json={"message": "busy"}, status=503)
    responses.add(responses.GET, url, json=[{"product_id": "p-1"}], status=200)

    payload = http.request("GET", "/rest/v1/products", operation="select:products")

    assert payload == [{"product_id": "p-1"}]
    assert len(responses.calls) == 2
    assert http.last_operation is not None
    assert http.last_operation.result == "success"


@responses.activate
def test_patch_is_not_retried(http: HttpClient) -> None:
    responses.add(responses.PATCH, "https://backend.test/rest/v1/shops", json={"message": "boom"}, status=500)

    with pytest.raises(ServerError) as excinfo:
        http.request("PATCH", "/rest/v1/shops", json_body={"is_deleted": True})

    assert len(responses.calls) == 1
    assert isinstance(excinfo.value, QueryError)


@responses.activate
def test_unauthorized_response_notifies_auth_handler(http: HttpClient) -> None:
    seen: list[tuple[ApiError, bool]] = []
    http.on_auth_error = lambda error, can_replay: seen.append((error, can_replay))
    responses.add(
        responses.GET,
        "https://backend.test/auth/v1/user",
        json={"code": 401, "msg": "JWT expired"},
        status=401,
    )

    with pytest.raises(AuthError) as excinfo:
        http.request("GET", "/auth/v1/user")

    assert excinfo.value.message == "JWT expired"
    assert seen == [(excinfo.value, False)]


@responses.activate
def test_postgrest_error_payload_is_mapped(http: HttpClient) -> None:
    responses.add(
        responses.GET,
        "https://backend.test/rest/v1/shops",
        json={"code": "22P02", "message": "invalid input syntax for type uuid", "details": None, "hint": "check id"},
        status=400,
    )

    with pytest.raises(BadRequestError) as excinfo:
        http.request("GET", "/rest/v1/shops")

    assert excinfo.value.code == "22P02"
    assert excinfo.value.details == "check id"


@responses.activate
def test_connection_failure_becomes_transport_error(http: HttpClient) -> None:
    responses.add(responses.GET, "https://backend.test/rest/v1/shops", body=requests.ConnectionError("refused"))
    responses.add(responses.GET, "https://backend.test/rest/v1/shops", body=requests.ConnectionError("refused"))

    with pytest.raises(TransportError) as excinfo:
        http.request("GET", "/rest/v1/shops")

    assert excinfo.value.code == "TRANSPORT_ERROR"
    assert excinfo.value.status_code == 0


def test_map_error_treats_bad_credentials_as_auth_error() -> None:
    error = map_error(400, {"error": "invalid_grant", "error_description": "Invalid login credentials"})

    assert isinstance(error, AuthError)
    assert error.message == "Invalid login credentials"


def test_map_error_handles_non_mapping_payloads() -> None:
    error = map_error(404, ["unexpected"])

    assert isinstance(error, NotFoundError)
    assert error.message == "Request failed"


@responses.activate
def test_request_is_replayed_once_with_fresh_token(http: HttpClient) -> None:
    url = "https://backend.test/rest/v1/shops"
    responses.add(responses.GET, url, json={"code": "PGRST301", "message": "JWT expired"}, status=401)
    responses.add(responses.GET, url, json=[{"shop_id": "shop-1"}], status=200)
    http.on_auth_error = lambda error, can_replay: "fresh-token" if can_replay else None

    payload = http.request("GET", "/rest/v1/shops", headers={"Authorization": "Bearer stale-token"})

    assert payload == [{"shop_id": "shop-1"}]
    assert [call.request.headers["Authorization"] for call in responses.calls] == [
        "Bearer stale-token",
        "Bearer fresh-token",
    ]


@responses.activate
def test_replayed_request_is_not_replayed_again(http: HttpClient) -> None:
    url = "https://backend.test/rest/v1/shops"
    responses.add(responses.GET, url, json={"code": "PGRST301", "message": "JWT expired"}, status=401)
    responses.add(responses.GET, url, json={"code": "PGRST301", "message": "JWT expired"}, status=401)
    replays: list[bool] = []

    def _handler(error: ApiError, can_replay: bool) -> str | None:
        replays.append(can_replay)
        return "fresh-token" if can_replay else None

    http.on_auth_error = _handler

    with pytest.raises(AuthError):
        http.request("GET", "/rest/v1/shops", headers={"Authorization": "Bearer stale-token"})

    assert replays == [True, False]
    assert len(responses.calls) == 2


@responses.activate
def test_non_json_success_body_becomes_query_error(http: HttpClient) -> None:
    responses.add(
        responses.GET,
        "https://backend.test/rest/v1/shops",
        body="<html>gateway</html>",
        status=200,
        content_type="text/html",
    )

    with pytest.raises(QueryError) as excinfo:
        http.request("GET", "/rest/v1/shops")

    assert excinfo.value.code == "INVALID_JSON"
    assert excinfo.value.status_code == 200
