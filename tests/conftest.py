from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fieldsales_console.app.domain.models.identity import Identity, Role  # noqa: E402
from fieldsales_console.clients.backend_sdk.clients.tables import TableClient  # noqa: E402
from fieldsales_console.clients.backend_sdk.config import ClientConfig  # noqa: E402
from fieldsales_console.clients.backend_sdk.http_client import HttpClient  # noqa: E402

BASE_URL = "https://backend.test"


@pytest.fixture
def client_config() -> ClientConfig:
    return ClientConfig(
        env_name="test",
        api_base_url=BASE_URL,
        anon_key="anon-key",
        retries=1,
        retry_backoff_seconds=0,
    )


@pytest.fixture
def http(client_config: ClientConfig) -> HttpClient:
    return HttpClient(config=client_config)


@pytest.fixture
def tables(http: HttpClient) -> TableClient:
    return TableClient(http=http, access_token="user-token")


@pytest.fixture
def admin() -> Identity:
    return Identity(id="admin-1", role=Role.ADMIN, name="Asha Admin", email="asha@example.com")


@pytest.fixture
def manager() -> Identity:
    return Identity(id="M1", role=Role.AREA_MANAGER, name="Manoj Manager", phone="9876543210")
