import pytest
import responses
from responses import matchers

from fieldsales_console.app.application.use_cases.sign_in_use_case import SignInUseCase, SignOutUseCase, identity_from_session
from fieldsales_console.app.domain.models.identity import Role
from fieldsales_console.app.ui.forms import FormValidationError
from fieldsales_console.clients.backend_sdk.config import ClientConfig
from fieldsales_console.clients.backend_sdk.exceptions import AuthError
from fieldsales_console.clients.backend_sdk.session import ApiSession

TOKEN_URL = "https://backend.test/auth/v1/token"
MANAGERS_URL = "https://backend.test/rest/v1/area_sales_managers"


def _token(user_id: str, *, role: str | None = None, email: str | None = None, phone: str | None = None) -> dict:
    return {
        "access_token": f"access-{user_id}",
        "refresh_token": f"refresh-{user_id}",
        "token_type": "bearer",
        "expires_in": 3600,
        "user": {
            "id": user_id,
            "email": email,
            "phone": phone,
            "app_metadata": {"role": role} if role else {},
            "user_metadata": {},
        },
    }


@pytest.fixture
def session(client_config: ClientConfig) -> ApiSession:
    return ApiSession(config=client_config, persist=False)


@responses.activate
def test_admin_signs_in_with_email(session: ApiSession) -> None:
    responses.add(
        responses.POST,
        TOKEN_URL,
        match=[
            matchers.query_param_matcher({"grant_type": "password"}),
            matchers.json_params_matcher({"email": "asha@example.com", "password": "secret1"}),
        ],
        json=_token("admin-1", role="admin", email="asha@example.com"),
        status=200,
    )

    identity = SignInUseCase(session).execute(" Asha@Example.com ", "secret1", Role.ADMIN)

    assert identity.role is Role.ADMIN
    assert identity.id == "admin-1"
    assert session.is_authenticated
    assert session.access_token == "access-admin-1"
    assert identity_from_session(session) == identity


@responses.activate
def test_manager_role_is_verified_against_manager_directory(session: ApiSession) -> None:
    responses.add(
        responses.POST,
        TOKEN_URL,
        match=[matchers.json_params_matcher({"phone": "9876543210", "password": "secret1"})],
        json=_token("M1", phone="9876543210"),
        status=200,
    )
    responses.add(
        responses.GET,
        MANAGERS_URL,
        match=[
            matchers.header_matcher({"Authorization": "Bearer access-M1"}),
            matchers.query_param_matcher(
                {"select": "asm_user_id,name", "asm_user_id": "eq.M1", "is_active": "eq.true", "limit": "1"}
            ),
        ],
        json=[{"asm_user_id": "M1", "name": "Manoj"}],
        status=200,
    )

    identity = SignInUseCase(session).execute("9876543210", "secret1", Role.AREA_MANAGER)

    assert identity.role is Role.AREA_MANAGER
    assert identity.name == "Manoj"
    assert session.role == "area_manager"


@responses.activate
def test_wrong_login_tab_is_rejected(session: ApiSession) -> None:
    responses.add(responses.POST, TOKEN_URL, json=_token("M1", email="manoj@example.com"), status=200)
    responses.add(responses.GET, MANAGERS_URL, json=[{"asm_user_id": "M1", "name": "Manoj"}], status=200)

    with pytest.raises(AuthError) as excinfo:
        SignInUseCase(session).execute("manoj@example.com", "secret1", Role.ADMIN)

    assert excinfo.value.code == "ROLE_MISMATCH"
    assert excinfo.value.status_code == 403
    assert not session.is_authenticated


@responses.activate
def test_bad_credentials_raise_auth_error(session: ApiSession) -> None:
    responses.add(
        responses.POST,
        TOKEN_URL,
        json={"error": "invalid_grant", "error_description": "Invalid login credentials"},
        status=400,
    )

    with pytest.raises(AuthError) as excinfo:
        SignInUseCase(session).execute("asha@example.com", "wrong-pw", Role.ADMIN)

    assert excinfo.value.message == "Invalid login credentials"
    assert session.access_token is None


def test_invalid_form_never_reaches_backend(session: ApiSession) -> None:
    with pytest.raises(FormValidationError):
        SignInUseCase(session).execute("not-a-phone", "secret1", Role.AREA_MANAGER)


@responses.activate
def test_sign_out_clears_session_even_when_backend_fails(session: ApiSession) -> None:
    responses.add(responses.POST, TOKEN_URL, json=_token("admin-1", role="admin", email="asha@example.com"), status=200)
    responses.add(responses.POST, "https://backend.test/auth/v1/logout", json={"message": "boom"}, status=500)
    SignInUseCase(session).execute("asha@example.com", "secret1", Role.ADMIN)

    SignOutUseCase(session).execute()

    assert session.access_token is None
    assert identity_from_session(session) is None
