from fieldsales_console.app.domain.models.identity import Identity
from fieldsales_console.app.ui.role_gate import DASHBOARD_ROUTE, LOGIN_ROUTE, check_route


def test_signed_out_users_are_sent_to_login() -> None:
    decision = check_route(None, "/orders")

    assert decision.allowed is False
    assert decision.redirect_to == LOGIN_ROUTE
    assert check_route(None, LOGIN_ROUTE).allowed is True


def test_managers_cannot_open_admin_pages(manager: Identity) -> None:
    decision = check_route(manager, "/area-sales-managers")

    assert decision.allowed is False
    assert decision.redirect_to == DASHBOARD_ROUTE
    assert check_route(manager, "/sales-officers").allowed is True


def test_admin_reaches_everything_but_login(admin: Identity) -> None:
    assert check_route(admin, "/area-sales-managers").allowed is True
    assert check_route(admin, "/admins").allowed is True
    assert check_route(admin, LOGIN_ROUTE).redirect_to == DASHBOARD_ROUTE


def test_unknown_routes_fall_back_to_dashboard(admin: Identity) -> None:
    assert check_route(admin, "/reports").redirect_to == DASHBOARD_ROUTE
