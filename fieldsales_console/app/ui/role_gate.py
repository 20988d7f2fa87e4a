from __future__ import annotations

from dataclasses import dataclass

from fieldsales_console.app.domain.models.identity import Identity, Role

LOGIN_ROUTE = "/login"
DASHBOARD_ROUTE = "/dashboard"


@dataclass(frozen=True)
class RouteDecision:
    allowed: bool
    redirect_to: str | None = None
    message: str = ""


_ROUTE_RULES: dict[str, Role | None] = {
    "/dashboard": None,
    "/orders": None,
    "/shops": None,
    "/shops/detail": None,
    "/products": None,
    "/sales-officers": None,
    "/schemes": None,
    "/area-sales-managers": Role.ADMIN,
    "/admins": Role.ADMIN,
}

RESOURCE_ROUTES = {
    "orders": "/orders",
    "shops": "/shops",
    "products": "/products",
    "sales_officers": "/sales-officers",
    "schemes": "/schemes",
    "area_sales_managers": "/area-sales-managers",
}


def check_route(identity: Identity | None, route: str) -> RouteDecision:
    if route == LOGIN_ROUTE:
        if identity is not None:
            return RouteDecision(False, DASHBOARD_ROUTE, "Already signed in.")
        return RouteDecision(True)
    if route not in _ROUTE_RULES:
        return RouteDecision(False, DASHBOARD_ROUTE, f"Unknown route: {route}.")
    if identity is None:
        return RouteDecision(False, LOGIN_ROUTE, "Sign in to continue.")
    needed = _ROUTE_RULES[route]
    if needed is not None and identity.role is not needed:
        return RouteDecision(False, DASHBOARD_ROUTE, "This page is restricted to administrators.")
    return RouteDecision(True)


__all__ = ["DASHBOARD_ROUTE", "LOGIN_ROUTE", "RESOURCE_ROUTES", "RouteDecision", "check_route"]
