from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .models import Role


class Route(str, Enum):
    ROOT = "root"
    LOGIN = "login"
    SIGNUP = "signup"
    ADMIN = "admin"
    CASHIER = "cashier"
    INVENTORY = "inventory"
    SALES = "sales"
    HISTORY = "history"
    UNAUTHORIZED = "unauthorized"


AUTH_ROUTES = frozenset({Route.LOGIN, Route.SIGNUP})

ROUTE_ROLES: dict[Route, frozenset[Role]] = {
    Route.ADMIN: frozenset({Role.ADMIN}),
    Route.CASHIER: frozenset({Role.CASHIER, Role.ADMIN}),
    Route.SALES: frozenset({Role.CASHIER, Role.ADMIN}),
    Route.INVENTORY: frozenset({Role.ADMIN, Role.INVENTORY_MANAGER}),
    Route.HISTORY: frozenset({Role.ADMIN, Role.CASHIER}),
}

_HOME_ROUTES = {
    Role.ADMIN: Route.ADMIN,
    Role.CASHIER: Route.CASHIER,
    Role.INVENTORY_MANAGER: Route.INVENTORY,
}


@dataclass(frozen=True)
class NavItem:
    route: Route
    label: str


NAV_ITEMS: tuple[NavItem, ...] = (
    NavItem(Route.ADMIN, "Users"),
    NavItem(Route.CASHIER, "Cashier"),
    NavItem(Route.SALES, "Sales"),
    NavItem(Route.INVENTORY, "Inventory"),
    NavItem(Route.HISTORY, "History"),
)


def home_route(role: Role | None) -> Route:
    if role is None:
        return Route.LOGIN
    return _HOME_ROUTES.get(role, Route.UNAUTHORIZED)


def resolve_route(requested: Route, role: Role | None) -> Route:
    """Return where a user with ``role`` (``None`` when signed out) ends up when asking for ``requested``."""
    if requested is Route.ROOT:
        requested = Route.LOGIN
    if requested in AUTH_ROUTES:
        return requested if role is None else home_route(role)
    if requested is Route.UNAUTHORIZED:
        return requested
    if role is None:
        return Route.LOGIN
    if role not in ROUTE_ROLES.get(requested, frozenset()):
        return Route.UNAUTHORIZED
    return requested


def allowed_nav_items(role: Role | None) -> list[NavItem]:
    if role is None:
        return []
    return [item for item in NAV_ITEMS if role in ROUTE_ROLES[item.route]]
