from __future__ import annotations

import logging
from dataclasses import dataclass, field
from time import perf_counter
from typing import Any

from .config import ClientConfig, ConfigError, load_config
from .models import Profile
from .navigation import Route, home_route, resolve_route
from .services.auth_service import AuthService, AuthServiceError
from .services.history_service import HistoryService
from .services.inventory_service import InventoryService
from .services.sales_service import SalesService
from .services.users_service import UsersService
from .session import BackendSession
from .telemetry import TelemetryLogger, build_event
from .ui.admin_dashboard import AdminDashboard
from .ui.cashier_dashboard import CashierDashboard
from .ui.checkout_panel import CheckoutPanel
from .ui.history_view import HistoryView
from .ui.inventory_view import InventoryView
from .ui.view_context import ViewContext

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    route: Route = Route.LOGIN
    error_message: str | None = None
    status_message: str = "Ready"
    context: ViewContext = field(default_factory=ViewContext)


@dataclass
class BootstrapResult:
    route: Route
    error_message: str | None = None


class PosDeskApp:
    def __init__(
        self,
        config: ClientConfig | None = None,
        session: BackendSession | None = None,
        telemetry: TelemetryLogger | None = None,
    ) -> None:
        self.config = config or load_config()
        self.session = session or BackendSession(self.config)
        self.telemetry = telemetry or TelemetryLogger(app_name="posdesk")
        self.state = AppState()
        self.auth_service = AuthService(self.session)
        self.sales_service = SalesService(self.session, telemetry=self.telemetry)
        self.inventory_service = InventoryService(self.session)
        self.users_service = UsersService(self.session)
        self.history_service = HistoryService(self.session)

    def start(self) -> BootstrapResult:
        if not self.auth_service.has_active_session():
            self._navigate(Route.LOGIN, "No active session")
            return BootstrapResult(route=self.state.route)
        try:
            profile = self.auth_service.load_profile()
        except AuthServiceError as exc:
            self.session.clear()
            self.state.error_message = exc.message
            self._navigate(Route.LOGIN, "Session expired")
            return BootstrapResult(route=self.state.route, error_message=exc.message)
        return self._enter_home(profile)

    def login(self, email: str, password: str) -> BootstrapResult:
        started = perf_counter()
        try:
            profile = self.auth_service.login(email, password)
        except AuthServiceError as exc:
            self.state.error_message = exc.message
            self._emit_auth_result(False, started, trace_id=exc.trace_id, error_code=exc.code)
            self._navigate(Route.LOGIN, "Authentication failed")
            return BootstrapResult(route=self.state.route, error_message=exc.message)
        self._emit_auth_result(True, started, trace_id=self.session.trace.trace_id)
        return self._enter_home(profile)

    def sign_up(self, email: str, password: str, username: str | None = None) -> BootstrapResult:
        try:
            self.auth_service.sign_up(email, password, username=username)
        except AuthServiceError as exc:
            self.state.error_message = exc.message
            self._navigate(Route.SIGNUP, "Sign-up failed")
            return BootstrapResult(route=self.state.route, error_message=exc.message)
        self.state.error_message = None
        if not self.auth_service.has_active_session():
            self._navigate(Route.LOGIN, "Check your email to confirm the account")
            return BootstrapResult(route=self.state.route)
        return self.start()

    def logout(self) -> BootstrapResult:
        self.auth_service.logout()
        self.state.context.profile = None
        self._navigate(Route.LOGIN, "Session cleared")
        return BootstrapResult(route=self.state.route)

    def open(self, route: Route) -> BootstrapResult:
        role = self.state.context.role if self.auth_service.has_active_session() else None
        target = resolve_route(route, role)
        if target is not route:
            logger.info("navigation_redirect", extra={"requested": route.value, "route": target.value})
        self._navigate(target, "Ready")
        return BootstrapResult(route=target)

    def view_for(self, route: Route | None = None) -> Any:
        route = route or self.state.route
        context = self.state.context
        if route in (Route.CASHIER, Route.SALES):
            return CashierDashboard(context=context, panel=self._checkout_panel())
        if route is Route.ADMIN:
            return AdminDashboard(context=context, users=self.users_service, panel=self._checkout_panel())
        if route is Route.INVENTORY:
            return InventoryView(service=self.inventory_service, context=context)
        if route is Route.HISTORY:
            return HistoryView(
                service=self.history_service,
                context=context,
                presenter=self.sales_service.presenter,
            )
        return None

    def _checkout_panel(self) -> CheckoutPanel:
        return CheckoutPanel(service=self.sales_service, context=self.state.context)

    def _enter_home(self, profile: Profile) -> BootstrapResult:
        self.state.context.profile = profile
        self.state.error_message = None
        route = home_route(profile.effective_role)
        self._navigate(route, "Authenticated")
        self._emit_screen_view(route.value)
        return BootstrapResult(route=route)

    def _emit_auth_result(
        self,
        success: bool,
        started: float,
        *,
        trace_id: str | None,
        error_code: str | None = None,
    ) -> None:
        self.telemetry.emit(
            build_event(
                category="auth",
                name="auth_login_result",
                module="auth",
                action="login",
                success=success,
                duration_ms=int((perf_counter() - started) * 1000),
                trace_id=trace_id,
                error_code=error_code,
            )
        )

    def _emit_screen_view(self, action: str) -> None:
        self.telemetry.emit(
            build_event(
                category="navigation",
                name="screen_view",
                module="posdesk",
                action=action,
                success=True,
            )
        )

    def _navigate(self, route: Route, status_message: str) -> None:
        logger.info("navigation", extra={"route": route.value})
        self.state.route = route
        self.state.status_message = status_message


def run() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    try:
        app = PosDeskApp()
    except ConfigError as exc:
        print(f"posdesk configuration error: {exc}")
        return 2
    result = app.start()
    if result.route is Route.LOGIN:
        print("posdesk is ready: login required.")
    else:
        print(f"posdesk session restored: {result.route.value}")
    return 0


if __name__ == "__main__":
    raise SystemExit(run())
