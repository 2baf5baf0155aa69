from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..models import Role
from ..navigation import allowed_nav_items
from ..services.users_service import ASSIGNABLE_ROLES, UserRow, UsersService, UsersServiceError
from .checkout_panel import CheckoutPanel
from .view_context import ViewContext


@dataclass
class AdminDashboard:
    context: ViewContext
    users: UsersService
    panel: CheckoutPanel
    rows: list[UserRow] = field(default_factory=list)
    error_message: str | None = None
    trace_id: str | None = None
    is_submitting: bool = False

    def open(self) -> dict[str, Any]:
        users = self.load_users()
        catalog = self.panel.load_catalog()
        return {"ok": users["ok"] and catalog["ok"], "users": users, "catalog": catalog}

    def load_users(self) -> dict[str, Any]:
        try:
            self.rows = self.users.list_users()
        except UsersServiceError as exc:
            return self._fail("Error loading users", exc)
        self.error_message = None
        return {"ok": True, "users": self._render_rows()}

    def change_role(self, user_id: str, role: Role | str) -> dict[str, Any]:
        if self.is_submitting:
            return {"ok": False, "error": "Another change is in progress"}
        self.is_submitting = True
        try:
            updated = self.users.update_role(user_id, role)
        except UsersServiceError as exc:
            return self._fail("Error updating role", exc)
        finally:
            self.is_submitting = False
        self.rows = [updated if row.id == user_id else row for row in self.rows]
        return {"ok": True, "user": _render_row(updated)}

    def delete_user(self, user_id: str, *, confirmed: bool) -> dict[str, Any]:
        if not confirmed:
            return {"ok": False, "error": "Delete confirmation is required"}
        if self.is_submitting:
            return {"ok": False, "error": "Another change is in progress"}
        self.is_submitting = True
        try:
            self.users.delete_user(user_id)
        except UsersServiceError as exc:
            return self._fail("Error deleting user", exc)
        finally:
            self.is_submitting = False
        self.rows = [row for row in self.rows if row.id != user_id]
        return {"ok": True, "users": self._render_rows()}

    def dismiss_error(self) -> None:
        self.error_message = None

    def render(self) -> dict[str, Any]:
        return {
            "title": "Administration",
            "navigation": [item.label for item in allowed_nav_items(self.context.role)],
            "users": self._render_rows(),
            "assignable_roles": [role.value for role in ASSIGNABLE_ROLES],
            "error": self.error_message,
            "trace_id": self.trace_id,
            "sales": self.panel.render(),
        }

    def _fail(self, prefix: str, exc: UsersServiceError) -> dict[str, Any]:
        self.error_message = f"{prefix}: {exc.message}"
        self.trace_id = exc.trace_id
        return {"ok": False, "error": self.error_message, "trace_id": exc.trace_id, "details": exc.details}

    def _render_rows(self) -> list[dict[str, Any]]:
        return [_render_row(row) for row in self.rows]


def _render_row(row: UserRow) -> dict[str, Any]:
    return {
        "id": row.id,
        "username": row.username,
        "email": row.email,
        "role": row.role.value,
        "created_at": row.created_at.date().isoformat() if row.created_at else None,
    }
