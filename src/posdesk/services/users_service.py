from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from ..exceptions import PermissionDeniedError, ServiceError
from ..models import Profile, Role
from ..session import BackendSession
from .errors import normalize_error

logger = logging.getLogger(__name__)

ASSIGNABLE_ROLES = (Role.ADMIN, Role.CASHIER)
MISSING_EMAIL = "No disponible"


class UsersServiceError(ServiceError):
    pass


@dataclass(frozen=True)
class UserRow:
    id: str
    username: str | None
    email: str
    role: Role
    created_at: datetime | None = None

    @classmethod
    def from_profile(cls, profile: Profile) -> "UserRow":
        return cls(
            id=profile.id,
            username=profile.username,
            email=profile.email or profile.username or MISSING_EMAIL,
            role=profile.effective_role,
            created_at=profile.created_at,
        )


class UsersService:
    """User administration; every call is rejected unless the signed-in profile is an admin."""

    def __init__(self, session: BackendSession) -> None:
        self.session = session

    def is_admin(self) -> bool:
        profile = self.session.profile
        return profile is not None and profile.effective_role is Role.ADMIN

    def list_users(self) -> list[UserRow]:
        self._require_admin()
        try:
            profiles = self.session.profiles_client().list_profiles()
        except Exception as exc:
            raise normalize_error(exc, UsersServiceError, "Could not load users") from exc
        return [UserRow.from_profile(profile) for profile in profiles]

    def update_role(self, user_id: str, role: Role | str) -> UserRow:
        self._require_admin()
        try:
            new_role = Role(role)
        except ValueError:
            new_role = None
        if new_role not in ASSIGNABLE_ROLES:
            raise UsersServiceError(message=f"Invalid role: {role}", code="VALIDATION_ERROR")
        try:
            updated = self.session.profiles_client().update_role(user_id, new_role)
        except PermissionDeniedError as exc:
            logger.warning("role_update_denied", extra={"user_id": user_id, "trace_id": exc.trace_id})
            raise UsersServiceError(
                message="You do not have permission to change roles",
                details=exc.message,
                trace_id=exc.trace_id,
                code=exc.code,
            ) from exc
        except Exception as exc:
            raise normalize_error(exc, UsersServiceError, "Could not update role") from exc
        if updated is None:
            raise UsersServiceError(message="The user does not exist or could not be updated", code="NOT_FOUND")
        logger.info("role_updated", extra={"user_id": user_id, "role": new_role.value})
        return UserRow.from_profile(updated)

    def delete_user(self, user_id: str) -> None:
        self._require_admin()
        try:
            self.session.profiles_client().delete_profile(user_id)
        except Exception as exc:
            raise normalize_error(exc, UsersServiceError, "Could not delete user") from exc
        logger.info("user_deleted", extra={"user_id": user_id})

    def _require_admin(self) -> None:
        if not self.is_admin():
            logger.warning("admin_action_denied")
            raise UsersServiceError(message="You do not have permission to perform this action", code="FORBIDDEN")
