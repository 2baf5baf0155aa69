from __future__ import annotations

from dataclasses import dataclass

from .exceptions import ApiError, PermissionDeniedError, TransportError

_FRIENDLY_MESSAGES = {
    "invalid_grant": "Invalid email or password",
    "invalid_credentials": "Invalid email or password",
    "PGRST116": "Record not found",
    "42501": "You do not have permission to perform this action",
    "23505": "A record with the same value already exists",
}


@dataclass(frozen=True)
class UserFacingError:
    message: str
    details: str | None = None
    trace_id: str | None = None

    @property
    def technical_details(self) -> str | None:
        if self.details:
            return self.details
        return None


def to_user_facing_error(exc: ApiError) -> UserFacingError:
    primary = _FRIENDLY_MESSAGES.get(exc.code) or exc.message.strip() or "Request failed"
    if isinstance(exc, TransportError):
        primary = "Cannot reach the backend. Check your connection and retry."
    elif isinstance(exc, PermissionDeniedError) and exc.code not in _FRIENDLY_MESSAGES:
        primary = _FRIENDLY_MESSAGES["42501"]
    details = f"{exc.code} (HTTP {exc.status_code})"
    if exc.details:
        details = f"{details}: {exc.details}"
    if exc.hint:
        details = f"{details} hint: {exc.hint}"
    return UserFacingError(message=primary, details=details, trace_id=exc.trace_id)
