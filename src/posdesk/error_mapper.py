from __future__ import annotations

from typing import Mapping

from .exceptions import (
    ApiError,
    AuthError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitError,
    ServerError,
    ValidationError,
)

# Postgres / REST-layer codes that decide the error class regardless of HTTP status.
NO_ROWS_CODE = "PGRST116"
INSUFFICIENT_PRIVILEGE_CODE = "42501"
UNIQUE_VIOLATION_CODE = "23505"
CHECK_VIOLATION_CODE = "23514"
JWT_EXPIRED_CODE = "PGRST301"
AUTH_FAILURE_CODES = frozenset({"invalid_grant", "invalid_credentials"})

_CODE_OVERRIDES: dict[str, type[ApiError]] = {
    NO_ROWS_CODE: NotFoundError,
    INSUFFICIENT_PRIVILEGE_CODE: PermissionDeniedError,
    UNIQUE_VIOLATION_CODE: ConflictError,
    CHECK_VIOLATION_CODE: ValidationError,
    JWT_EXPIRED_CODE: AuthError,
}


def _first_text(payload: Mapping[str, object], *keys: str) -> str | None:
    for key in keys:
        value = payload.get(key)
        if value not in (None, ""):
            return str(value)
    return None


def map_error(status_code: int, payload: Mapping[str, object] | None, trace_id: str | None) -> ApiError:
    """Build the ApiError subclass for a failed backend response.

    Understands both the table API shape (``code``/``message``/``details``/``hint``)
    and the auth API shapes (``error``/``error_description`` and ``error_code``/``msg``).
    """
    payload = payload or {}
    code = _first_text(payload, "error_code", "code", "error") or "HTTP_ERROR"
    message = _first_text(payload, "message", "msg", "error_description") or "Request failed"
    details = payload.get("details")
    hint = _first_text(payload, "hint")
    payload_trace_id = payload.get("trace_id")
    resolved_trace_id = str(payload_trace_id) if payload_trace_id is not None else trace_id
    mapped: type[ApiError]
    if code in _CODE_OVERRIDES:
        mapped = _CODE_OVERRIDES[code]
    elif code in AUTH_FAILURE_CODES or status_code == 401:
        mapped = AuthError
    elif status_code == 403:
        mapped = PermissionDeniedError
    elif status_code == 404:
        mapped = NotFoundError
    elif status_code in {400, 422}:
        mapped = ValidationError
    elif status_code == 409:
        mapped = ConflictError
    elif status_code == 429:
        mapped = RateLimitError
    elif status_code >= 500:
        mapped = ServerError
    else:
        mapped = ApiError
    return mapped(
        code=code,
        message=message,
        details=details,
        trace_id=resolved_trace_id,
        status_code=status_code,
        raw_payload=dict(payload),
        hint=hint,
    )
