from __future__ import annotations

import pytest

from posdesk.error_mapper import map_error
from posdesk.exceptions import (
    ApiError,
    AuthError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitError,
    ServerError,
    ValidationError,
)
from posdesk.ui_errors import to_user_facing_error


@pytest.mark.parametrize(
    ("status", "payload", "expected"),
    [
        (406, {"code": "PGRST116", "message": "JSON object requested, multiple (or no) rows returned"}, NotFoundError),
        (401, {"code": "42501", "message": "permission denied for table products"}, PermissionDeniedError),
        (409, {"code": "23505", "message": "duplicate key value"}, ConflictError),
        (400, {"code": "23514", "message": "new row violates check constraint"}, ValidationError),
        (401, {"code": "PGRST301", "message": "JWT expired"}, AuthError),
        (400, {"error": "invalid_grant", "error_description": "Invalid login credentials"}, AuthError),
        (400, {"code": 400, "error_code": "invalid_credentials", "msg": "Invalid login credentials"}, AuthError),
        (403, {"message": "forbidden"}, PermissionDeniedError),
        (404, {}, NotFoundError),
        (422, {"msg": "Password should be at least 6 characters"}, ValidationError),
        (429, {"message": "slow down"}, RateLimitError),
        (503, {"message": "unavailable"}, ServerError),
        (418, {"message": "teapot"}, ApiError),
    ],
)
def test_map_error_picks_class(status: int, payload: dict, expected: type[ApiError]) -> None:
    error = map_error(status, payload, "trace-1")
    assert type(error) is expected
    assert error.status_code == status


def test_map_error_reads_table_payload() -> None:
    error = map_error(
        400,
        {"code": "23514", "message": "check failed", "details": "stock >= 0", "hint": "use a positive value"},
        "trace-1",
    )
    assert error.code == "23514"
    assert error.message == "check failed"
    assert error.details == "stock >= 0"
    assert error.hint == "use a positive value"
    assert error.trace_id == "trace-1"
    assert "trace_id=trace-1" in str(error)


def test_map_error_defaults_and_payload_trace() -> None:
    error = map_error(500, None, "trace-1")
    assert error.code == "HTTP_ERROR"
    assert error.message == "Request failed"
    assert map_error(500, {"trace_id": "payload-trace"}, "trace-1").trace_id == "payload-trace"


def test_user_facing_error_uses_friendly_messages() -> None:
    friendly = to_user_facing_error(map_error(400, {"error": "invalid_grant", "error_description": "x"}, "t"))
    assert friendly.message == "Invalid email or password"
    assert friendly.details == "invalid_grant (HTTP 400)"
    assert friendly.trace_id == "t"

    denied = to_user_facing_error(map_error(403, {"message": "nope"}, None))
    assert denied.message == "You do not have permission to perform this action"

    plain = to_user_facing_error(map_error(409, {"message": "Already exists", "details": "name"}, None))
    assert plain.message == "Already exists"
    assert plain.technical_details == "HTTP_ERROR (HTTP 409): name"
