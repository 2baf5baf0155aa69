from __future__ import annotations

from ..exceptions import ApiError, CheckoutError, RecordStoreError, ServiceError, WriteError
from ..ui_errors import to_user_facing_error


def normalize_error(exc: Exception, error_cls: type[ServiceError], fallback: str) -> ServiceError:
    if isinstance(exc, error_cls):
        return exc
    if isinstance(exc, ApiError):
        friendly = to_user_facing_error(exc)
        return error_cls(
            message=friendly.message,
            details=friendly.details,
            trace_id=exc.trace_id,
            code=exc.code,
        )
    if isinstance(exc, WriteError):
        return error_cls(
            message=exc.message,
            details=str(exc.cause) if exc.cause is not None else None,
            trace_id=exc.trace_id,
            code="WRITE_ERROR",
            extra={"stage": exc.stage, "ticket_id": exc.ticket_id},
        )
    if isinstance(exc, RecordStoreError):
        return error_cls(message=exc.message, trace_id=exc.trace_id, code=type(exc).__name__)
    if isinstance(exc, CheckoutError):
        return error_cls(message=exc.message, code=type(exc).__name__, extra={"stage": exc.stage})
    return error_cls(message=str(exc) or fallback)
