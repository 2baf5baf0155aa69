from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(eq=False)
class ApiError(Exception):
    code: str
    message: str
    details: object | None
    trace_id: str | None
    status_code: int
    raw_payload: object | None = None
    hint: str | None = None

    def __str__(self) -> str:
        trace = f" trace_id={self.trace_id}" if self.trace_id else ""
        return f"[{self.status_code}] {self.code}: {self.message}{trace}"


class UnauthorizedError(ApiError):
    pass


class ForbiddenError(ApiError):
    pass


class NotFoundError(ApiError):
    pass


class ValidationError(ApiError):
    pass


class AuthError(UnauthorizedError):
    """Authentication failed or session is invalid."""


class PermissionDeniedError(ForbiddenError):
    """Row-level security or role check rejected the request."""


class ConflictError(ApiError):
    """409 or unique-violation style errors."""


class RateLimitError(ApiError):
    """429 throttling error."""


class ServerError(ApiError):
    """5xx server-side failures."""


class TransportError(ApiError):
    """Network/transport failure before an HTTP response was returned."""


class RecordStoreError(Exception):
    def __init__(
        self,
        message: str,
        *,
        table: str | None = None,
        record_id: object | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.table = table
        self.record_id = record_id
        self.cause = cause

    @property
    def trace_id(self) -> str | None:
        return getattr(self.cause, "trace_id", None)


class RecordNotFoundError(RecordStoreError):
    pass


class WriteError(RecordStoreError):
    """A record-store write failed.

    When raised from a checkout, ``stage`` names the step that failed,
    ``ticket_id`` is the ticket that was already persisted, and ``failures``
    maps product ids to the error of each failed stock write.
    """

    def __init__(
        self,
        message: str,
        *,
        table: str | None = None,
        record_id: object | None = None,
        cause: Exception | None = None,
        stage: str | None = None,
        ticket_id: str | None = None,
        failures: Mapping[Any, Exception] | None = None,
    ) -> None:
        super().__init__(message, table=table, record_id=record_id, cause=cause)
        self.stage = stage
        self.ticket_id = ticket_id
        self.failures = dict(failures or {})


class CheckoutError(Exception):
    def __init__(self, message: str, *, stage: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage


class EmptyCartError(CheckoutError):
    def __init__(self, message: str = "Cart is empty", *, stage: str | None = None) -> None:
        super().__init__(message, stage=stage)


class InsufficientStockError(CheckoutError):
    def __init__(self, product_id: Any, product_name: str, requested: int, available: int) -> None:
        super().__init__(
            f"Not enough stock for {product_name}: available {available}, requested {requested}"
        )
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available


@dataclass(frozen=True)
class StockShortage:
    product_id: Any
    product_name: str
    requested: int
    available: int

    def describe(self) -> str:
        return f"{self.product_name}: available {self.available}, requested {self.requested}"


class StockShortageError(CheckoutError):
    def __init__(self, shortages: list[StockShortage], *, stage: str | None = None) -> None:
        super().__init__("\n".join(item.describe() for item in shortages), stage=stage)
        self.shortages = shortages


class TicketCreationFailedError(CheckoutError):
    def __init__(self, message: str, *, cause: Exception | None = None, stage: str | None = None) -> None:
        super().__init__(message, stage=stage)
        self.cause = cause


@dataclass(eq=False)
class ServiceError(RuntimeError):
    message: str
    details: str | None = None
    trace_id: str | None = None
    code: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message
