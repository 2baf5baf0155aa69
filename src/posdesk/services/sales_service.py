from __future__ import annotations

import logging
from time import perf_counter
from typing import Sequence

from ..cart import Cart
from ..checkout import CheckoutOrchestrator, CheckoutResult, CheckoutStage, StageListener
from ..exceptions import CheckoutError, ServiceError, StockShortage, StockShortageError, WriteError
from ..models_inventory import Product, ProductQuery
from ..navigation import ROUTE_ROLES, Route
from ..receipt import ReceiptPresenter
from ..session import BackendSession
from ..telemetry import TelemetryLogger, build_event
from .errors import normalize_error

logger = logging.getLogger(__name__)

SALES_ROLES = ROUTE_ROLES[Route.SALES]
# Reported by the orchestrator after a failure; the stage before them is where it stopped.
_TERMINAL_FAILURE_STAGES = frozenset({CheckoutStage.ABORTED, CheckoutStage.PARTIALLY_WRITTEN})


class SalesServiceError(ServiceError):
    pass


def shortage_message(shortages: Sequence[StockShortage]) -> str:
    return "Not enough stock:\n" + "\n".join(item.describe() for item in shortages)


class SalesService:
    def __init__(
        self,
        session: BackendSession,
        *,
        telemetry: TelemetryLogger | None = None,
        presenter: ReceiptPresenter | None = None,
        on_stage: StageListener | None = None,
    ) -> None:
        self.session = session
        self.telemetry = telemetry or TelemetryLogger(enabled=False)
        self.presenter = presenter or ReceiptPresenter(session.config.receipt_language)
        self.on_stage = on_stage

    def can_sell(self) -> bool:
        profile = self.session.profile
        return profile is not None and profile.effective_role in SALES_ROLES

    def catalog(self, limit: int | None = None) -> list[Product]:
        query = ProductQuery(
            in_stock_only=True,
            order_by="stock",
            ascending=False,
            limit=limit or self.session.config.catalog_limit,
        )
        try:
            return self.session.products_client().list_products(query)
        except Exception as exc:
            raise normalize_error(exc, SalesServiceError, "Could not load products") from exc

    def orchestrator(self, on_stage: StageListener | None = None) -> CheckoutOrchestrator:
        return CheckoutOrchestrator(
            self.session.record_store(),
            max_workers=self.session.config.stock_write_workers,
            guard_stock_writes=self.session.config.guard_stock_writes,
            presenter=self.presenter,
            on_stage=on_stage or self.on_stage,
        )

    def checkout(self, cart: Cart) -> CheckoutResult:
        seller_id = self.session.user_id
        if not seller_id:
            raise SalesServiceError(message="Not signed in", code="NO_SESSION")
        if not self.can_sell():
            raise SalesServiceError(message="You do not have permission to register sales", code="FORBIDDEN")
        line_count = len(cart)
        reached: list[CheckoutStage] = []

        def track(stage: CheckoutStage) -> None:
            if stage not in _TERMINAL_FAILURE_STAGES:
                reached.append(stage)
            if self.on_stage:
                self.on_stage(stage)

        started = perf_counter()
        try:
            result = self.orchestrator(on_stage=track).checkout(cart, seller_id)
        except StockShortageError as exc:
            self._emit(False, started, line_count, error_code="STOCK_SHORTAGE", stage=exc.stage)
            raise SalesServiceError(
                message=shortage_message(exc.shortages),
                code="STOCK_SHORTAGE",
                extra={"stage": exc.stage, "shortages": list(exc.shortages)},
            ) from exc
        except (CheckoutError, WriteError) as exc:
            self._emit(False, started, line_count, error_code=type(exc).__name__, stage=exc.stage)
            logger.error("checkout_failed", extra={"stage": exc.stage, "error": type(exc).__name__})
            raise normalize_error(exc, SalesServiceError, "Checkout failed") from exc
        except Exception as exc:
            stage = reached[-1] if reached else None
            self._emit(False, started, line_count, error_code=type(exc).__name__, stage=stage)
            logger.exception("checkout_failed")
            error = normalize_error(exc, SalesServiceError, "Checkout failed")
            error.extra.setdefault("stage", stage)
            raise error from exc
        self._emit(True, started, line_count, error_code=None, stage=result.stage, trace_id=self.session.trace.trace_id)
        return result

    def _emit(
        self,
        success: bool,
        started: float,
        line_count: int,
        *,
        error_code: str | None,
        stage: object,
        trace_id: str | None = None,
    ) -> None:
        self.telemetry.emit(
            build_event(
                category="checkout",
                name="checkout_result",
                module="sales",
                action="checkout",
                success=success,
                duration_ms=int((perf_counter() - started) * 1000),
                error_code=error_code,
                trace_id=trace_id,
                context={"line_count": line_count, "stage": getattr(stage, "value", stage)},
            )
        )
