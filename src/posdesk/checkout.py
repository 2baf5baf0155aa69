from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Callable

from .cart import Cart, CartLine
from .exceptions import (
    ApiError,
    EmptyCartError,
    RecordNotFoundError,
    RecordStoreError,
    StockShortage,
    StockShortageError,
    TicketCreationFailedError,
    WriteError,
)
from .models_inventory import ProductId
from .models_tickets import TicketLineCreate, TicketLineRecord, TicketRecord
from .receipt import ReceiptPresenter, ReceiptView
from .record_store import RecordStore

logger = logging.getLogger(__name__)


class CheckoutStage(str, Enum):
    IDLE = "idle"
    VALIDATING_STOCK = "validating_stock"
    CREATING = "creating"
    WRITING_LINES = "writing_lines"
    WRITING_STOCK = "writing_stock"
    COMPLETE = "complete"
    ABORTED = "aborted"
    PARTIALLY_WRITTEN = "partially_written"


StageListener = Callable[[CheckoutStage], None]


@dataclass(frozen=True)
class CheckoutResult:
    ticket: TicketRecord
    receipt: ReceiptView
    stage: CheckoutStage = CheckoutStage.COMPLETE
    confirmed: bool = True


class CheckoutOrchestrator:
    """Turns a cart into a persisted ticket through a sequence of record-store calls.

    The writes are not atomic. A failure after the ticket insert raises
    ``WriteError`` carrying ``ticket_id`` and leaves whatever was written in
    place; nothing is compensated or retried.

    Stock decrements overwrite ``stock`` with ``live_stock - quantity`` using the
    value read during validation. With ``guard_stock_writes`` each write only
    applies if the row still holds that value.
    """

    def __init__(
        self,
        store: RecordStore,
        *,
        max_workers: int = 4,
        guard_stock_writes: bool = False,
        presenter: ReceiptPresenter | None = None,
        on_stage: StageListener | None = None,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        self.store = store
        self.max_workers = max_workers
        self.guard_stock_writes = guard_stock_writes
        self.presenter = presenter or ReceiptPresenter()
        self.on_stage = on_stage

    def checkout(self, cart: Cart, seller_id: str) -> CheckoutResult:
        self._enter(CheckoutStage.IDLE)
        if cart.is_empty:
            self._enter(CheckoutStage.ABORTED)
            raise EmptyCartError(stage=CheckoutStage.IDLE)

        started = time.monotonic()
        lines = cart.lines()
        logger.info("checkout_started", extra={"line_count": len(lines), "seller_id": seller_id})

        self._enter(CheckoutStage.VALIDATING_STOCK)
        try:
            live_stock = self._validate_stock(lines)
        except Exception:
            self._enter(CheckoutStage.ABORTED)
            raise

        self._enter(CheckoutStage.CREATING)
        total = cart.total()
        try:
            ticket_id = self.store.insert_ticket(seller_id, total)
        except (RecordStoreError, ApiError) as exc:
            self._enter(CheckoutStage.ABORTED)
            logger.error("checkout_ticket_create_failed", extra={"seller_id": seller_id})
            raise TicketCreationFailedError(
                f"Could not create the ticket: {exc}",
                cause=exc,
                stage=CheckoutStage.CREATING,
            ) from exc

        self._enter(CheckoutStage.WRITING_LINES)
        try:
            self.store.insert_ticket_lines(ticket_id, [_ticket_line(ticket_id, line) for line in lines])
        except (RecordStoreError, ApiError, ValueError) as exc:
            self._enter(CheckoutStage.PARTIALLY_WRITTEN)
            logger.error("checkout_lines_failed", extra={"ticket_id": ticket_id})
            raise WriteError(
                f"Ticket {ticket_id} was created but its lines could not be stored: {exc}",
                table="ticket_items",
                record_id=ticket_id,
                cause=exc,
                stage=CheckoutStage.WRITING_LINES,
                ticket_id=ticket_id,
            ) from exc

        self._enter(CheckoutStage.WRITING_STOCK)
        failures = self._write_stock(lines, live_stock)
        if failures:
            self._enter(CheckoutStage.PARTIALLY_WRITTEN)
            logger.error(
                "checkout_stock_failed",
                extra={"ticket_id": ticket_id, "failed_products": [str(key) for key in failures]},
            )
            names = ", ".join(str(product_id) for product_id in failures)
            first = next(iter(failures.values()))
            raise WriteError(
                f"Ticket {ticket_id} was stored but stock could not be updated for products: {names}",
                table="products",
                record_id=ticket_id,
                cause=first,
                stage=CheckoutStage.WRITING_STOCK,
                ticket_id=ticket_id,
                failures=failures,
            ) from first

        self._enter(CheckoutStage.COMPLETE)
        confirmed = True
        try:
            ticket = self.store.read_ticket_with_lines(ticket_id)
        except (RecordStoreError, ApiError) as exc:
            confirmed = False
            logger.warning("checkout_ticket_refetch_failed", extra={"ticket_id": ticket_id, "error": str(exc)})
            ticket = _local_ticket(ticket_id, seller_id, total, lines)

        cart.clear()
        logger.info(
            "checkout_complete",
            extra={
                "ticket_id": ticket_id,
                "total": str(total),
                "duration_ms": int((time.monotonic() - started) * 1000),
            },
        )
        return CheckoutResult(
            ticket=ticket,
            receipt=self.presenter.present(ticket, confirmed=confirmed),
            stage=CheckoutStage.COMPLETE,
            confirmed=confirmed,
        )

    def _validate_stock(self, lines: list[CartLine]) -> dict[ProductId, int]:
        live_stock: dict[ProductId, int] = {}
        shortages: list[StockShortage] = []
        for line in lines:
            try:
                available = self.store.read_product(line.product_id).stock
            except RecordNotFoundError:
                available = 0
            live_stock[line.product_id] = available
            if available < line.quantity:
                shortages.append(
                    StockShortage(
                        product_id=line.product_id,
                        product_name=line.name,
                        requested=line.quantity,
                        available=available,
                    )
                )
        if shortages:
            logger.warning("checkout_stock_shortage", extra={"shortage_count": len(shortages)})
            raise StockShortageError(shortages, stage=CheckoutStage.VALIDATING_STOCK)
        return live_stock

    def _write_stock(self, lines: list[CartLine], live_stock: dict[ProductId, int]) -> dict[ProductId, Exception]:
        failures: dict[ProductId, Exception] = {}
        workers = min(self.max_workers, len(lines))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="stock-write") as pool:
            futures = {
                line.product_id: pool.submit(
                    self.store.update_product_stock,
                    line.product_id,
                    live_stock[line.product_id] - line.quantity,
                    live_stock[line.product_id] if self.guard_stock_writes else None,
                )
                for line in lines
            }
            for product_id, future in futures.items():
                exc = future.exception()
                if exc is not None:
                    failures[product_id] = exc
        return failures

    def _enter(self, stage: CheckoutStage) -> None:
        logger.debug("checkout_stage", extra={"stage": stage.value})
        if self.on_stage:
            self.on_stage(stage)


def _ticket_line(ticket_id: str, line: CartLine) -> TicketLineCreate:
    return TicketLineCreate(
        ticket_id=ticket_id,
        product_id=line.product_id,
        product_name=line.name,
        quantity=line.quantity,
        unit_price=line.unit_price,
    )


def _local_ticket(ticket_id: str, seller_id: str, total: Decimal, lines: list[CartLine]) -> TicketRecord:
    return TicketRecord(
        id=ticket_id,
        sale_date=datetime.now(timezone.utc),
        total_amount=total,
        seller_id=seller_id,
        ticket_items=[
            TicketLineRecord(product_name=line.name, quantity=line.quantity, unit_price=line.unit_price)
            for line in lines
        ],
    )
