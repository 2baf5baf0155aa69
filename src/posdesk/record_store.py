"""Record-store boundary used by the checkout flow.

``RecordStore`` is the narrow contract checkout needs; ``BackendRecordStore``
fulfils it over the REST clients and turns API failures into
``RecordNotFoundError`` (reads) or ``WriteError`` (writes).
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Callable, Protocol, Sequence

from .clients.products_client import ProductsClient
from .clients.tickets_client import TicketsClient
from .exceptions import ApiError, NotFoundError, RecordNotFoundError, WriteError
from .models_inventory import Product, ProductId
from .models_tickets import TicketCreate, TicketLineCreate, TicketRecord

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    def read_product(self, product_id: ProductId) -> Product: ...

    def insert_ticket(self, seller_id: str, total: Decimal) -> str: ...

    def insert_ticket_lines(self, ticket_id: str, lines: Sequence[TicketLineCreate]) -> None: ...

    def update_product_stock(
        self,
        product_id: ProductId,
        new_stock: int,
        expected_stock: int | None = None,
    ) -> None: ...

    def read_ticket_with_lines(self, ticket_id: str) -> TicketRecord: ...


class BackendRecordStore:
    def __init__(
        self,
        *,
        products: Callable[[], ProductsClient],
        tickets: Callable[[], TicketsClient],
    ) -> None:
        # factories, so concurrent stock writes never share a requests.Session
        self._products = products
        self._tickets = tickets

    def read_product(self, product_id: ProductId) -> Product:
        try:
            return self._products().get_product(product_id)
        except NotFoundError as exc:
            raise RecordNotFoundError(
                f"Product {product_id} not found",
                table="products",
                record_id=product_id,
                cause=exc,
            ) from exc

    def insert_ticket(self, seller_id: str, total: Decimal) -> str:
        payload = TicketCreate(seller_id=seller_id, total_amount=total)
        try:
            ticket = self._tickets().insert_ticket(payload)
        except (ApiError, ValueError) as exc:
            raise WriteError(f"Could not create ticket: {exc}", table="tickets", cause=exc) from exc
        logger.info("ticket_inserted", extra={"ticket_id": ticket.id})
        return ticket.id

    def insert_ticket_lines(self, ticket_id: str, lines: Sequence[TicketLineCreate]) -> None:
        if not lines:
            return
        rows = [line.model_copy(update={"ticket_id": ticket_id}) for line in lines]
        try:
            self._tickets().insert_items(rows)
        except ApiError as exc:
            raise WriteError(
                f"Could not store lines for ticket {ticket_id}: {exc}",
                table="ticket_items",
                record_id=ticket_id,
                cause=exc,
            ) from exc

    def update_product_stock(
        self,
        product_id: ProductId,
        new_stock: int,
        expected_stock: int | None = None,
    ) -> None:
        if new_stock < 0:
            raise WriteError(
                f"Refusing to set negative stock {new_stock} for product {product_id}",
                table="products",
                record_id=product_id,
            )
        try:
            updated = self._products().update_stock(product_id, new_stock, expected_stock=expected_stock)
        except (ApiError, ValueError) as exc:
            raise WriteError(
                f"Could not update stock for product {product_id}: {exc}",
                table="products",
                record_id=product_id,
                cause=exc,
            ) from exc
        if updated is None:
            reason = "stock changed since it was read" if expected_stock is not None else "product not found"
            raise WriteError(
                f"Could not update stock for product {product_id}: {reason}",
                table="products",
                record_id=product_id,
            )

    def read_ticket_with_lines(self, ticket_id: str) -> TicketRecord:
        try:
            return self._tickets().get_ticket(ticket_id)
        except NotFoundError as exc:
            raise RecordNotFoundError(
                f"Ticket {ticket_id} not found",
                table="tickets",
                record_id=ticket_id,
                cause=exc,
            ) from exc
