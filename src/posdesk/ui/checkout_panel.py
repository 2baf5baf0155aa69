from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..cart import Cart
from ..exceptions import InsufficientStockError
from ..models_inventory import Product, ProductId
from ..receipt import ReceiptView, format_amount
from ..services.sales_service import SalesService, SalesServiceError
from .error_presenter import ErrorPresenter
from .view_context import ViewContext


@dataclass
class CheckoutPanel:
    """Catalog, cart and checkout shared by the cashier and admin dashboards."""

    service: SalesService
    context: ViewContext
    cart: Cart = field(default_factory=Cart)
    catalog: list[Product] = field(default_factory=list)
    last_receipt: ReceiptView | None = None
    error_message: str | None = None
    trace_id: str | None = None
    is_processing: bool = False

    def load_catalog(self) -> dict[str, Any]:
        try:
            self.catalog = self.service.catalog()
        except SalesServiceError as exc:
            self.error_message = exc.message
            self.trace_id = exc.trace_id
            return {"ok": False, "error": exc.message, "trace_id": exc.trace_id}
        return {"ok": True, "catalog": self._render_catalog()}

    def add_product(self, product_id: ProductId, quantity: int = 1) -> dict[str, Any]:
        product = self._find(product_id)
        if product is None:
            return {"ok": False, "error": "Product is not in the catalog"}
        try:
            self.cart.add(product, quantity)
        except (InsufficientStockError, ValueError) as exc:
            return {"ok": False, "error": str(exc)}
        return {"ok": True, "cart": self._render_cart()}

    def set_quantity(self, product_id: ProductId, quantity: int) -> dict[str, Any]:
        try:
            self.cart.set_quantity(product_id, quantity)
        except InsufficientStockError as exc:
            return {"ok": False, "error": exc.message, "cart": self._render_cart()}
        return {"ok": True, "cart": self._render_cart()}

    def decrement(self, product_id: ProductId) -> dict[str, Any]:
        self.cart.decrement(product_id)
        return {"ok": True, "cart": self._render_cart()}

    def remove_line(self, product_id: ProductId) -> dict[str, Any]:
        self.cart.remove(product_id)
        return {"ok": True, "cart": self._render_cart()}

    def cancel(self) -> dict[str, Any]:
        if self.is_processing:
            return {"ok": False, "error": "Checkout already in progress"}
        self.cart.clear()
        return {"ok": True, "cart": self._render_cart()}

    def checkout(self) -> dict[str, Any]:
        if self.is_processing:
            return {"ok": False, "error": "Checkout already in progress"}
        if self.cart.is_empty:
            return {"ok": False, "error": "Cart is empty", "category": "validation"}
        self.is_processing = True
        try:
            result = self.service.checkout(self.cart)
        except SalesServiceError as exc:
            stage = exc.extra.get("stage")
            presented = ErrorPresenter().present(
                message=exc.message,
                details=exc.details,
                trace_id=exc.trace_id,
                action="sales.checkout",
                code=exc.code,
                stage=stage,
                allow_retry=True,
            )
            self.error_message = exc.message
            self.trace_id = exc.trace_id
            response = {
                "ok": False,
                "error": exc.message,
                "summary": presented.user_message,
                "category": presented.category,
                "trace_id": exc.trace_id,
                "safe_to_retry": presented.safe_to_retry,
            }
            if exc.extra.get("ticket_id"):
                response["ticket_id"] = exc.extra["ticket_id"]
                response["partially_written"] = True
            return response
        finally:
            self.is_processing = False

        self.last_receipt = result.receipt
        self.error_message = None
        refreshed = self.load_catalog()
        return {
            "ok": True,
            "ticket_id": result.ticket.id,
            "confirmed": result.confirmed,
            "receipt": result.receipt.render(),
            "catalog_refreshed": refreshed["ok"],
        }

    def dismiss_receipt(self) -> None:
        self.last_receipt = None

    def render(self) -> dict[str, Any]:
        return {
            "context": self.context.render(),
            "catalog": self._render_catalog(),
            "cart": self._render_cart(),
            "receipt": self.last_receipt.render() if self.last_receipt else None,
            "error": self.error_message,
            "trace_id": self.trace_id,
            "guards": {
                "disable_while_processing": self.is_processing,
                "double_submit_protection": True,
                "checkout_enabled": not self.cart.is_empty and not self.is_processing,
            },
        }

    def _find(self, product_id: ProductId) -> Product | None:
        return next((product for product in self.catalog if product.id == product_id), None)

    def _render_catalog(self) -> list[dict[str, Any]]:
        return [
            {"id": product.id, "name": product.name, "price": format_amount(product.price), "stock": product.stock}
            for product in self.catalog
        ]

    def _render_cart(self) -> dict[str, Any]:
        return {
            "lines": [
                {
                    "product_id": line.product_id,
                    "name": line.name,
                    "unit_price": format_amount(line.unit_price),
                    "quantity": line.quantity,
                    "subtotal": format_amount(line.subtotal),
                    "can_increment": line.quantity < line.stock,
                }
                for line in self.cart.lines()
            ],
            "total": format_amount(self.cart.total()),
        }
