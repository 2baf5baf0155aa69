from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..models_inventory import Product, ProductId
from ..receipt import format_amount
from ..services.inventory_service import InventoryService, InventoryServiceError
from .view_context import ViewContext

EMPTY_FORM = {"name": "", "description": "", "price": "", "stock": "", "category": ""}


@dataclass
class InventoryView:
    service: InventoryService
    context: ViewContext
    products: list[Product] = field(default_factory=list)
    form: dict[str, Any] = field(default_factory=lambda: dict(EMPTY_FORM))
    editing_id: ProductId | None = None
    error_message: str | None = None
    trace_id: str | None = None
    is_submitting: bool = False

    def load(self) -> dict[str, Any]:
        try:
            self.products = self.service.list_products()
        except InventoryServiceError as exc:
            return self._fail("Error loading products", exc)
        self.error_message = None
        return {"ok": True, "products": self._render_products()}

    def start_edit(self, product_id: ProductId) -> dict[str, Any]:
        product = next((item for item in self.products if item.id == product_id), None)
        if product is None:
            return {"ok": False, "error": "Product not found"}
        self.editing_id = product.id
        self.form = {
            "name": product.name,
            "description": product.description or "",
            "price": str(product.price),
            "stock": str(product.stock),
            "category": product.category or "",
        }
        return {"ok": True, "form": dict(self.form)}

    def reset_form(self) -> None:
        self.form = dict(EMPTY_FORM)
        self.editing_id = None

    def save(self, values: dict[str, Any] | None = None) -> dict[str, Any]:
        if self.is_submitting:
            return {"ok": False, "error": "Save already in progress"}
        if values:
            self.form.update(values)
        creating = self.editing_id is None
        self.is_submitting = True
        try:
            product = self.service.save_product(self.form, product_id=self.editing_id)
        except InventoryServiceError as exc:
            return self._fail(f"Error {'creating' if creating else 'updating'} product", exc)
        finally:
            self.is_submitting = False
        self.reset_form()
        reloaded = self.load()
        return {"ok": True, "product_id": product.id, "created": creating, "products": reloaded.get("products")}

    def delete(self, product_id: ProductId, *, confirmed: bool) -> dict[str, Any]:
        if not confirmed:
            return {"ok": False, "error": "Delete confirmation is required"}
        try:
            self.service.delete_product(product_id)
        except InventoryServiceError as exc:
            return self._fail("Error deleting product", exc)
        self.products = [item for item in self.products if item.id != product_id]
        if self.editing_id == product_id:
            self.reset_form()
        return {"ok": True, "products": self._render_products()}

    def render(self) -> dict[str, Any]:
        return {
            "context": self.context.render(),
            "can_manage": self.service.can_manage(),
            "products": self._render_products(),
            "form": dict(self.form),
            "editing_id": self.editing_id,
            "error": self.error_message,
            "trace_id": self.trace_id,
        }

    def _fail(self, prefix: str, exc: InventoryServiceError) -> dict[str, Any]:
        self.error_message = f"{prefix}: {exc.message}"
        self.trace_id = exc.trace_id
        return {
            "ok": False,
            "error": self.error_message,
            "trace_id": exc.trace_id,
            "details": exc.details,
            "fields": exc.extra.get("fields", []),
        }

    def _render_products(self) -> list[dict[str, Any]]:
        return [
            {
                "id": product.id,
                "name": product.name,
                "description": product.description,
                "category": product.category,
                "price": format_amount(product.price),
                "stock": product.stock,
            }
            for product in self.products
        ]
