from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterator

from .exceptions import InsufficientStockError
from .models_inventory import Product, ProductId

ZERO = Decimal("0")


@dataclass
class CartLine:
    product_id: ProductId
    name: str
    unit_price: Decimal
    quantity: int
    stock: int

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


class Cart:
    """Requested quantities keyed by product id, bounded by the last stock seen per product.

    Rejected mutations raise ``InsufficientStockError`` and leave the cart unchanged,
    except that a product snapshot passed to ``add`` always becomes the line's known
    stock: a line above it is clamped down to it, or dropped when it is zero.
    """

    def __init__(self) -> None:
        self._lines: dict[ProductId, CartLine] = {}
        self._total = ZERO

    def add(self, product: Product, quantity: int = 1) -> CartLine:
        _check_positive(quantity)
        line = self._lines.get(product.id)
        if line is not None:
            self._observe(line, product.stock)
            line = self._lines.get(product.id)
        current = line.quantity if line else 0
        requested = current + quantity
        if requested > product.stock:
            raise InsufficientStockError(product.id, product.name, requested, product.stock)
        if line is None:
            line = CartLine(
                product_id=product.id,
                name=product.name,
                unit_price=product.price,
                quantity=quantity,
                stock=product.stock,
            )
            self._lines[product.id] = line
            self._total += line.subtotal
            return line
        self._apply(line, requested)
        return line

    def set_quantity(self, product_id: ProductId, quantity: int) -> None:
        line = self._lines.get(product_id)
        if line is None:
            return
        if quantity < 1:
            self.remove(product_id)
            return
        if quantity > line.stock:
            raise InsufficientStockError(product_id, line.name, quantity, line.stock)
        self._apply(line, quantity)

    def decrement(self, product_id: ProductId) -> None:
        line = self._lines.get(product_id)
        if line is not None:
            self.set_quantity(product_id, line.quantity - 1)

    def remove(self, product_id: ProductId) -> None:
        line = self._lines.pop(product_id, None)
        if line is not None:
            self._total -= line.subtotal

    def clear(self) -> None:
        self._lines.clear()
        self._total = ZERO

    def total(self) -> Decimal:
        return self._total

    def get(self, product_id: ProductId) -> CartLine | None:
        return self._lines.get(product_id)

    def lines(self) -> list[CartLine]:
        return list(self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[CartLine]:
        return iter(self.lines())

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._lines

    def _observe(self, line: CartLine, stock: int) -> None:
        line.stock = stock
        if line.quantity <= stock:
            return
        if stock < 1:
            self.remove(line.product_id)
        else:
            self._apply(line, stock)

    def _apply(self, line: CartLine, quantity: int) -> None:
        self._total += line.unit_price * (quantity - line.quantity)
        line.quantity = quantity


def _check_positive(quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValueError(f"quantity must be a positive integer, got {quantity!r}")
