from __future__ import annotations

from dataclasses import dataclass

from ..exceptions import NotFoundError
from ..models_inventory import Product, ProductId, ProductInput, ProductQuery
from .base import TableClient, eq

STOCK_COLUMNS = "id,name,price,stock"


@dataclass
class ProductsClient(TableClient):
    table: str = "products"

    def get_product(self, product_id: ProductId, columns: str = STOCK_COLUMNS) -> Product:
        data = self._select({"select": columns, "id": eq(product_id)}, single=True, operation="get_product")
        if not isinstance(data, dict):
            raise ValueError("Expected product response to be a JSON object")
        return Product.model_validate(data)

    def list_products(self, query: ProductQuery | None = None) -> list[Product]:
        params = (query or ProductQuery()).to_params()
        data = self._select(params, operation="list_products")
        if not isinstance(data, list):
            raise ValueError("Expected product list response to be a JSON array")
        return [Product.model_validate(row) for row in data]

    def create_product(self, payload: ProductInput) -> Product:
        data = self._insert([payload.model_dump(mode="json")], operation="create_product")
        if not isinstance(data, list) or not data:
            raise ValueError("Expected created product in response")
        return Product.model_validate(data[0])

    def update_product(self, product_id: ProductId, payload: ProductInput) -> Product:
        data = self._update({"id": eq(product_id)}, payload.model_dump(mode="json"), operation="update_product")
        if not data:
            raise _missing_product(product_id)
        row = data[0] if isinstance(data, list) else data
        return Product.model_validate(row)

    def delete_product(self, product_id: ProductId) -> None:
        self._delete({"id": eq(product_id)}, operation="delete_product")

    def update_stock(
        self,
        product_id: ProductId,
        new_stock: int,
        expected_stock: int | None = None,
    ) -> Product | None:
        """Overwrite the stock column; with ``expected_stock`` the write only lands if the row still holds it.

        Returns ``None`` when no row matched.
        """
        filters = {"id": eq(product_id)}
        if expected_stock is not None:
            filters["stock"] = eq(expected_stock)
        data = self._update(filters, {"stock": new_stock}, operation="update_stock")
        if not data:
            return None
        row = data[0] if isinstance(data, list) else data
        return Product.model_validate(row)


def _missing_product(product_id: ProductId) -> NotFoundError:
    return NotFoundError(
        code="PGRST116",
        message=f"Product {product_id} not found",
        details=None,
        trace_id=None,
        status_code=404,
    )
