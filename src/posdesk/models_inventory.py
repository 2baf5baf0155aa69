from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ProductId = int | str


def decimal_from_number(value: Any) -> Any:
    if isinstance(value, float):
        return Decimal(str(value))
    return value


class Product(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: ProductId
    name: str
    price: Decimal = Field(ge=0)
    stock: int = Field(ge=0)
    description: str | None = None
    category: str | None = None
    created_at: datetime | None = None

    @field_validator("price", mode="before")
    @classmethod
    def _coerce_price(cls, value: Any) -> Any:
        return decimal_from_number(value)


class ProductInput(BaseModel):
    """Editable product fields as captured by the inventory form."""

    name: str = Field(min_length=1)
    description: str = ""
    price: Decimal = Field(default=Decimal("0"), ge=0)
    stock: int = Field(default=0, ge=0)
    category: str = ""

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("name must not be blank")
        return stripped

    @field_validator("price", mode="before")
    @classmethod
    def _coerce_price(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                parsed = Decimal(value.strip() or "0")
            except InvalidOperation:
                return Decimal("0")
            return parsed if parsed.is_finite() else Decimal("0")
        return decimal_from_number(value)

    @field_validator("stock", mode="before")
    @classmethod
    def _coerce_stock(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip() or "0"
        if isinstance(value, (str, float)):
            try:
                return int(float(value))
            except (ValueError, OverflowError):
                return 0
        return value


class ProductQuery(BaseModel):
    in_stock_only: bool = False
    order_by: Literal["created_at", "stock", "name", "price"] = "created_at"
    ascending: bool = False
    limit: int | None = Field(default=None, ge=1)
    columns: str = "*"

    def to_params(self) -> dict[str, str]:
        direction = "asc" if self.ascending else "desc"
        params = {"select": self.columns, "order": f"{self.order_by}.{direction}"}
        if self.in_stock_only:
            params["stock"] = "gt.0"
        if self.limit is not None:
            params["limit"] = str(self.limit)
        return params
