from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from .models_inventory import ProductId, decimal_from_number

TICKET_SELECT = (
    "id,sale_date,total_amount,seller_id,"
    "profiles(username,full_name),"
    "ticket_items(product_name,quantity,unit_price)"
)


class TicketSeller(BaseModel):
    model_config = ConfigDict(extra="allow")

    username: str | None = None
    full_name: str | None = None

    @property
    def display_name(self) -> str | None:
        return self.full_name or self.username


class TicketLineRecord(BaseModel):
    model_config = ConfigDict(extra="allow")

    product_name: str
    quantity: int
    unit_price: Decimal

    @field_validator("unit_price", mode="before")
    @classmethod
    def _coerce_unit_price(cls, value: Any) -> Any:
        return decimal_from_number(value)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


class TicketRecord(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    sale_date: datetime | None = None
    total_amount: Decimal
    seller_id: str | None = None
    profiles: TicketSeller | None = None
    ticket_items: list[TicketLineRecord] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("total_amount", mode="before")
    @classmethod
    def _coerce_total(cls, value: Any) -> Any:
        return decimal_from_number(value)

    @property
    def seller(self) -> TicketSeller | None:
        return self.profiles

    @property
    def lines(self) -> list[TicketLineRecord]:
        return self.ticket_items


class TicketCreate(BaseModel):
    seller_id: str
    total_amount: Decimal


class TicketLineCreate(BaseModel):
    ticket_id: str
    product_id: ProductId
    product_name: str
    quantity: int = Field(ge=1)
    unit_price: Decimal = Field(ge=0)
