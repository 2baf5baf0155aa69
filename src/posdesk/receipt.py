from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from .models_tickets import TicketRecord

CENT = Decimal("0.01")

_MONTHS = {
    "es": (
        "enero", "febrero", "marzo", "abril", "mayo", "junio",
        "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
    ),
    "en": (
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    ),
}

_LABELS = {
    "es": {"ticket": "Ticket", "date": "Fecha", "seller": "Vendedor", "total": "Total", "unconfirmed": "(pendiente de confirmar)"},
    "en": {"ticket": "Ticket", "date": "Date", "seller": "Seller", "total": "Total", "unconfirmed": "(unconfirmed)"},
}


def format_amount(value: Decimal | int | float | str) -> str:
    amount = Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)
    return f"${amount}"


def format_sale_date(value: datetime | None, language: str = "es", tz: tzinfo | None = None) -> str:
    if value is None:
        return "-"
    if tz is not None and value.tzinfo is not None:
        value = value.astimezone(tz)
    month = _MONTHS[language][value.month - 1]
    clock = f"{value.hour:02d}:{value.minute:02d}"
    if language == "es":
        return f"{value.day} de {month} de {value.year}, {clock}"
    return f"{month} {value.day}, {value.year}, {clock}"


@dataclass(frozen=True)
class ReceiptLineView:
    product_name: str
    quantity: int
    unit_price: str
    subtotal: str

    @property
    def summary(self) -> str:
        return f"{self.quantity} x {self.unit_price}"


@dataclass(frozen=True)
class ReceiptView:
    ticket_id: str
    short_id: str
    sale_date: str
    seller: str | None
    lines: tuple[ReceiptLineView, ...]
    total: str
    confirmed: bool = True

    def render(self) -> dict[str, Any]:
        return {
            "ticket_id": self.ticket_id,
            "short_id": self.short_id,
            "sale_date": self.sale_date,
            "seller": self.seller,
            "lines": [
                {
                    "product_name": line.product_name,
                    "quantity": line.quantity,
                    "unit_price": line.unit_price,
                    "subtotal": line.subtotal,
                }
                for line in self.lines
            ],
            "total": self.total,
            "confirmed": self.confirmed,
        }


class ReceiptPresenter:
    def __init__(self, language: str = "es", tz: tzinfo | None = None) -> None:
        if language not in _MONTHS:
            raise ValueError(f"Unsupported receipt language: {language}")
        self.language = language
        self.tz = tz

    def present(self, ticket: TicketRecord, *, confirmed: bool = True) -> ReceiptView:
        seller = ticket.seller.display_name if ticket.seller else None
        return ReceiptView(
            ticket_id=ticket.id,
            short_id=ticket.id[:8],
            sale_date=format_sale_date(ticket.sale_date, self.language, self.tz),
            seller=seller,
            lines=tuple(
                ReceiptLineView(
                    product_name=line.product_name,
                    quantity=line.quantity,
                    unit_price=format_amount(line.unit_price),
                    subtotal=format_amount(line.subtotal),
                )
                for line in ticket.lines
            ),
            total=format_amount(ticket.total_amount),
            confirmed=confirmed,
        )

    def render_text(self, view: ReceiptView) -> str:
        labels = _LABELS[self.language]
        header = f"{labels['ticket']} #{view.short_id}"
        if not view.confirmed:
            header = f"{header} {labels['unconfirmed']}"
        out = [header, f"{labels['date']}: {view.sale_date}"]
        if view.seller:
            out.append(f"{labels['seller']}: {view.seller}")
        out.append("")
        for line in view.lines:
            out.append(f"{line.product_name}  {line.summary}  {line.subtotal}")
        out.append("")
        out.append(f"{labels['total']}: {view.total}")
        return "\n".join(out)


def present_ticket(ticket: TicketRecord, language: str = "es") -> ReceiptView:
    return ReceiptPresenter(language).present(ticket)
