from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..models_tickets import TicketRecord
from ..receipt import ReceiptPresenter, ReceiptView, format_amount
from ..services.history_service import HistoryService, HistoryServiceError, search_tickets
from .view_context import ViewContext


@dataclass
class HistoryView:
    service: HistoryService
    context: ViewContext
    presenter: ReceiptPresenter = field(default_factory=ReceiptPresenter)
    tickets: list[TicketRecord] = field(default_factory=list)
    query: str = ""
    selected: ReceiptView | None = None
    error_message: str | None = None
    trace_id: str | None = None
    is_loading: bool = False

    def load(self) -> dict[str, Any]:
        self.is_loading = True
        try:
            self.tickets = self.service.list_tickets()
        except HistoryServiceError as exc:
            self.error_message = f"Error loading tickets: {exc.message}"
            self.trace_id = exc.trace_id
            return {"ok": False, "error": self.error_message, "trace_id": exc.trace_id}
        finally:
            self.is_loading = False
        self.error_message = None
        return {"ok": True, "tickets": self._render_rows()}

    def search(self, term: str) -> dict[str, Any]:
        self.query = term
        return {"ok": True, "tickets": self._render_rows()}

    def select(self, ticket_id: str) -> dict[str, Any]:
        ticket = next((item for item in self.tickets if item.id == ticket_id), None)
        if ticket is None:
            return {"ok": False, "error": "Ticket not found"}
        self.selected = self.presenter.present(ticket)
        return {
            "ok": True,
            "receipt": self.selected.render(),
            "text": self.presenter.render_text(self.selected),
        }

    def close_detail(self) -> None:
        self.selected = None

    def render(self) -> dict[str, Any]:
        return {
            "context": self.context.render(),
            "query": self.query,
            "tickets": self._render_rows(),
            "selected": self.selected.render() if self.selected else None,
            "error": self.error_message,
            "trace_id": self.trace_id,
            "loading": self.is_loading,
        }

    def _render_rows(self) -> list[dict[str, Any]]:
        rows = []
        for ticket in search_tickets(self.tickets, self.query):
            view = self.presenter.present(ticket)
            rows.append(
                {
                    "id": ticket.id,
                    "short_id": view.short_id,
                    "sale_date": view.sale_date,
                    "seller": view.seller or "Unknown",
                    "total": format_amount(ticket.total_amount),
                    "items": [f"{line.quantity} x {line.product_name}" for line in ticket.lines],
                }
            )
        return rows
