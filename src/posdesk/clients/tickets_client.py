from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ..models_tickets import TICKET_SELECT, TicketCreate, TicketLineCreate, TicketRecord
from .base import TableClient, eq


@dataclass
class TicketsClient(TableClient):
    table: str = "tickets"
    items_table: str = "ticket_items"

    def insert_ticket(self, payload: TicketCreate) -> TicketRecord:
        data = self._insert([payload.model_dump(mode="json")], operation="insert_ticket")
        if not isinstance(data, list) or not data:
            raise ValueError("Expected created ticket in response")
        return TicketRecord.model_validate(data[0])

    def insert_items(self, lines: Sequence[TicketLineCreate]) -> None:
        self._request(
            "POST",
            f"{self.http.config.rest_path}/{self.items_table}",
            json_body=[line.model_dump(mode="json") for line in lines],
            headers={"Prefer": "return=minimal"},
            table=self.items_table,
            operation="insert_items",
        )

    def get_ticket(self, ticket_id: str) -> TicketRecord:
        data = self._select({"select": TICKET_SELECT, "id": eq(ticket_id)}, single=True, operation="get_ticket")
        if not isinstance(data, dict):
            raise ValueError("Expected ticket response to be a JSON object")
        return TicketRecord.model_validate(data)

    def list_tickets(self) -> list[TicketRecord]:
        data = self._select({"select": TICKET_SELECT, "order": "sale_date.desc"}, operation="list_tickets")
        if not isinstance(data, list):
            raise ValueError("Expected ticket list response to be a JSON array")
        return [TicketRecord.model_validate(row) for row in data]
