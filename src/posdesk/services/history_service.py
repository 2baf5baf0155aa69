from __future__ import annotations

import logging
from typing import Iterable

from ..exceptions import ServiceError
from ..models_tickets import TicketRecord
from ..navigation import ROUTE_ROLES, Route
from ..session import BackendSession
from .errors import normalize_error

logger = logging.getLogger(__name__)

HISTORY_ROLES = ROUTE_ROLES[Route.HISTORY]


class HistoryServiceError(ServiceError):
    pass


def search_tickets(tickets: Iterable[TicketRecord], term: str) -> list[TicketRecord]:
    """Case-insensitive match on ticket id, seller name or username, and product names."""
    needle = term.strip().lower()
    if not needle:
        return list(tickets)
    return [ticket for ticket in tickets if needle in _haystack(ticket)]


def _haystack(ticket: TicketRecord) -> str:
    parts = [ticket.id]
    if ticket.seller is not None:
        parts.extend(value for value in (ticket.seller.full_name, ticket.seller.username) if value)
    parts.extend(line.product_name for line in ticket.lines)
    return " ".join(parts).lower()


class HistoryService:
    def __init__(self, session: BackendSession) -> None:
        self.session = session

    def can_view(self) -> bool:
        profile = self.session.profile
        return profile is not None and profile.effective_role in HISTORY_ROLES

    def list_tickets(self) -> list[TicketRecord]:
        if not self.session.token:
            raise HistoryServiceError(message="Not signed in", code="NO_SESSION")
        if not self.can_view():
            raise HistoryServiceError(message="You do not have permission to view sales history", code="FORBIDDEN")
        try:
            tickets = self.session.tickets_client().list_tickets()
        except Exception as exc:
            raise normalize_error(exc, HistoryServiceError, "Could not load tickets") from exc
        logger.info("tickets_loaded", extra={"count": len(tickets)})
        return tickets
