from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..navigation import allowed_nav_items
from .checkout_panel import CheckoutPanel
from .view_context import ViewContext


@dataclass
class CashierDashboard:
    context: ViewContext
    panel: CheckoutPanel

    def open(self) -> dict[str, Any]:
        return self.panel.load_catalog()

    def render(self) -> dict[str, Any]:
        return {
            "title": "Cashier",
            "navigation": [item.label for item in allowed_nav_items(self.context.role)],
            **self.panel.render(),
        }
