from __future__ import annotations

from fakes import FakeSession, SALE_DATE, product, profile_for
from posdesk.exceptions import TransportError, WriteError
from posdesk.models import Role
from posdesk.models_tickets import TicketRecord
from posdesk.services.history_service import HistoryService
from posdesk.services.inventory_service import InventoryService
from posdesk.services.sales_service import SalesService
from posdesk.services.users_service import UsersService
from posdesk.ui.admin_dashboard import AdminDashboard
from posdesk.ui.cashier_dashboard import CashierDashboard
from posdesk.ui.checkout_panel import CheckoutPanel
from posdesk.ui.error_presenter import ErrorPresenter
from posdesk.ui.history_view import HistoryView
from posdesk.ui.inventory_view import InventoryView
from posdesk.ui.view_context import Theme, ViewContext


def _panel(role: Role = Role.CASHIER, *products) -> tuple[CheckoutPanel, FakeSession]:
    session = FakeSession(profile=profile_for(role))
    for item in products:
        session.store.products[item.id] = item
    context = ViewContext(profile=session.profile)
    return CheckoutPanel(service=SalesService(session), context=context), session


def test_view_context_toggles_theme() -> None:
    context = ViewContext(profile=profile_for(Role.ADMIN, full_name="Ana Admin"))
    assert context.toggle_theme() is Theme.DARK
    rendered = context.render()
    assert rendered["theme"] == "dark"
    assert rendered["palette"]["background"] == "#121212"
    assert rendered["user"] == "Ana Admin"
    assert rendered["role"] == "admin"
    assert context.toggle_theme() is Theme.LIGHT


def test_panel_sale_flow_refreshes_catalog() -> None:
    panel, session = _panel(Role.CASHIER, product(1, "Widget", "9.99", 10), product(2, "Gadget", "1.00", 1))
    assert panel.load_catalog()["ok"]

    assert panel.add_product(1)["ok"]
    assert panel.set_quantity(1, 3)["cart"]["total"] == "$29.97"
    assert panel.add_product(2)["ok"]
    assert panel.add_product(2)["ok"] is False

    result = panel.checkout()

    assert result["ok"] is True
    assert result["receipt"]["total"] == "$30.97"
    assert result["catalog_refreshed"] is True
    assert [row["id"] for row in panel.render()["catalog"]] == [1]
    assert panel.render()["catalog"][0]["stock"] == 7
    assert panel.cart.is_empty
    assert panel.last_receipt is not None
    assert session.store.stock_of(2) == 0


def test_panel_decrement_and_remove() -> None:
    panel, _ = _panel(Role.CASHIER, product(1, "Widget", "9.99", 10))
    panel.load_catalog()
    panel.add_product(1, 2)
    assert panel.decrement(1)["cart"]["lines"][0]["quantity"] == 1
    assert panel.decrement(1)["cart"]["lines"] == []
    panel.add_product(1)
    assert panel.remove_line(1)["cart"]["total"] == "$0.00"


def test_panel_rejects_unknown_product_and_overstock() -> None:
    panel, _ = _panel(Role.CASHIER, product(1, "Widget", "9.99", 2))
    panel.load_catalog()
    assert panel.add_product(99) == {"ok": False, "error": "Product is not in the catalog"}
    panel.add_product(1)
    result = panel.set_quantity(1, 3)
    assert result["ok"] is False
    assert "available 2, requested 3" in result["error"]


def test_panel_blocks_duplicate_submit_and_empty_cart() -> None:
    panel, session = _panel(Role.CASHIER, product(1, "Widget", "9.99", 10))
    assert panel.checkout()["error"] == "Cart is empty"
    panel.load_catalog()
    panel.add_product(1)
    panel.is_processing = True
    assert panel.checkout() == {"ok": False, "error": "Checkout already in progress"}
    assert session.store.writes == []


def test_panel_reports_shortage_with_details() -> None:
    panel, session = _panel(Role.CASHIER, product(1, "Widget", "9.99", 10))
    panel.load_catalog()
    panel.add_product(1, 5)
    session.store.products[1] = product(1, "Widget", "9.99", 2)

    result = panel.checkout()

    assert result["ok"] is False
    assert result["category"] == "stock"
    assert "Widget: available 2, requested 5" in result["error"]
    assert result["safe_to_retry"] is False
    assert len(panel.cart) == 1
    assert panel.is_processing is False


def test_panel_partial_write_exposes_ticket() -> None:
    panel, session = _panel(Role.CASHIER, product(1, "Widget", "9.99", 10))
    panel.load_catalog()
    panel.add_product(1)
    session.store.stock_failures[1] = WriteError("denied", table="products", record_id=1)

    result = panel.checkout()

    assert result["partially_written"] is True
    assert result["ticket_id"] in session.store.tickets
    assert result["category"] == "partial_write"
    assert result["safe_to_retry"] is False



def _connection_refused() -> TransportError:
    return TransportError(
        code="TRANSPORT_ERROR", message="Connection refused", details=None, trace_id="trace-1", status_code=0
    )


def test_panel_offers_retry_when_stock_check_loses_connection() -> None:
    panel, session = _panel(Role.CASHIER, product(1, "Widget", "9.99", 10))
    panel.load_catalog()
    panel.add_product(1, 2)
    session.store.failures["read_product"] = _connection_refused()

    result = panel.checkout()

    assert result["ok"] is False
    assert result["category"] == "transport"
    assert result["safe_to_retry"] is True
    assert "ticket_id" not in result
    assert session.store.writes == []
    assert len(panel.cart) == 1

    del session.store.failures["read_product"]
    assert panel.checkout()["ok"] is True
    assert session.store.stock_of(1) == 8


def test_panel_never_offers_retry_when_lines_lose_connection() -> None:
    panel, session = _panel(Role.CASHIER, product(1, "Widget", "9.99", 10))
    panel.load_catalog()
    panel.add_product(1)
    session.store.failures["insert_ticket_lines"] = _connection_refused()

    result = panel.checkout()

    assert result["category"] == "partial_write"
    assert result["safe_to_retry"] is False
    assert result["ticket_id"] in session.store.tickets
    assert session.store.stock_of(1) == 10

def test_error_presenter_never_retries_after_ticket_creation() -> None:
    presenter = ErrorPresenter()
    before = presenter.present(message="Connection refused", action="sales.checkout", code="TRANSPORT_ERROR", stage="validating_stock", allow_retry=True)
    after = presenter.present(message="Connection refused", action="sales.checkout", code="TRANSPORT_ERROR", stage="writing_lines", allow_retry=True)
    assert before.safe_to_retry is True
    assert after.safe_to_retry is False
    assert after.category == "transport"


def test_dashboards_are_thin_wrappers() -> None:
    panel, session = _panel(Role.ADMIN, product(1, "Widget", "9.99", 10))
    session.profiles.profiles = {"user-1": session.profile, "u2": profile_for(Role.CASHIER, "u2")}
    admin = AdminDashboard(context=panel.context, users=UsersService(session), panel=panel)

    opened = admin.open()
    assert opened["ok"] is True
    assert admin.change_role("u2", "admin")["user"]["role"] == "admin"
    assert admin.delete_user("u2", confirmed=False)["ok"] is False
    assert admin.delete_user("u2", confirmed=True)["ok"] is True
    rendered = admin.render()
    assert [row["id"] for row in rendered["users"]] == ["user-1"]
    assert rendered["navigation"] == ["Users", "Cashier", "Sales", "Inventory", "History"]
    assert rendered["sales"]["catalog"][0]["name"] == "Widget"

    cashier = CashierDashboard(context=ViewContext(profile=profile_for(Role.CASHIER)), panel=panel)
    assert cashier.open()["ok"] is True
    assert cashier.render()["title"] == "Cashier"


def test_admin_dashboard_surfaces_role_errors() -> None:
    panel, session = _panel(Role.ADMIN)
    session.profiles.deny_updates = True
    admin = AdminDashboard(context=panel.context, users=UsersService(session), panel=panel)

    result = admin.change_role("u2", Role.CASHIER)

    assert result["ok"] is False
    assert result["error"] == "Error updating role: You do not have permission to change roles"
    assert admin.is_submitting is False


def test_inventory_view_create_edit_delete() -> None:
    session = FakeSession(profile=profile_for(Role.INVENTORY_MANAGER))
    view = InventoryView(service=InventoryService(session), context=ViewContext(profile=session.profile))

    created = view.save({"name": "Widget", "price": "9.99", "stock": "10"})
    assert created["ok"] and created["created"]
    assert view.form["name"] == ""

    assert view.start_edit(created["product_id"])["form"]["price"] == "9.99"
    updated = view.save({"stock": "4"})
    assert updated["ok"] and not updated["created"]
    assert view.products[0].stock == 4

    assert view.delete(created["product_id"], confirmed=False)["ok"] is False
    assert view.delete(created["product_id"], confirmed=True)["products"] == []


def test_inventory_view_reports_validation_errors() -> None:
    session = FakeSession(profile=profile_for(Role.ADMIN))
    view = InventoryView(service=InventoryService(session), context=ViewContext(profile=session.profile))
    result = view.save({"name": ""})
    assert result["ok"] is False
    assert result["fields"] == ["name"]
    assert result["error"].startswith("Error creating product")


def test_inventory_view_saves_overflowing_stock_as_zero() -> None:
    session = FakeSession(profile=profile_for(Role.ADMIN))
    view = InventoryView(service=InventoryService(session), context=ViewContext(profile=session.profile))

    result = view.save({"name": "Widget", "price": "1.00", "stock": "1e999"})

    assert result["ok"] is True
    assert result["products"][0]["stock"] == 0


def test_inventory_view_denied_for_cashier() -> None:
    session = FakeSession(profile=profile_for(Role.CASHIER))
    view = InventoryView(service=InventoryService(session), context=ViewContext(profile=session.profile))
    assert view.load()["ok"] is False
    assert view.render()["can_manage"] is False


def test_history_view_search_and_select() -> None:
    session = FakeSession(profile=profile_for(Role.CASHIER))
    session.tickets.tickets = [
        TicketRecord.model_validate(
            {
                "id": "3f2a9c1e-aaaa",
                "sale_date": SALE_DATE,
                "total_amount": 29.97,
                "profiles": {"username": "ana", "full_name": "Ana Cajera"},
                "ticket_items": [{"product_name": "Widget", "quantity": 3, "unit_price": 9.99}],
            }
        ),
        TicketRecord.model_validate({"id": "b0b0", "total_amount": 1, "ticket_items": []}),
    ]
    view = HistoryView(service=HistoryService(session), context=ViewContext(profile=session.profile))

    loaded = view.load()
    assert [row["short_id"] for row in loaded["tickets"]] == ["3f2a9c1e", "b0b0"]
    assert loaded["tickets"][1]["seller"] == "Unknown"
    assert [row["id"] for row in view.search("widget")["tickets"]] == ["3f2a9c1e-aaaa"]

    selected = view.select("3f2a9c1e-aaaa")
    assert selected["receipt"]["lines"][0]["subtotal"] == "$29.97"
    assert "Vendedor: Ana Cajera" in selected["text"]
    assert view.select("missing")["ok"] is False
