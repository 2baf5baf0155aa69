from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from posdesk.models_tickets import TicketRecord
from posdesk.receipt import ReceiptPresenter, format_amount, format_sale_date, present_ticket


def _ticket(**overrides) -> TicketRecord:
    payload = {
        "id": "3f2a9c1e-7b44-4c0e-9d1a-2b5c8e6f0a11",
        "sale_date": "2026-10-19T14:05:00+00:00",
        "total_amount": 29.97,
        "seller_id": "seller-1",
        "profiles": {"username": "cajero1", "full_name": "Ana Cajera"},
        "ticket_items": [{"product_name": "Widget", "quantity": 3, "unit_price": 9.99}],
    }
    payload.update(overrides)
    return TicketRecord.model_validate(payload)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (Decimal("29.97"), "$29.97"),
        (Decimal("0.005"), "$0.01"),
        (Decimal("2.675"), "$2.68"),
        (3, "$3.00"),
        (9.99, "$9.99"),
        ("1234.5", "$1234.50"),
    ],
)
def test_format_amount_rounds_half_up(value, expected: str) -> None:
    assert format_amount(value) == expected


def test_format_sale_date_spanish_and_english() -> None:
    stamp = datetime(2026, 10, 19, 14, 5, tzinfo=timezone.utc)
    assert format_sale_date(stamp) == "19 de octubre de 2026, 14:05"
    assert format_sale_date(stamp, "en") == "October 19, 2026, 14:05"
    assert format_sale_date(None) == "-"


def test_format_sale_date_converts_timezone() -> None:
    stamp = datetime(2026, 10, 19, 14, 5, tzinfo=timezone.utc)
    madrid_summer = timezone(timedelta(hours=2))
    assert format_sale_date(stamp, "es", madrid_summer) == "19 de octubre de 2026, 16:05"


def test_present_ticket_builds_lines_with_subtotals() -> None:
    view = present_ticket(_ticket())

    assert view.short_id == "3f2a9c1e"
    assert view.seller == "Ana Cajera"
    assert view.total == "$29.97"
    assert view.sale_date == "19 de octubre de 2026, 14:05"
    [line] = view.lines
    assert (line.product_name, line.quantity, line.unit_price, line.subtotal) == ("Widget", 3, "$9.99", "$29.97")
    assert line.summary == "3 x $9.99"


def test_seller_falls_back_to_username() -> None:
    view = present_ticket(_ticket(profiles={"username": "cajero1", "full_name": None}))
    assert view.seller == "cajero1"


def test_presenting_is_deterministic() -> None:
    ticket = _ticket()
    presenter = ReceiptPresenter("en")
    assert presenter.present(ticket) == presenter.present(ticket)


def test_render_text_includes_header_lines_and_total() -> None:
    presenter = ReceiptPresenter("es")
    text = presenter.render_text(presenter.present(_ticket()))

    assert text.splitlines()[0] == "Ticket #3f2a9c1e"
    assert "Fecha: 19 de octubre de 2026, 14:05" in text
    assert "Vendedor: Ana Cajera" in text
    assert "Widget  3 x $9.99  $29.97" in text
    assert text.endswith("Total: $29.97")


def test_render_text_marks_unconfirmed_receipts() -> None:
    presenter = ReceiptPresenter("en")
    view = presenter.present(_ticket(profiles=None), confirmed=False)
    text = presenter.render_text(view)
    assert text.splitlines()[0] == "Ticket #3f2a9c1e (unconfirmed)"
    assert "Seller" not in text


def test_unknown_language_is_rejected() -> None:
    with pytest.raises(ValueError):
        ReceiptPresenter("fr")
