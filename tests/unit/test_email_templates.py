from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from tikaz.domain.common.ids import ContactId, OrderId, RestaurantId
from tikaz.domain.common.money import Money
from tikaz.domain.contact.entities import ContactMessage, ContactPriority
from tikaz.domain.order.entities import (
    CustomerInfo,
    DeliveryAddress,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    RestaurantRef,
    create_pending_order,
    format_order_number,
)
from tikaz.infrastructure.email import templates
from tikaz.infrastructure.email.smtp_notifier import SmtpNotifier, SmtpSettings

NOW = datetime(2026, 10, 1, 8, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def reunion_offset(monkeypatch) -> None:
    monkeypatch.setenv("RESTAURANT_UTC_OFFSET_HOURS", "4")


def _order():
    return create_pending_order(
        order_id=OrderId("ord_001"),
        order_number=format_order_number(NOW, 1),
        customer=CustomerInfo(
            name="<script>alert(1)</script>",
            email="jean@example.re",
            phone="+262692000000",
            address=DeliveryAddress(
                street="10 Rue de Paris",
                city="Saint-Denis",
                postal_code="97400",
                zone="Nord",
            ),
        ),
        restaurant=RestaurantRef(restaurant_id=RestaurantId("rst_001"), name="Chez Tante Marie"),
        items=[OrderItem(name="Cari & Riz", unit_price=Money(1250, "EUR"), quantity=2)],
        delivery_fee=Money(350, "EUR"),
        payment_method=PaymentMethod.MOBILE_MONEY,
        now=NOW,
        special_instructions="Sonner deux fois",
    )


def _contact() -> ContactMessage:
    return ContactMessage(
        contact_id=ContactId("ctc_001"),
        name="Marie Hoarau",
        email="marie@example.re",
        subject="Question <b>urgente</b>",
        message="Bonjour",
        created_at=NOW,
        updated_at=NOW,
        priority=ContactPriority.HIGH,
    )


def test_format_money_and_date_use_french_conventions() -> None:
    assert templates.format_money(Money(2350, "EUR")) == "23.50€"
    assert templates.format_date(NOW) == "1 octobre 2026 à 12:00"


def test_order_placed_email_escapes_customer_values() -> None:
    subject, body = templates.render_order_placed(_order())

    assert subject.startswith("Confirmation de commande #TKL")
    assert "<script>" not in body
    assert "&lt;script&gt;" in body
    assert "Cari &amp; Riz" in body
    assert "Mobile Money" in body
    assert "28.50€" in body
    assert "Sonner deux fois" in body


def test_status_changed_email_uses_french_label() -> None:
    order = _order().transition(OrderStatus.DELIVERING, now=NOW)
    subject, body = templates.render_status_changed(order, OrderStatus.DELIVERING)

    assert "En livraison" in subject
    assert "En livraison" in body


def test_admin_contact_email_escapes_subject_and_uses_priority_color() -> None:
    _, body = templates.render_admin_new_contact(_contact())

    assert "<b>urgente</b>" not in body
    assert templates.PRIORITY_COLORS["high"] in body
    assert "HIGH" in body


def test_contact_response_requires_a_reply() -> None:
    with pytest.raises(ValueError):
        templates.render_contact_response(_contact())


def test_notifier_skips_delivery_without_smtp_host() -> None:
    settings = SmtpSettings(
        host=None,
        port=587,
        username=None,
        password=None,
        starttls=True,
        sender="TiKaz Livré <noreply@tikaz-livre.re>",
        admin_email="admin@tikaz-livre.re",
    )
    notifier = SmtpNotifier(settings=settings)

    assert notifier._submit("jean@example.re", "Sujet", "<p>x</p>", template="test") is None


def test_build_message_has_html_alternative() -> None:
    settings = SmtpSettings(
        host="smtp.example.re",
        port=587,
        username=None,
        password=None,
        starttls=True,
        sender="TiKaz Livré <noreply@tikaz-livre.re>",
        admin_email="admin@tikaz-livre.re",
    )
    message = SmtpNotifier(settings=settings).build_message("jean@example.re", "Sujet", "<p>Bonjour</p>")

    assert message["To"] == "jean@example.re"
    assert message.is_multipart()
    html_part = message.get_body(preferencelist=("html",))
    assert html_part is not None
    assert "<p>Bonjour</p>" in html_part.get_content()
