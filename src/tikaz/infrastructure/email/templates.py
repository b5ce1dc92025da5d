"""HTML bodies for customer and admin emails.

Every value interpolated into a template goes through ``html.escape``; the
templates themselves only contain trusted markup.
"""

from __future__ import annotations

from datetime import datetime
from html import escape
from string import Template

from tikaz.domain.common.money import Money
from tikaz.domain.contact.entities import ContactMessage
from tikaz.domain.order.entities import Order, OrderStatus
from tikaz.infrastructure.config.local_time import to_restaurant_local

BRAND = "TiKaz Livré"
SUPPORT_EMAIL = "contact@tikaz-livre.re"

STATUS_LABELS = {
    "pending": "En attente",
    "confirmed": "Confirmée",
    "preparing": "En préparation",
    "ready": "Prête",
    "delivering": "En livraison",
    "delivered": "Livrée",
    "cancelled": "Annulée",
}

PAYMENT_METHOD_LABELS = {
    "cash": "Espèces à la livraison",
    "card": "Carte bancaire",
    "mobile_money": "Mobile Money",
    "bank_transfer": "Virement bancaire",
}

CONTACT_TYPE_LABELS = {
    "general": "Demande générale",
    "complaint": "Réclamation",
    "suggestion": "Suggestion",
    "partnership": "Partenariat",
    "technical": "Problème technique",
}

PRIORITY_COLORS = {
    "low": "#4caf50",
    "medium": "#ff9800",
    "high": "#f44336",
    "urgent": "#9c27b0",
}

_MONTHS = (
    "janvier",
    "février",
    "mars",
    "avril",
    "mai",
    "juin",
    "juillet",
    "août",
    "septembre",
    "octobre",
    "novembre",
    "décembre",
)

_LAYOUT = Template(
    """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"></head>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
<div style="max-width: 600px; margin: 0 auto; padding: 20px;">
<div style="background: $header_color; color: white; padding: 20px; text-align: center;">
<h1>$brand</h1>
<h2>$heading</h2>
</div>
<div style="padding: 20px; background: #f9f9f9;">
$body
</div>
<div style="text-align: center; padding: 20px; color: #666;">
<p>Merci de faire confiance à $brand !</p>
</div>
</div>
</body>
</html>
"""
)

_ORDER_PLACED = Template(
    """<h3>Bonjour $customer_name,</h3>
<p>Merci pour votre commande ! Voici les détails :</p>
<div style="background: white; padding: 15px; margin: 15px 0;">
<h4>Commande #$order_number</h4>
<p><strong>Restaurant:</strong> $restaurant_name</p>
<p><strong>Statut:</strong> $status</p>
<p><strong>Livraison estimée:</strong> $estimated_delivery</p>
<h4>Adresse de livraison:</h4>
<p>$street<br>$city, $postal_code<br>Zone: $zone</p>
<h4>Articles commandés:</h4>
$items
<p>Frais de livraison: $delivery_fee</p>
<p style="font-weight: bold; font-size: 18px; color: #ff6b35;">Total: $final_amount</p>
<p><strong>Mode de paiement:</strong> $payment_method</p>
$instructions
</div>
<p>Vous pouvez suivre votre commande en temps réel avec le numéro de commande ci-dessus.</p>
<p>Des questions ? Écrivez-nous à $support_email.</p>
"""
)

_ORDER_ITEM = Template("<p>${quantity}x $name <span style=\"float: right;\">$price</span></p>")

_STATUS_CHANGED = Template(
    """<h3>Bonjour $customer_name,</h3>
<p>Le statut de votre commande <strong>#$order_number</strong> chez $restaurant_name a changé.</p>
<p style="font-size: 18px;"><strong>Nouveau statut:</strong> $status</p>
<p>Mise à jour le $updated_at.</p>
"""
)

_CONTACT_RECEIVED = Template(
    """<h3>Bonjour $name,</h3>
<p>Nous avons bien reçu votre message et nous vous remercions de nous avoir contactés.</p>
<div style="background: white; padding: 15px; margin: 15px 0;">
<p><strong>Sujet:</strong> $subject</p>
<p><strong>Type:</strong> $type</p>
<p><strong>Date d'envoi:</strong> $created_at</p>
<p style="background: #f5f5f5; padding: 10px;">$message</p>
</div>
<p>Notre équipe vous répondra dans les plus brefs délais, généralement sous 24-48 heures.</p>
"""
)

_ADMIN_NEW_CONTACT = Template(
    """<div style="background: white; padding: 15px; border-left: 4px solid $priority_color;">
<h3>$subject</h3>
<p><strong>De:</strong> $name ($email)</p>
$phone
<p><strong>Type:</strong> $type</p>
<p><strong>Priorité:</strong> $priority</p>
<p><strong>Reçu le:</strong> $created_at</p>
<p style="background: #f5f5f5; padding: 10px;">$message</p>
<p><strong>IP:</strong> $ip_address</p>
</div>
<p>Connectez-vous au tableau de bord administrateur pour répondre à ce message.</p>
"""
)

_CONTACT_RESPONSE = Template(
    """<h3>Bonjour $name,</h3>
<p>Nous avons une réponse à votre message concernant: <strong>$subject</strong></p>
<div style="background: white; padding: 15px; margin: 15px 0;">
<p><em>$message</em></p>
</div>
<div style="background: #e8f5e8; padding: 15px; border-left: 4px solid #4caf50;">
<p>$response</p>
<p><small><strong>Répondu par:</strong> $responded_by le $responded_at</small></p>
</div>
<p>Si vous avez d'autres questions, n'hésitez pas à nous recontacter.</p>
"""
)


def format_money(money: Money) -> str:
    symbol = "€" if money.currency == "EUR" else f" {money.currency}"
    return f"{money.to_decimal():.2f}{symbol}"


def format_date(value: datetime) -> str:
    local = to_restaurant_local(value)
    return f"{local.day} {_MONTHS[local.month - 1]} {local.year} à {local:%H:%M}"


def status_label(status: OrderStatus) -> str:
    return STATUS_LABELS.get(status.value, status.value)


def _page(heading: str, body: str, header_color: str = "#ff6b35") -> str:
    return _LAYOUT.substitute(
        brand=escape(BRAND),
        heading=escape(heading),
        body=body,
        header_color=header_color,
    )


def render_order_placed(order: Order) -> tuple[str, str]:
    address = order.customer.address
    items = "\n".join(
        _ORDER_ITEM.substitute(
            quantity=item.quantity,
            name=escape(item.name),
            price=escape(format_money(item.subtotal)),
        )
        for item in order.items
    )
    instructions = ""
    if order.special_instructions:
        instructions = (
            "<h4>Instructions spéciales:</h4>"
            f"<p>{escape(order.special_instructions)}</p>"
        )
    body = _ORDER_PLACED.substitute(
        customer_name=escape(order.customer.name),
        order_number=escape(str(order.order_number)),
        restaurant_name=escape(order.restaurant.name),
        status=escape(status_label(order.status)),
        estimated_delivery=escape(format_date(order.estimated_delivery_at)),
        street=escape(address.street),
        city=escape(address.city),
        postal_code=escape(address.postal_code),
        zone=escape(address.zone),
        items=items,
        delivery_fee=escape(format_money(order.delivery_fee)),
        final_amount=escape(format_money(order.final_amount)),
        payment_method=escape(
            PAYMENT_METHOD_LABELS.get(order.payment_method.value, order.payment_method.value)
        ),
        instructions=instructions,
        support_email=escape(SUPPORT_EMAIL),
    )
    subject = f"Confirmation de commande #{order.order_number} - {BRAND}"
    return subject, _page("Confirmation de Commande", body)


def render_status_changed(order: Order, new_status: OrderStatus) -> tuple[str, str]:
    body = _STATUS_CHANGED.substitute(
        customer_name=escape(order.customer.name),
        order_number=escape(str(order.order_number)),
        restaurant_name=escape(order.restaurant.name),
        status=escape(status_label(new_status)),
        updated_at=escape(format_date(order.timeline[-1].occurred_at)),
    )
    subject = f"Commande #{order.order_number}: {status_label(new_status)} - {BRAND}"
    return subject, _page("Suivi de Commande", body)


def render_contact_received(contact: ContactMessage) -> tuple[str, str]:
    body = _CONTACT_RECEIVED.substitute(
        name=escape(contact.name),
        subject=escape(contact.subject),
        type=escape(CONTACT_TYPE_LABELS.get(contact.type.value, contact.type.value)),
        created_at=escape(format_date(contact.created_at)),
        message=escape(contact.message),
    )
    subject = f"Message reçu: {contact.subject} - {BRAND}"
    return subject, _page("Message Reçu", body)


def render_admin_new_contact(contact: ContactMessage) -> tuple[str, str]:
    phone = ""
    if contact.phone:
        phone = f"<p><strong>Téléphone:</strong> {escape(contact.phone)}</p>"
    body = _ADMIN_NEW_CONTACT.substitute(
        priority_color=PRIORITY_COLORS.get(contact.priority.value, PRIORITY_COLORS["low"]),
        subject=escape(contact.subject),
        name=escape(contact.name),
        email=escape(contact.email),
        phone=phone,
        type=escape(CONTACT_TYPE_LABELS.get(contact.type.value, contact.type.value)),
        priority=escape(contact.priority.value.upper()),
        created_at=escape(format_date(contact.created_at)),
        message=escape(contact.message),
        ip_address=escape(contact.ip_address or "inconnue"),
    )
    subject = f"[ADMIN] Nouveau contact: {contact.subject}"
    return subject, _page("Nouveau Message de Contact", body)


def render_contact_response(contact: ContactMessage) -> tuple[str, str]:
    if contact.reply is None:
        raise ValueError(f"contact {contact.contact_id} has no response to send")
    body = _CONTACT_RESPONSE.substitute(
        name=escape(contact.name),
        subject=escape(contact.subject),
        message=escape(contact.message),
        response=escape(contact.reply.message),
        responded_by=escape(contact.reply.responded_by),
        responded_at=escape(format_date(contact.reply.responded_at)),
    )
    subject = f"Re: {contact.subject} - {BRAND}"
    return subject, _page("Réponse à votre Message", body)
