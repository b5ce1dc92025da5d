from __future__ import annotations

import json
from datetime import datetime
from typing import Any
from uuid import uuid4

from tikaz.domain.contact.entities import ContactMessage
from tikaz.domain.order.entities import Order, OrderStatus


def _serialize_event(
    *,
    event_type: str,
    occurred_at: datetime,
    topic: str,
    payload: dict[str, Any],
    trace_id: str | None,
    request_id: str | None,
) -> str:
    envelope = {
        "event_id": str(uuid4()),
        "event_type": event_type,
        "occurred_at": occurred_at.isoformat(),
        "request_id": request_id,
        "trace_id": trace_id,
        "topic": topic,
        "payload": payload,
    }
    return json.dumps(envelope, separators=(",", ":"), ensure_ascii=False)


def serialize_order_placed_event(
    *,
    topic: str,
    order: Order,
    trace_id: str | None,
    request_id: str | None,
) -> str:
    return _serialize_event(
        event_type="order.placed",
        occurred_at=order.created_at,
        topic=topic,
        trace_id=trace_id,
        request_id=request_id,
        payload={
            "orderId": str(order.order_id),
            "orderNumber": str(order.order_number),
            "restaurant": order.restaurant.name,
            "customer": order.customer.name,
            "finalAmount": {
                "amountCents": order.final_amount.amount_cents,
                "currency": order.final_amount.currency,
            },
        },
    )


def serialize_order_status_event(
    *,
    topic: str,
    order: Order,
    status: OrderStatus,
    note: str | None,
    occurred_at: datetime,
    trace_id: str | None,
    request_id: str | None,
) -> str:
    return _serialize_event(
        event_type="order.status_changed",
        occurred_at=occurred_at,
        topic=topic,
        trace_id=trace_id,
        request_id=request_id,
        payload={
            "orderId": str(order.order_id),
            "orderNumber": str(order.order_number),
            "status": status.value,
            "timestamp": occurred_at.isoformat(),
            "note": note,
        },
    )


def serialize_contact_event(
    *,
    event_type: str,
    topic: str,
    contact: ContactMessage,
    occurred_at: datetime,
    trace_id: str | None,
    request_id: str | None,
) -> str:
    payload: dict[str, Any] = {
        "contactId": str(contact.contact_id),
        "name": contact.name,
        "email": contact.email,
        "subject": contact.subject,
        "type": contact.type.value,
        "priority": contact.priority.value,
        "status": contact.status.value,
        "assignedTo": contact.assigned_to,
        "createdAt": contact.created_at.isoformat(),
    }
    if contact.reply is not None:
        payload["respondedBy"] = contact.reply.responded_by
        payload["respondedAt"] = contact.reply.responded_at.isoformat()
    return _serialize_event(
        event_type=event_type,
        occurred_at=occurred_at,
        topic=topic,
        trace_id=trace_id,
        request_id=request_id,
        payload=payload,
    )
