from __future__ import annotations

from datetime import datetime, timezone

from prometheus_client import Counter, Histogram

from tikaz.domain.order.entities import Order, OrderStatus

ORDERS_PLACED_TOTAL = Counter(
    "tikaz_orders_placed_total",
    "Total number of orders placed.",
    ["restaurant_id", "payment_method"],
)

ORDER_PLACEMENT_REJECTED_TOTAL = Counter(
    "tikaz_order_placement_rejected_total",
    "Total number of rejected order placements.",
    ["reason"],
)

ORDER_TRANSITION_TOTAL = Counter(
    "tikaz_order_transition_total",
    "Total number of order lifecycle transitions.",
    ["from", "to"],
)

ORDER_TIME_TO_DELIVER_SECONDS = Histogram(
    "tikaz_order_time_to_deliver_seconds",
    "Time between order placement and delivery.",
    buckets=(600, 1200, 1800, 2700, 3600, 5400, 7200, 10800),
)

ORDER_RATINGS_TOTAL = Counter(
    "tikaz_order_ratings_total",
    "Total number of order ratings by score.",
    ["score"],
)

CONTACTS_RECEIVED_TOTAL = Counter(
    "tikaz_contacts_received_total",
    "Total number of contact messages received.",
    ["type"],
)

NOTIFICATION_FAILURES_TOTAL = Counter(
    "tikaz_notification_failures_total",
    "Total number of best-effort notifications that failed.",
    ["channel", "kind"],
)


def record_order_placed(order: Order) -> None:
    ORDERS_PLACED_TOTAL.labels(
        restaurant_id=str(order.restaurant.restaurant_id),
        payment_method=order.payment_method.value,
    ).inc()


def record_placement_rejected(reason: str) -> None:
    ORDER_PLACEMENT_REJECTED_TOTAL.labels(reason=reason).inc()


def record_transition(from_status: OrderStatus, to_status: OrderStatus) -> None:
    ORDER_TRANSITION_TOTAL.labels(**{"from": from_status.value, "to": to_status.value}).inc()


def record_time_to_deliver(order: Order, now: datetime | None = None) -> None:
    current = order.actual_delivery_at or now or datetime.now(timezone.utc)
    ORDER_TIME_TO_DELIVER_SECONDS.observe(max((current - order.created_at).total_seconds(), 0.0))


def record_rating(score: int) -> None:
    ORDER_RATINGS_TOTAL.labels(score=str(score)).inc()


def record_contact_received(contact_type: str) -> None:
    CONTACTS_RECEIVED_TOTAL.labels(type=contact_type).inc()


def record_notification_failure(channel: str, kind: str) -> None:
    NOTIFICATION_FAILURES_TOTAL.labels(channel=channel, kind=kind).inc()
