from __future__ import annotations

import logging
from datetime import datetime, timezone

from tikaz.application.dto.responses import OrderResponse
from tikaz.application.mappers.event_envelope import serialize_order_status_event
from tikaz.application.mappers.order_mapper import to_order_response
from tikaz.application.metrics.order_lifecycle import record_time_to_deliver, record_transition
from tikaz.application.ports.notifier import OrderNotifier
from tikaz.application.ports.publisher import EventPublisher, order_topic, topic_channel
from tikaz.application.ports.repositories import OptimisticConcurrencyError, OrderRepository
from tikaz.application.use_cases.best_effort import notify_best_effort, publish_best_effort
from tikaz.application.use_cases.context import TraceContext
from tikaz.domain.common.ids import OrderId
from tikaz.domain.order.entities import OrderStatus
from tikaz.domain.order.events import OrderStatusChanged

logger = logging.getLogger(__name__)

_MAX_ATTEMPTS = 5


class OrderNotFoundError(Exception):
    pass


class InvalidStatusError(Exception):
    pass


class OrderConflictError(Exception):
    pass


def parse_order_status(value: str) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError as exc:
        allowed = ", ".join(status.value for status in OrderStatus)
        raise InvalidStatusError(f"invalid order status: {value} (expected one of {allowed})") from exc


class TransitionOrder:
    def __init__(
        self,
        order_repository: OrderRepository,
        publisher: EventPublisher,
        notifier: OrderNotifier,
    ) -> None:
        self._order_repository = order_repository
        self._publisher = publisher
        self._notifier = notifier

    def execute(
        self,
        order_id: OrderId,
        new_status: str,
        trace_ctx: TraceContext,
        note: str | None = None,
    ) -> OrderResponse:
        status = parse_order_status(new_status)

        for attempt in range(1, _MAX_ATTEMPTS + 1):
            order = self._order_repository.get(order_id)
            if order is None:
                raise OrderNotFoundError(f"order {order_id} not found")

            updated = order.transition(status, now=datetime.now(timezone.utc), note=note)
            try:
                persisted = self._order_repository.save_transition(
                    updated,
                    expected_version=order.version,
                )
                break
            except OptimisticConcurrencyError:
                logger.info(
                    "order_transition_retry",
                    extra={"order_id": str(order_id), "attempt": attempt},
                )
        else:
            raise OrderConflictError(f"order {order_id} status update conflict")

        entry = persisted.timeline[-1]
        event = OrderStatusChanged(
            order_id=persisted.order_id,
            order_number=persisted.order_number,
            from_status=order.status,
            to_status=status,
            note=entry.note,
            occurred_at=entry.occurred_at,
        )
        record_transition(from_status=event.from_status, to_status=event.to_status)
        if status == OrderStatus.DELIVERED:
            record_time_to_deliver(persisted)
        logger.info(
            "order_status_changed",
            extra={"order_id": str(persisted.order_id), "status": status.value},
        )

        topic = order_topic(str(persisted.order_id))
        message = serialize_order_status_event(
            topic=topic,
            order=persisted,
            status=event.to_status,
            note=event.note,
            occurred_at=event.occurred_at,
            trace_id=trace_ctx.trace_id,
            request_id=trace_ctx.request_id,
        )
        publish_best_effort(
            self._publisher,
            channel=topic_channel(topic),
            message=message,
            kind="order.status_changed",
        )
        notify_best_effort(
            lambda: self._notifier.notify_status_changed(persisted, status),
            kind="order_status_changed",
        )

        return to_order_response(persisted)
