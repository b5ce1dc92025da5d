from __future__ import annotations

import logging
from typing import Callable

from tikaz.application.metrics.order_lifecycle import record_notification_failure
from tikaz.application.ports.publisher import EventPublisher

logger = logging.getLogger(__name__)


def publish_best_effort(publisher: EventPublisher, channel: str, message: str, kind: str) -> None:
    try:
        publisher.publish(channel=channel, message=message)
    except Exception:
        record_notification_failure(channel="broadcast", kind=kind)
        logger.warning("event_publish_failed", extra={"channel": channel, "kind": kind}, exc_info=True)


def notify_best_effort(send: Callable[[], None], kind: str) -> None:
    try:
        send()
    except Exception:
        record_notification_failure(channel="email", kind=kind)
        logger.warning("notification_failed", extra={"kind": kind}, exc_info=True)
