from __future__ import annotations

from typing import Protocol

ADMIN_TOPIC = "admin"


def order_topic(order_id: str) -> str:
    return f"order_{order_id}"


def topic_channel(topic: str) -> str:
    return f"events:{topic}"


class EventPublisher(Protocol):
    def publish(self, channel: str, message: str) -> None: ...
