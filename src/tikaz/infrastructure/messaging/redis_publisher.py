from __future__ import annotations

import logging

from tikaz.application.ports.publisher import EventPublisher
from tikaz.infrastructure.messaging.redis_client import get_redis_client, redis_url

logger = logging.getLogger(__name__)


class RedisEventPublisher(EventPublisher):
    def __init__(self, timeout_seconds: float = 1.0) -> None:
        self._timeout_seconds = timeout_seconds

    def publish(self, channel: str, message: str) -> None:
        if redis_url() is None:
            logger.debug("event_publish_skipped", extra={"channel": channel, "reason": "REDIS_URL missing"})
            return
        get_redis_client(timeout_seconds=self._timeout_seconds).publish(channel, message)
