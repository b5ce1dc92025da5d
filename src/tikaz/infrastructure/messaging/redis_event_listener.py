"""Relay Redis pub/sub events to WebSocket subscribers.

Every publisher writes to ``events:<topic>``; one pattern subscription per API
process forwards each payload to the sockets registered for ``<topic>``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping

from redis import asyncio as redis_asyncio

from tikaz.infrastructure.messaging.redis_client import redis_url

logger = logging.getLogger(__name__)

CHANNEL_PATTERN = "events:*"
MAX_BACKOFF_SECONDS = 5.0


def _text(value: bytes | str | None) -> str | None:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


def channel_topic(channel: str) -> str | None:
    prefix, _, topic = channel.partition(":")
    if prefix != "events" or not topic:
        return None
    return topic


async def dispatch_message(app_state: Any, message: Mapping[str, Any]) -> bool:
    """Forward one pub/sub message; returns False when it was dropped."""
    channel = _text(message.get("channel"))
    payload = _text(message.get("data"))
    if not channel or not payload:
        return False
    topic = channel_topic(channel)
    if topic is None:
        logger.warning("redis_fanout_invalid_channel", extra={"channel": channel})
        return False
    await app_state.ws_manager.broadcast(topic=topic, message_json_str=payload)
    return True


async def _relay(app_state: Any, url: str) -> None:
    client = redis_asyncio.from_url(url)
    pubsub = client.pubsub()
    try:
        await pubsub.psubscribe(CHANNEL_PATTERN)
        logger.info("redis_fanout_subscribed", extra={"pattern": CHANNEL_PATTERN})
        while True:
            message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
            if message is None:
                await asyncio.sleep(0.05)
                continue
            await dispatch_message(app_state, message)
    finally:
        await pubsub.aclose()
        await client.aclose()


async def start_redis_fanout(app_state: Any) -> None:
    url = redis_url()
    if url is None:
        logger.warning("redis_fanout_not_started", extra={"reason": "REDIS_URL missing"})
        return

    backoff_seconds = 1.0
    while True:
        started = asyncio.get_running_loop().time()
        try:
            await _relay(app_state, url)
        except asyncio.CancelledError:
            logger.info("redis_fanout_cancelled")
            raise
        except Exception:
            # A connection that stayed up for a while resets the backoff.
            if asyncio.get_running_loop().time() - started > MAX_BACKOFF_SECONDS:
                backoff_seconds = 1.0
            logger.exception("redis_fanout_error", extra={"backoff_seconds": backoff_seconds})
            await asyncio.sleep(backoff_seconds)
            backoff_seconds = min(backoff_seconds * 2, MAX_BACKOFF_SECONDS)
