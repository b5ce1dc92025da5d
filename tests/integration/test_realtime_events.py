from __future__ import annotations

import json
import os
import queue
import sys
import threading
import time
from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from tikaz.api.main import app
from tikaz.infrastructure.messaging import redis_client

ORDER_PAYLOAD = {
    "customer": {
        "name": "Jean Payet",
        "email": "jean@example.re",
        "phone": "0692123456",
        "address": {"street": "8 Rue du Commerce", "city": "Saint-Pierre", "postalCode": "97410", "zone": "Sud"},
    },
    "restaurant": {"id": "rst_003", "name": "Pizza Corner 974"},
    "items": [{"name": "Pizza Reine", "price": 13.5, "quantity": 1}],
    "paymentMethod": "cash",
}


@pytest.fixture()
def redis(monkeypatch: pytest.MonkeyPatch) -> Iterator:
    url = os.getenv("TIKAZ_TEST_REDIS_URL")
    if not url:
        pytest.skip("TIKAZ_TEST_REDIS_URL is not set")
    monkeypatch.setenv("REDIS_URL", url)
    redis_client._build_client.cache_clear()
    if not redis_client.ping_redis():
        pytest.skip("redis is not reachable")
    client = redis_client.get_redis_client()
    client.flushdb()
    yield client
    client.flushdb()
    redis_client._build_client.cache_clear()


def _wait_for_message(pubsub, timeout_seconds: float = 2.0) -> str | None:
    deadline = time.time() + timeout_seconds
    while time.time() < deadline:
        message = pubsub.get_message(ignore_subscribe_messages=True, timeout=0.2)
        if message and message.get("type") == "message":
            payload = message.get("data")
            if isinstance(payload, bytes):
                return payload.decode("utf-8")
            return str(payload)
        time.sleep(0.05)
    return None


def _wait_for_fanout(redis, timeout_seconds: float = 3.0) -> None:
    deadline = time.time() + timeout_seconds
    while time.time() < deadline:
        if redis.pubsub_numpat() >= 1:
            return
        time.sleep(0.05)
    raise AssertionError("redis fan-out never subscribed")


def test_place_order_publishes_admin_event(redis) -> None:
    pubsub = redis.pubsub()
    pubsub.subscribe("events:admin")
    pubsub.get_message(timeout=0.5)

    response = TestClient(app).post("/api/orders", json=ORDER_PAYLOAD, headers={"X-Request-Id": "req-rt-1"})
    assert response.status_code == 201
    order_id = response.json()["orderId"]

    message = _wait_for_message(pubsub)
    assert message is not None
    event = json.loads(message)
    assert event["event_type"] == "order.placed"
    assert event["topic"] == "admin"
    assert event["request_id"] == "req-rt-1"
    assert event["payload"]["orderId"] == order_id
    assert event["payload"]["finalAmount"] == {"amountCents": 1600, "currency": "EUR"}
    assert _wait_for_message(pubsub, timeout_seconds=0.4) is None


def test_order_websocket_receives_status_changes(redis) -> None:
    events: "queue.Queue[str]" = queue.Queue()
    errors: "queue.Queue[Exception]" = queue.Queue()

    with TestClient(app) as client:
        _wait_for_fanout(redis)
        order_id = client.post("/api/orders", json=ORDER_PAYLOAD).json()["orderId"]

        with client.websocket_connect(f"/ws/orders/{order_id}") as websocket:

            def _reader() -> None:
                try:
                    for _ in range(2):
                        events.put(websocket.receive_text())
                except Exception as exc:
                    errors.put(exc)

            reader = threading.Thread(target=_reader, daemon=True)
            reader.start()
            time.sleep(0.1)

            for status in ("confirmed", "delivering"):
                response = client.patch(f"/api/orders/{order_id}/status", json={"status": status})
                assert response.status_code == 200

            reader.join(timeout=3.0)
            assert not reader.is_alive(), "timed out waiting for websocket events"
            assert errors.empty(), "unexpected websocket read error"

    messages = [json.loads(events.get_nowait()) for _ in range(2)]
    assert [message["payload"]["status"] for message in messages] == ["confirmed", "delivering"]
    assert {message["topic"] for message in messages} == {f"order_{order_id}"}
