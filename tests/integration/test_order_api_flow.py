from __future__ import annotations

import sys
from pathlib import Path

from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from tikaz.api.main import app


def _order_payload(**overrides) -> dict:
    payload = {
        "customer": {
            "name": "Jean Payet",
            "email": "Jean@Example.re",
            "phone": "0692123456",
            "address": {
                "street": "12 Rue de Paris",
                "city": "Saint-Denis",
                "postalCode": "97400",
                "zone": "Nord",
            },
        },
        "restaurant": {"id": "rst_001", "name": "Chez Tante Marie"},
        "items": [{"name": "Cari Poulet", "price": 12.5, "quantity": 2}],
        "totalAmount": 25.0,
        "paymentMethod": "cash",
        "specialInstructions": "Sonner deux fois",
    }
    payload.update(overrides)
    return payload


def test_order_lifecycle_is_persisted() -> None:
    with TestClient(app) as client:
        place_response = client.post("/api/orders", json=_order_payload())
        assert place_response.status_code == 201
        placed = place_response.json()
        assert placed["orderStatus"] == "pending"
        assert placed["orderNumber"].startswith("TKL")
        assert placed["customer"]["email"] == "jean@example.re"
        assert placed["totalAmount"] == {"amountCents": 2500, "currency": "EUR"}
        assert placed["finalAmount"] == {"amountCents": 2850, "currency": "EUR"}
        assert [entry["status"] for entry in placed["timeline"]] == ["pending"]
        order_id = placed["orderId"]

        confirm_response = client.patch(f"/api/orders/{order_id}/status", json={"status": "confirmed"})
        assert confirm_response.status_code == 200
        assert confirm_response.json()["orderStatus"] == "confirmed"

        deliver_response = client.patch(
            f"/api/orders/{order_id}/status",
            json={"status": "delivered", "note": "Remis au client"},
        )
        assert deliver_response.status_code == 200
        delivered = deliver_response.json()
        assert delivered["actualDeliveryTime"] is not None
        assert delivered["timeline"][-1]["note"] == "Remis au client"
        assert delivered["timeline"][1]["note"] == ""

        rate_response = client.post(f"/api/orders/{order_id}/rating", json={"score": 5, "comment": "Délicieux"})
        assert rate_response.status_code == 200
        assert rate_response.json()["rating"]["score"] == 5

        again = client.post(f"/api/orders/{order_id}/rating", json={"score": 4})
        assert again.status_code == 409
        assert again.json()["error"]["code"] == "ALREADY_RATED"

        lookup = client.get(f"/api/orders/{placed['orderNumber']}")
        assert lookup.status_code == 200
        assert lookup.json()["orderId"] == order_id
        assert [entry["status"] for entry in lookup.json()["timeline"]] == [
            "pending",
            "confirmed",
            "delivered",
        ]

        restaurant = client.get("/api/restaurants/rst_001").json()
        assert restaurant["rating"]["count"] == 157

        history = client.get("/api/orders/customer/JEAN@example.re")
        assert history.status_code == 200
        assert [order["orderId"] for order in history.json()["orders"]] == [order_id]
        assert history.json()["nextCursor"] is None


def test_place_order_rejections() -> None:
    with TestClient(app) as client:
        unknown = client.post("/api/orders", json=_order_payload(restaurant={"id": "rst_999", "name": "Inconnu"}))
        assert unknown.status_code == 400
        assert unknown.json()["error"]["code"] == "RESTAURANT_UNAVAILABLE"

        payload = _order_payload()
        payload["customer"]["address"]["zone"] = "Sud"
        wrong_zone = client.post("/api/orders", json=payload)
        assert wrong_zone.status_code == 400
        assert wrong_zone.json()["error"]["code"] == "ZONE_NOT_SERVED"

        small = client.post(
            "/api/orders",
            json=_order_payload(items=[{"name": "Samosas (x6)", "price": 6.0, "quantity": 1}], totalAmount=None),
        )
        assert small.status_code == 400
        assert small.json()["error"]["code"] == "BELOW_MINIMUM_ORDER"
        assert small.json()["error"]["details"] == {"minimumOrder": {"amountCents": 1500, "currency": "EUR"}}

        mismatch = client.post("/api/orders", json=_order_payload(totalAmount=19.0))
        assert mismatch.status_code == 400
        assert mismatch.json()["error"]["code"] == "TOTAL_AMOUNT_MISMATCH"

        invalid = client.post("/api/orders", json=_order_payload(items=[]))
        assert invalid.status_code == 400
        assert invalid.json()["error"]["code"] == "INVALID_REQUEST"

        listing = client.get("/api/orders/customer/jean@example.re")
        assert listing.json()["orders"] == []


def test_order_errors_use_envelope() -> None:
    with TestClient(app) as client:
        missing = client.get("/api/orders/TKL000", headers={"X-Request-Id": "req-order-404"})
        assert missing.status_code == 404
        assert missing.json()["error"]["code"] == "ORDER_NOT_FOUND"
        assert missing.json()["requestId"] == "req-order-404"

        order_id = client.post("/api/orders", json=_order_payload()).json()["orderId"]

        bad_status = client.patch(f"/api/orders/{order_id}/status", json={"status": "teleported"})
        assert bad_status.status_code == 400
        assert bad_status.json()["error"]["code"] == "INVALID_STATUS"

        not_delivered = client.post(f"/api/orders/{order_id}/rating", json={"score": 4})
        assert not_delivered.status_code == 409
        assert not_delivered.json()["error"]["code"] == "ORDER_NOT_DELIVERED"

        unknown_transition = client.patch("/api/orders/ord_missing/status", json={"status": "ready"})
        assert unknown_transition.status_code == 404

        bad_cursor = client.get("/api/orders/customer/jean@example.re", params={"cursor": "garbage"})
        assert bad_cursor.status_code == 400
        assert bad_cursor.json()["error"]["code"] == "INVALID_CURSOR"


def test_cancelled_order_can_be_reopened() -> None:
    with TestClient(app) as client:
        order_id = client.post("/api/orders", json=_order_payload()).json()["orderId"]

        cancelled = client.patch(f"/api/orders/{order_id}/status", json={"status": "cancelled"})
        reopened = client.patch(f"/api/orders/{order_id}/status", json={"status": "preparing"})

        assert cancelled.status_code == 200
        assert reopened.status_code == 200
        assert [entry["sequence"] for entry in reopened.json()["timeline"]] == [1, 2, 3]
