from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from tikaz.application.dto.requests import PlaceOrderRequest
from tikaz.application.ports.repositories import OrderNumberConflictError
from tikaz.application.use_cases.context import TraceContext
from tikaz.application.use_cases.place_order import (
    BelowMinimumOrderError,
    PlaceOrder,
    RestaurantUnavailableError,
    TotalAmountMismatchError,
    ZoneNotServedError,
)
from tikaz.domain.common.ids import RestaurantId
from tikaz.domain.common.money import Money
from tikaz.domain.order.entities import Order, OrderStatus
from tikaz.domain.restaurant.entities import (
    Restaurant,
    RestaurantAddress,
    RestaurantContact,
    RestaurantStatus,
)


class FakeRestaurantRepository:
    def __init__(self, restaurant: Restaurant | None) -> None:
        self._restaurant = restaurant

    def get(self, restaurant_id: RestaurantId) -> Restaurant | None:
        return self._restaurant

    def get_active(self, restaurant_id: RestaurantId) -> Restaurant | None:
        if self._restaurant is None or not self._restaurant.is_active:
            return None
        return self._restaurant


class FakeOrderRepository:
    def __init__(self, conflicts: int = 0) -> None:
        self.orders: list[Order] = []
        self._conflicts = conflicts

    def next_sequence(self) -> int:
        return len(self.orders) + 1

    def add(self, order: Order) -> None:
        if self._conflicts:
            self._conflicts -= 1
            raise OrderNumberConflictError(f"order number {order.order_number} is already taken")
        self.orders.append(order)


@dataclass
class PublishCall:
    channel: str
    message: str


class FakePublisher:
    def __init__(self, fail: bool = False) -> None:
        self.calls: list[PublishCall] = []
        self._fail = fail

    def publish(self, channel: str, message: str) -> None:
        if self._fail:
            raise ConnectionError("redis down")
        self.calls.append(PublishCall(channel=channel, message=message))


class FakeNotifier:
    def __init__(self, fail: bool = False) -> None:
        self.placed: list[Order] = []
        self._fail = fail

    def notify_order_placed(self, order: Order) -> None:
        if self._fail:
            raise OSError("smtp down")
        self.placed.append(order)

    def notify_status_changed(self, order: Order, new_status: OrderStatus) -> None:
        pass


def _restaurant(status: RestaurantStatus = RestaurantStatus.ACTIVE) -> Restaurant:
    return Restaurant(
        restaurant_id=RestaurantId("rst_001"),
        name="Chez Tante Marie",
        description="Cuisine créole",
        cuisine="Créole",
        image_url="https://example.re/marie.jpg",
        address=RestaurantAddress(
            street="15 Rue de la République",
            city="Saint-Denis",
            postal_code="97400",
            zone="Nord",
        ),
        contact=RestaurantContact(phone="+262262123456", email="contact@cheztantemarie.re"),
        delivery_zones=["Nord", "Saint-Denis", "Sainte-Marie"],
        delivery_fee=Money(350, "EUR"),
        minimum_order=Money(1500, "EUR"),
        status=status,
    )


def _request(
    zone: str = "Nord",
    price: str = "10.00",
    quantity: int = 2,
    total_amount: str | None = None,
) -> PlaceOrderRequest:
    payload = {
        "customer": {
            "name": "Jean Payet",
            "email": "jean@example.re",
            "phone": "+262692000000",
            "address": {
                "street": "10 Rue de Paris",
                "city": "Saint-Denis",
                "postalCode": "97400",
                "zone": zone,
            },
        },
        "restaurant": {"id": "rst_001", "name": "Chez Tante Marie"},
        "items": [{"name": "Cari Poulet", "price": price, "quantity": quantity}],
        "paymentMethod": "cash",
    }
    if total_amount is not None:
        payload["totalAmount"] = total_amount
    return PlaceOrderRequest.model_validate(payload)


def _use_case(
    restaurant: Restaurant | None = None,
    order_repository: FakeOrderRepository | None = None,
    publisher: FakePublisher | None = None,
    notifier: FakeNotifier | None = None,
) -> PlaceOrder:
    return PlaceOrder(
        restaurant_repository=FakeRestaurantRepository(restaurant or _restaurant()),
        order_repository=order_repository or FakeOrderRepository(),
        publisher=publisher or FakePublisher(),
        notifier=notifier or FakeNotifier(),
    )


def _trace() -> TraceContext:
    return TraceContext(trace_id="trace-1", request_id="req-1")


def test_place_order_computes_amounts_from_restaurant_snapshot() -> None:
    order_repository = FakeOrderRepository()
    response = _use_case(order_repository=order_repository).execute(
        request_dto=_request(),
        trace_ctx=_trace(),
    )

    assert response.totalAmount.amountCents == 2000
    assert response.deliveryFee.amountCents == 350
    assert response.finalAmount.amountCents == 2350
    assert response.orderStatus == "pending"
    assert response.orderNumber.startswith("TKL")
    assert response.orderNumber.endswith("0001")
    assert len(response.timeline) == 1
    assert len(order_repository.orders) == 1


def test_place_order_rejects_unserved_zone_without_creating_order() -> None:
    order_repository = FakeOrderRepository()
    publisher = FakePublisher()
    with pytest.raises(ZoneNotServedError):
        _use_case(order_repository=order_repository, publisher=publisher).execute(
            request_dto=_request(zone="Sud"),
            trace_ctx=_trace(),
        )

    assert order_repository.orders == []
    assert publisher.calls == []


def test_place_order_rejects_total_below_minimum() -> None:
    with pytest.raises(BelowMinimumOrderError) as exc_info:
        _use_case().execute(request_dto=_request(quantity=1), trace_ctx=_trace())

    assert exc_info.value.details == {"minimumOrder": {"amountCents": 1500, "currency": "EUR"}}


def test_place_order_rejects_inactive_restaurant() -> None:
    with pytest.raises(RestaurantUnavailableError):
        _use_case(restaurant=_restaurant(RestaurantStatus.TEMPORARILY_CLOSED)).execute(
            request_dto=_request(),
            trace_ctx=_trace(),
        )


def test_place_order_rejects_mismatched_client_total() -> None:
    with pytest.raises(TotalAmountMismatchError):
        _use_case().execute(request_dto=_request(total_amount="19.00"), trace_ctx=_trace())


def test_place_order_accepts_matching_client_total() -> None:
    response = _use_case().execute(request_dto=_request(total_amount="20.00"), trace_ctx=_trace())
    assert response.totalAmount.amountCents == 2000


def test_place_order_publishes_admin_event_and_notifies_customer() -> None:
    publisher = FakePublisher()
    notifier = FakeNotifier()
    response = _use_case(publisher=publisher, notifier=notifier).execute(
        request_dto=_request(),
        trace_ctx=_trace(),
    )

    assert len(publisher.calls) == 1
    assert publisher.calls[0].channel == "events:admin"
    envelope = json.loads(publisher.calls[0].message)
    assert envelope["event_type"] == "order.placed"
    assert envelope["request_id"] == "req-1"
    assert envelope["trace_id"] == "trace-1"
    assert envelope["payload"]["orderId"] == response.orderId
    assert [str(order.order_id) for order in notifier.placed] == [response.orderId]


def test_place_order_succeeds_when_notifier_and_publisher_fail() -> None:
    order_repository = FakeOrderRepository()
    response = _use_case(
        order_repository=order_repository,
        publisher=FakePublisher(fail=True),
        notifier=FakeNotifier(fail=True),
    ).execute(request_dto=_request(), trace_ctx=_trace())

    assert response.orderStatus == "pending"
    assert len(order_repository.orders) == 1


def test_place_order_retries_when_order_number_is_taken() -> None:
    order_repository = FakeOrderRepository(conflicts=1)
    response = _use_case(order_repository=order_repository).execute(
        request_dto=_request(),
        trace_ctx=_trace(),
    )

    assert [str(order.order_number) for order in order_repository.orders] == [response.orderNumber]


def test_place_order_gives_up_after_repeated_order_number_conflicts() -> None:
    with pytest.raises(OrderNumberConflictError):
        _use_case(order_repository=FakeOrderRepository(conflicts=10)).execute(
            request_dto=_request(),
            trace_ctx=_trace(),
        )
