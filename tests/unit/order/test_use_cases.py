from __future__ import annotations

import json
import sys
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from tikaz.application.ports.repositories import InvalidCursorError, OptimisticConcurrencyError
from tikaz.application.use_cases.context import TraceContext
from tikaz.application.use_cases.get_order import (
    GetOrder,
    InvalidOrderListCursorError,
    InvalidOrderListLimitError,
    ListCustomerOrders,
)
from tikaz.application.use_cases.get_order import OrderNotFoundError as GetOrderNotFoundError
from tikaz.application.use_cases.rate_order import OrderConflictError as RateOrderConflictError
from tikaz.application.use_cases.rate_order import RateOrder
from tikaz.application.use_cases.transition_order import (
    InvalidStatusError,
    OrderConflictError,
    OrderNotFoundError,
    TransitionOrder,
)
from tikaz.domain.common.ids import OrderId, RestaurantId
from tikaz.domain.common.money import Money
from tikaz.domain.order.entities import (
    AlreadyRatedError,
    CustomerInfo,
    DeliveryAddress,
    InvalidRatingScoreError,
    Order,
    OrderItem,
    OrderNotDeliveredError,
    OrderStatus,
    PaymentMethod,
    RestaurantRef,
    create_pending_order,
    format_order_number,
)

CREATED_AT = datetime(2026, 10, 1, 9, 30, tzinfo=timezone.utc)


class FakeOrderRepository:
    def __init__(self, *orders: Order) -> None:
        self.orders: dict[str, Order] = {str(order.order_id): order for order in orders}
        self.fail_saves = 0
        self.rate_race = False
        self.version_bumps_before_rating = 0
        self.restaurant_known = True
        self.restaurant_ratings: list[tuple[str, int]] = []
        self.list_calls: list[tuple[str, int, str | None]] = []

    def get(self, order_id) -> Order | None:
        return self.orders.get(str(order_id))

    def find_by_identifier(self, identifier: str) -> Order | None:
        for order in self.orders.values():
            if str(order.order_number) == identifier:
                return order
        return self.orders.get(identifier)

    def save_transition(self, order: Order, expected_version: int) -> Order:
        stored = self.orders[str(order.order_id)]
        if self.fail_saves:
            self.fail_saves -= 1
            # Another writer got there first.
            self.orders[str(order.order_id)] = replace(stored, version=stored.version + 1)
            raise OptimisticConcurrencyError("version conflict")
        if stored.version != expected_version:
            raise OptimisticConcurrencyError("version conflict")
        saved = replace(order, version=expected_version + 1)
        self.orders[str(order.order_id)] = saved
        return saved

    def save_rating_and_record(self, order: Order, expected_version: int) -> tuple[Order, bool]:
        stored = self.orders[str(order.order_id)]
        if self.version_bumps_before_rating:
            self.version_bumps_before_rating -= 1
            # A same-status transition adding a note.
            self.orders[str(order.order_id)] = replace(stored, version=stored.version + 1)
            raise OptimisticConcurrencyError("version conflict")
        if self.rate_race:
            self.orders[str(order.order_id)] = replace(
                stored,
                rating=order.rating,
                version=stored.version + 1,
            )
            raise OptimisticConcurrencyError("version conflict")
        if stored.version != expected_version or stored.rating is not None:
            raise OptimisticConcurrencyError("version conflict")
        saved = replace(order, version=expected_version + 1)
        self.orders[str(order.order_id)] = saved
        if self.restaurant_known:
            self.restaurant_ratings.append((str(order.restaurant.restaurant_id), order.rating.score))
        return saved, self.restaurant_known

    def list_for_customer(self, contact: str, limit: int, cursor: str | None):
        self.list_calls.append((contact, limit, cursor))
        if cursor == "garbage":
            raise InvalidCursorError("invalid cursor")
        matches = [
            order
            for order in self.orders.values()
            if contact in {order.customer.email, order.customer.phone}
        ]
        return matches[:limit], None


class FakePublisher:
    def __init__(self, fail: bool = False) -> None:
        self.messages: list[tuple[str, str]] = []
        self._fail = fail

    def publish(self, channel: str, message: str) -> None:
        if self._fail:
            raise ConnectionError("redis down")
        self.messages.append((channel, message))


class FakeNotifier:
    def __init__(self, fail: bool = False) -> None:
        self.status_changes: list[tuple[str, OrderStatus]] = []
        self._fail = fail

    def notify_order_placed(self, order: Order) -> None:
        pass

    def notify_status_changed(self, order: Order, new_status: OrderStatus) -> None:
        if self._fail:
            raise OSError("smtp down")
        self.status_changes.append((str(order.order_id), new_status))


def _order(order_id: str = "ord_001", sequence: int = 1) -> Order:
    return create_pending_order(
        order_id=OrderId(order_id),
        order_number=format_order_number(CREATED_AT, sequence),
        customer=CustomerInfo(
            name="Jean Payet",
            email="jean@example.re",
            phone="+262692000000",
            address=DeliveryAddress(
                street="10 Rue de Paris",
                city="Saint-Denis",
                postal_code="97400",
                zone="Nord",
            ),
        ),
        restaurant=RestaurantRef(restaurant_id=RestaurantId("rst_001"), name="Chez Tante Marie"),
        items=[OrderItem(name="Cari Poulet", unit_price=Money(1000, "EUR"), quantity=2)],
        delivery_fee=Money(350, "EUR"),
        payment_method=PaymentMethod.CARD,
        now=CREATED_AT,
    )


def _delivered(order_id: str = "ord_001") -> Order:
    return _order(order_id).transition(OrderStatus.DELIVERED, now=CREATED_AT + timedelta(minutes=40))


def _trace() -> TraceContext:
    return TraceContext(trace_id=None, request_id="req-1")


def _transition_use_case(
    repository: FakeOrderRepository,
    publisher: FakePublisher | None = None,
    notifier: FakeNotifier | None = None,
) -> TransitionOrder:
    return TransitionOrder(
        order_repository=repository,
        publisher=publisher or FakePublisher(),
        notifier=notifier or FakeNotifier(),
    )


def test_transition_appends_timeline_and_broadcasts_on_order_topic() -> None:
    repository = FakeOrderRepository(_order())
    publisher = FakePublisher()
    notifier = FakeNotifier()

    response = _transition_use_case(repository, publisher, notifier).execute(
        order_id=OrderId("ord_001"),
        new_status="confirmed",
        trace_ctx=_trace(),
        note="Le restaurant a accepté",
    )

    assert response.orderStatus == "confirmed"
    assert [entry.status for entry in response.timeline] == ["pending", "confirmed"]
    assert response.timeline[-1].note == "Le restaurant a accepté"
    assert len(publisher.messages) == 1
    channel, message = publisher.messages[0]
    assert channel == "events:order_ord_001"
    envelope = json.loads(message)
    assert envelope["event_type"] == "order.status_changed"
    assert envelope["payload"]["status"] == "confirmed"
    assert notifier.status_changes == [("ord_001", OrderStatus.CONFIRMED)]


def test_transition_to_delivered_sets_actual_delivery_time() -> None:
    repository = FakeOrderRepository(_order())
    response = _transition_use_case(repository).execute(
        order_id=OrderId("ord_001"),
        new_status="delivered",
        trace_ctx=_trace(),
    )

    assert response.actualDeliveryTime is not None
    assert response.actualDeliveryTime == response.timeline[-1].timestamp


def test_transition_rejects_unknown_status() -> None:
    repository = FakeOrderRepository(_order())
    with pytest.raises(InvalidStatusError):
        _transition_use_case(repository).execute(
            order_id=OrderId("ord_001"),
            new_status="lost",
            trace_ctx=_trace(),
        )
    assert len(repository.orders["ord_001"].timeline) == 1


def test_transition_unknown_order_raises_not_found() -> None:
    with pytest.raises(OrderNotFoundError):
        _transition_use_case(FakeOrderRepository()).execute(
            order_id=OrderId("ord_missing"),
            new_status="confirmed",
            trace_ctx=_trace(),
        )


def test_transition_retries_on_version_conflict() -> None:
    repository = FakeOrderRepository(_order())
    repository.fail_saves = 2

    response = _transition_use_case(repository).execute(
        order_id=OrderId("ord_001"),
        new_status="preparing",
        trace_ctx=_trace(),
    )

    assert response.orderStatus == "preparing"
    assert repository.orders["ord_001"].version == 4


def test_transition_gives_up_after_persistent_conflicts() -> None:
    repository = FakeOrderRepository(_order())
    repository.fail_saves = 100

    with pytest.raises(OrderConflictError):
        _transition_use_case(repository).execute(
            order_id=OrderId("ord_001"),
            new_status="preparing",
            trace_ctx=_trace(),
        )


def test_transition_succeeds_when_side_effects_fail() -> None:
    repository = FakeOrderRepository(_order())
    response = _transition_use_case(
        repository,
        publisher=FakePublisher(fail=True),
        notifier=FakeNotifier(fail=True),
    ).execute(order_id=OrderId("ord_001"), new_status="ready", trace_ctx=_trace())

    assert response.orderStatus == "ready"
    assert repository.orders["ord_001"].status == OrderStatus.READY


def test_rate_delivered_order_updates_restaurant_rating() -> None:
    repository = FakeOrderRepository(_delivered())

    response = RateOrder(repository).execute(
        order_id=OrderId("ord_001"),
        score=5,
        comment="Délicieux",
    )

    assert response.rating is not None
    assert response.rating.score == 5
    assert response.rating.comment == "Délicieux"
    assert repository.restaurant_ratings == [("rst_001", 5)]


def test_rate_pending_order_is_rejected() -> None:
    repository = FakeOrderRepository(_order())
    with pytest.raises(OrderNotDeliveredError):
        RateOrder(repository).execute(order_id=OrderId("ord_001"), score=4)
    assert repository.restaurant_ratings == []


def test_rate_twice_is_rejected() -> None:
    repository = FakeOrderRepository(_delivered())
    use_case = RateOrder(repository)

    use_case.execute(order_id=OrderId("ord_001"), score=4)
    with pytest.raises(AlreadyRatedError):
        use_case.execute(order_id=OrderId("ord_001"), score=5)
    assert repository.restaurant_ratings == [("rst_001", 4)]


def test_rate_lost_race_reports_already_rated() -> None:
    repository = FakeOrderRepository(_delivered())
    repository.rate_race = True

    with pytest.raises(AlreadyRatedError):
        RateOrder(repository).execute(order_id=OrderId("ord_001"), score=3)
    assert repository.restaurant_ratings == []


def test_rate_retries_when_version_moves_without_rating() -> None:
    repository = FakeOrderRepository(_delivered())
    repository.version_bumps_before_rating = 2

    response = RateOrder(repository).execute(order_id=OrderId("ord_001"), score=4)

    assert response.rating is not None
    assert response.rating.score == 4
    assert repository.orders["ord_001"].version == 4
    assert repository.restaurant_ratings == [("rst_001", 4)]


def test_rate_gives_up_after_persistent_conflicts() -> None:
    repository = FakeOrderRepository(_delivered())
    repository.version_bumps_before_rating = 100

    with pytest.raises(RateOrderConflictError):
        RateOrder(repository).execute(order_id=OrderId("ord_001"), score=4)
    assert repository.restaurant_ratings == []


def test_rate_retry_sees_order_moved_out_of_delivered() -> None:
    repository = FakeOrderRepository(_delivered())
    original_save = repository.save_rating_and_record

    def reopen_then_save(order: Order, expected_version: int):
        stored = repository.orders["ord_001"]
        repository.orders["ord_001"] = replace(
            stored.transition(OrderStatus.CANCELLED, now=CREATED_AT + timedelta(hours=1)),
            version=stored.version + 1,
        )
        repository.save_rating_and_record = original_save
        raise OptimisticConcurrencyError("version conflict")

    repository.save_rating_and_record = reopen_then_save

    with pytest.raises(OrderNotDeliveredError):
        RateOrder(repository).execute(order_id=OrderId("ord_001"), score=5)
    assert repository.restaurant_ratings == []


@pytest.mark.parametrize("score", [0, 6, -1])
def test_rate_rejects_out_of_range_score(score: int) -> None:
    with pytest.raises(InvalidRatingScoreError):
        RateOrder(FakeOrderRepository(_delivered())).execute(
            order_id=OrderId("ord_001"),
            score=score,
        )


def test_rate_tolerates_missing_restaurant() -> None:
    repository = FakeOrderRepository(_delivered())
    repository.restaurant_known = False

    response = RateOrder(repository).execute(order_id=OrderId("ord_001"), score=2)

    assert response.rating is not None
    assert repository.restaurant_ratings == []


def test_lookup_by_number_equals_lookup_by_id() -> None:
    order = _order()
    use_case = GetOrder(FakeOrderRepository(order))

    by_number = use_case.execute(str(order.order_number))
    by_id = use_case.execute("ord_001")

    assert by_number == by_id


def test_lookup_unknown_identifier_raises() -> None:
    with pytest.raises(GetOrderNotFoundError):
        GetOrder(FakeOrderRepository(_order())).execute("TKL0000")


def test_customer_orders_normalizes_email_contact() -> None:
    repository = FakeOrderRepository(_order("ord_001", 1), _order("ord_002", 2))
    response = ListCustomerOrders(repository).execute(contact="  Jean@Example.RE ")

    assert {order.orderId for order in response.orders} == {"ord_001", "ord_002"}
    assert repository.list_calls == [("jean@example.re", 50, None)]


def test_customer_orders_matches_phone() -> None:
    repository = FakeOrderRepository(_order())
    response = ListCustomerOrders(repository).execute(contact="+262692000000", limit=10)
    assert [order.orderId for order in response.orders] == ["ord_001"]


def test_customer_orders_rejects_bad_limit_and_cursor() -> None:
    use_case = ListCustomerOrders(FakeOrderRepository(_order()))
    with pytest.raises(InvalidOrderListLimitError):
        use_case.execute(contact="jean@example.re", limit=0)
    with pytest.raises(InvalidOrderListCursorError):
        use_case.execute(contact="jean@example.re", cursor="garbage")
