from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import uuid4

from tikaz.application.dto.requests import PlaceOrderRequest
from tikaz.application.dto.responses import OrderResponse
from tikaz.application.mappers.event_envelope import serialize_order_placed_event
from tikaz.application.mappers.order_mapper import to_order_response
from tikaz.application.metrics.order_lifecycle import record_order_placed, record_placement_rejected
from tikaz.application.ports.notifier import OrderNotifier
from tikaz.application.ports.publisher import ADMIN_TOPIC, EventPublisher, topic_channel
from tikaz.application.ports.repositories import (
    OrderNumberConflictError,
    OrderRepository,
    RestaurantRepository,
)
from tikaz.application.use_cases.best_effort import notify_best_effort, publish_best_effort
from tikaz.application.use_cases.context import TraceContext
from tikaz.domain.common.ids import OrderId, RestaurantId
from tikaz.domain.common.money import Money
from tikaz.domain.order.entities import (
    CustomerInfo,
    DeliveryAddress,
    Order,
    OrderItem,
    PaymentMethod,
    RestaurantRef,
    create_pending_order,
    format_order_number,
)

logger = logging.getLogger(__name__)

_MAX_ORDER_NUMBER_ATTEMPTS = 3


class RestaurantUnavailableError(Exception):
    pass


class ZoneNotServedError(Exception):
    pass


class BelowMinimumOrderError(Exception):
    def __init__(self, message: str, minimum_order: Money) -> None:
        super().__init__(message)
        self.details = {
            "minimumOrder": {
                "amountCents": minimum_order.amount_cents,
                "currency": minimum_order.currency,
            }
        }


class TotalAmountMismatchError(Exception):
    pass


class PlaceOrder:
    def __init__(
        self,
        restaurant_repository: RestaurantRepository,
        order_repository: OrderRepository,
        publisher: EventPublisher,
        notifier: OrderNotifier,
    ) -> None:
        self._restaurant_repository = restaurant_repository
        self._order_repository = order_repository
        self._publisher = publisher
        self._notifier = notifier

    def execute(self, request_dto: PlaceOrderRequest, trace_ctx: TraceContext) -> OrderResponse:
        restaurant_id = RestaurantId(request_dto.restaurant.id)
        restaurant = self._restaurant_repository.get_active(restaurant_id)
        if restaurant is None:
            record_placement_rejected("restaurant_unavailable")
            raise RestaurantUnavailableError(f"restaurant {restaurant_id} is not available")

        zone = request_dto.customer.address.zone
        if not restaurant.delivers_to(zone):
            record_placement_rejected("zone_not_served")
            raise ZoneNotServedError(f"restaurant {restaurant_id} does not deliver to zone {zone}")

        currency = restaurant.currency
        items = [
            OrderItem(
                name=item.name,
                unit_price=Money.from_decimal(item.price, currency),
                quantity=item.quantity,
                note=item.note,
            )
            for item in request_dto.items
        ]
        total_cents = sum(item.subtotal.amount_cents for item in items)

        if request_dto.total_amount is not None:
            supplied = Money.from_decimal(request_dto.total_amount, currency)
            if supplied.amount_cents != total_cents:
                raise TotalAmountMismatchError(
                    "totalAmount does not match the sum of item subtotals"
                )

        if total_cents < restaurant.minimum_order.amount_cents:
            record_placement_rejected("below_minimum_order")
            raise BelowMinimumOrderError(
                f"minimum order of {restaurant.minimum_order.to_decimal()} "
                f"{currency} required",
                minimum_order=restaurant.minimum_order,
            )

        customer_dto = request_dto.customer
        customer = CustomerInfo(
            name=customer_dto.name,
            email=customer_dto.email,
            phone=customer_dto.phone,
            address=DeliveryAddress(
                street=customer_dto.address.street,
                city=customer_dto.address.city,
                postal_code=customer_dto.address.postal_code,
                zone=customer_dto.address.zone,
            ),
        )

        order = self._persist_new_order(
            customer=customer,
            restaurant_ref=RestaurantRef(restaurant_id=restaurant_id, name=restaurant.name),
            items=items,
            delivery_fee=restaurant.delivery_fee,
            payment_method=PaymentMethod(request_dto.payment_method),
            special_instructions=request_dto.special_instructions,
        )
        record_order_placed(order)
        logger.info(
            "order_placed",
            extra={"order_id": str(order.order_id), "order_number": str(order.order_number)},
        )

        notify_best_effort(lambda: self._notifier.notify_order_placed(order), kind="order_placed")
        message = serialize_order_placed_event(
            topic=ADMIN_TOPIC,
            order=order,
            trace_id=trace_ctx.trace_id,
            request_id=trace_ctx.request_id,
        )
        publish_best_effort(
            self._publisher,
            channel=topic_channel(ADMIN_TOPIC),
            message=message,
            kind="order.placed",
        )

        return to_order_response(order)

    def _persist_new_order(
        self,
        *,
        customer: CustomerInfo,
        restaurant_ref: RestaurantRef,
        items: list[OrderItem],
        delivery_fee: Money,
        payment_method: PaymentMethod,
        special_instructions: str | None,
    ) -> Order:
        order_id = OrderId(f"ord_{uuid4().hex[:12]}")
        for _ in range(_MAX_ORDER_NUMBER_ATTEMPTS):
            now = datetime.now(timezone.utc)
            order = create_pending_order(
                order_id=order_id,
                order_number=format_order_number(now, self._order_repository.next_sequence()),
                customer=customer,
                restaurant=restaurant_ref,
                items=items,
                delivery_fee=delivery_fee,
                payment_method=payment_method,
                now=now,
                special_instructions=special_instructions,
            )
            try:
                self._order_repository.add(order)
            except OrderNumberConflictError:
                logger.warning(
                    "order_number_conflict",
                    extra={"order_number": str(order.order_number)},
                )
                continue
            return order
        raise OrderNumberConflictError(
            f"could not allocate a unique order number for order {order_id}"
        )
