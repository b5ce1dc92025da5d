from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum

from tikaz.domain.common.ids import OrderId, OrderNumber, RestaurantId
from tikaz.domain.common.money import Money

ESTIMATED_DELIVERY_OFFSET = timedelta(minutes=45)
ORDER_NUMBER_PREFIX = "TKL"
ORDER_RECEIVED_NOTE = "Commande reçue"
MIN_RATING_SCORE = 1
MAX_RATING_SCORE = 5


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERING = "delivering"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


ACTIVE_ORDER_STATUSES = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.DELIVERING,
)


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    MOBILE_MONEY = "mobile_money"
    BANK_TRANSFER = "bank_transfer"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


@dataclass(frozen=True)
class DeliveryAddress:
    street: str
    city: str
    postal_code: str
    zone: str


@dataclass(frozen=True)
class CustomerInfo:
    name: str
    email: str
    phone: str
    address: DeliveryAddress

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("customer name must be non-empty")
        object.__setattr__(self, "email", self.email.strip().lower())


@dataclass(frozen=True)
class RestaurantRef:
    restaurant_id: RestaurantId
    name: str


@dataclass(frozen=True)
class OrderItem:
    name: str
    unit_price: Money
    quantity: int
    note: str | None = None

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError("quantity must be >= 1")

    @property
    def subtotal(self) -> Money:
        return self.unit_price.times(self.quantity)


@dataclass(frozen=True)
class TimelineEntry:
    sequence: int
    status: OrderStatus
    occurred_at: datetime
    note: str | None = None


@dataclass(frozen=True)
class OrderRating:
    score: int
    comment: str | None
    created_at: datetime


@dataclass(frozen=True)
class Order:
    order_id: OrderId
    order_number: OrderNumber
    customer: CustomerInfo
    restaurant: RestaurantRef
    items: list[OrderItem]
    total_amount: Money
    delivery_fee: Money
    payment_method: PaymentMethod
    status: OrderStatus
    timeline: list[TimelineEntry]
    estimated_delivery_at: datetime
    created_at: datetime
    payment_status: PaymentStatus = PaymentStatus.PENDING
    special_instructions: str | None = None
    actual_delivery_at: datetime | None = None
    rating: OrderRating | None = None
    version: int = 1
    updated_at: datetime | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not self.items:
            raise ValueError("order must contain at least one item")
        if not self.timeline:
            raise ValueError("order timeline must contain at least one entry")
        currency = self.total_amount.currency
        if self.delivery_fee.currency != currency:
            raise ValueError("delivery fee currency must match order currency")
        if any(item.unit_price.currency != currency for item in self.items):
            raise ValueError("item currency must match order currency")
        expected_total = sum(item.subtotal.amount_cents for item in self.items)
        if self.total_amount.amount_cents != expected_total:
            raise ValueError("order total must equal sum of item subtotals")

    @property
    def final_amount(self) -> Money:
        return self.total_amount.plus(self.delivery_fee)

    @property
    def currency(self) -> str:
        return self.total_amount.currency

    def transition(self, new_status: OrderStatus, now: datetime, note: str | None = None) -> Order:
        """Return a copy moved to ``new_status`` with a new timeline entry.

        Any status may follow any other; only membership in ``OrderStatus`` is
        enforced. The entry timestamp never goes backwards relative to the
        previous entry, so the timeline stays ordered even when clocks skew
        between writers.
        """
        last = self.timeline[-1]
        occurred_at = max(now, last.occurred_at)
        entry = TimelineEntry(
            sequence=last.sequence + 1,
            status=new_status,
            occurred_at=occurred_at,
            note=note or "",
        )
        actual_delivery_at = self.actual_delivery_at
        if new_status == OrderStatus.DELIVERED:
            actual_delivery_at = occurred_at
        return replace(
            self,
            status=new_status,
            timeline=[*self.timeline, entry],
            actual_delivery_at=actual_delivery_at,
        )

    def rate(self, score: int, comment: str | None, now: datetime) -> Order:
        if isinstance(score, bool) or not isinstance(score, int):
            raise InvalidRatingScoreError("rating score must be an integer between 1 and 5")
        if not MIN_RATING_SCORE <= score <= MAX_RATING_SCORE:
            raise InvalidRatingScoreError("rating score must be an integer between 1 and 5")
        if self.status != OrderStatus.DELIVERED:
            raise OrderNotDeliveredError(
                f"order {self.order_id} cannot be rated from status={self.status.value}"
            )
        if self.rating is not None:
            raise AlreadyRatedError(f"order {self.order_id} has already been rated")
        return replace(
            self,
            rating=OrderRating(score=score, comment=comment or "", created_at=now),
        )


def format_order_number(created_at: datetime, sequence: int) -> OrderNumber:
    epoch_millis = int(created_at.timestamp() * 1000)
    return OrderNumber(f"{ORDER_NUMBER_PREFIX}{epoch_millis}{sequence:04d}")


def create_pending_order(
    order_id: OrderId,
    order_number: OrderNumber,
    customer: CustomerInfo,
    restaurant: RestaurantRef,
    items: list[OrderItem],
    delivery_fee: Money,
    payment_method: PaymentMethod,
    now: datetime,
    special_instructions: str | None = None,
) -> Order:
    if not items:
        raise ValueError("order must contain at least one item")

    currency = items[0].unit_price.currency
    total_amount = Money(
        amount_cents=sum(item.subtotal.amount_cents for item in items),
        currency=currency,
    )
    return Order(
        order_id=order_id,
        order_number=order_number,
        customer=customer,
        restaurant=restaurant,
        items=items,
        total_amount=total_amount,
        delivery_fee=delivery_fee,
        payment_method=payment_method,
        status=OrderStatus.PENDING,
        timeline=[
            TimelineEntry(
                sequence=1,
                status=OrderStatus.PENDING,
                occurred_at=now,
                note=ORDER_RECEIVED_NOTE,
            )
        ],
        estimated_delivery_at=now + ESTIMATED_DELIVERY_OFFSET,
        created_at=now,
        special_instructions=special_instructions,
    )


class InvalidRatingScoreError(Exception):
    pass


class OrderNotDeliveredError(Exception):
    pass


class AlreadyRatedError(Exception):
    pass
