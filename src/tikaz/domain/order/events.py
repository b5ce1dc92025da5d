from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from tikaz.domain.common.ids import OrderId, OrderNumber, RestaurantId
from tikaz.domain.common.money import Money
from tikaz.domain.order.entities import OrderStatus


@dataclass(frozen=True)
class OrderPlaced:
    order_id: OrderId
    order_number: OrderNumber
    restaurant_id: RestaurantId
    final_amount: Money
    created_at: datetime


@dataclass(frozen=True)
class OrderStatusChanged:
    order_id: OrderId
    order_number: OrderNumber
    from_status: OrderStatus
    to_status: OrderStatus
    note: str | None
    occurred_at: datetime


@dataclass(frozen=True)
class OrderRated:
    order_id: OrderId
    restaurant_id: RestaurantId
    score: int
    occurred_at: datetime
