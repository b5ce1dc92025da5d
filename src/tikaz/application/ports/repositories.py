from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Protocol

from tikaz.domain.common.ids import ContactId, OrderId, RestaurantId
from tikaz.domain.contact.entities import (
    ContactMessage,
    ContactPriority,
    ContactStatus,
    ContactType,
)
from tikaz.domain.order.entities import Order, OrderStatus
from tikaz.domain.restaurant.entities import Restaurant, RestaurantStatus


@dataclass(frozen=True)
class RestaurantFilter:
    status: RestaurantStatus | None = RestaurantStatus.ACTIVE
    zone: str | None = None
    cuisine: str | None = None
    featured: bool | None = None
    search: str | None = None
    min_rating: float | None = None
    max_delivery_fee_cents: int | None = None


@dataclass(frozen=True)
class OrderFilter:
    status: OrderStatus | None = None
    restaurant_name: str | None = None
    customer: str | None = None
    day: date | None = None


@dataclass(frozen=True)
class ContactFilter:
    status: ContactStatus | None = None
    type: ContactType | None = None
    priority: ContactPriority | None = None


class RestaurantRepository(Protocol):
    def get(self, restaurant_id: RestaurantId) -> Restaurant | None: ...

    def get_active(self, restaurant_id: RestaurantId) -> Restaurant | None: ...

    def record_rating(self, restaurant_id: RestaurantId, score: int) -> Restaurant | None: ...

    def list_page(
        self,
        restaurant_filter: RestaurantFilter,
        offset: int,
        limit: int,
        order_by_name: bool = False,
    ) -> tuple[list[Restaurant], int]: ...

    def distinct_zones(self) -> list[str]: ...

    def distinct_cuisines(self) -> list[str]: ...


class OrderRepository(Protocol):
    def add(self, order: Order) -> None: ...

    def get(self, order_id: OrderId) -> Order | None: ...

    def find_by_identifier(self, identifier: str) -> Order | None: ...

    def next_sequence(self) -> int: ...

    def save_transition(self, order: Order, expected_version: int) -> Order: ...

    def save_rating_and_record(self, order: Order, expected_version: int) -> tuple[Order, bool]: ...

    def list_for_customer(
        self,
        contact: str,
        limit: int,
        cursor: str | None,
    ) -> tuple[list[Order], str | None]: ...

    def list_filtered(
        self,
        order_filter: OrderFilter,
        limit: int,
        cursor: str | None,
    ) -> tuple[list[Order], str | None]: ...


class ContactRepository(Protocol):
    def add(self, contact: ContactMessage) -> None: ...

    def get(self, contact_id: ContactId) -> ContactMessage | None: ...

    def update(self, contact: ContactMessage) -> None: ...

    def list_filtered(
        self,
        contact_filter: ContactFilter,
        limit: int,
        cursor: str | None,
    ) -> tuple[list[ContactMessage], str | None]: ...

    def status_summary(self) -> ContactStatusSummaryData: ...


class ReportRepository(Protocol):
    def dashboard(self, day_start: datetime, day_end: datetime) -> DashboardData: ...

    def daily_revenue(self, since: datetime) -> list[DailyRevenueData]: ...

    def top_restaurants(self, since: datetime, limit: int) -> list[RestaurantRevenueData]: ...

    def order_analytics(self, since: datetime) -> OrderAnalyticsData: ...


class OptimisticConcurrencyError(Exception):
    pass


class OrderNumberConflictError(Exception):
    pass


class InvalidCursorError(Exception):
    pass


@dataclass(frozen=True)
class ContactStatusSummaryData:
    total: int
    new: int
    in_progress: int
    resolved: int
    closed: int
    by_type: list[tuple[str, int]] = field(default_factory=list)


@dataclass(frozen=True)
class DashboardData:
    orders_total: int
    orders_today: int
    orders_active: int
    orders_delivered: int
    orders_cancelled: int
    revenue_today_cents: int
    revenue_total_cents: int
    restaurants_total: int
    restaurants_active: int
    restaurants_featured: int
    contacts_total: int
    contacts_new: int
    contacts_pending: int
    recent_orders: list[Order] = field(default_factory=list)


@dataclass(frozen=True)
class DailyRevenueData:
    day: str
    revenue_cents: int
    orders: int


@dataclass(frozen=True)
class RestaurantRevenueData:
    restaurant_name: str
    revenue_cents: int
    orders: int


@dataclass(frozen=True)
class OrderAnalyticsData:
    by_status: list[tuple[str, int]]
    by_hour: list[tuple[int, int]]
    average_order_value_cents: int
    delivered_orders: int
