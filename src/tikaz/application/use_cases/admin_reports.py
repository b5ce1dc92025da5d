from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

from tikaz.application.dto.responses import (
    ContactListResponse,
    DailyRevenueResponse,
    DashboardContactCountsResponse,
    DashboardOrderCountsResponse,
    DashboardRestaurantCountsResponse,
    DashboardRevenueResponse,
    DashboardStatsResponse,
    HourCountResponse,
    MoneyResponse,
    OrderAnalyticsResponse,
    OrderListResponse,
    RecentOrderResponse,
    RestaurantListResponse,
    RestaurantRevenueResponse,
    RevenueAnalyticsResponse,
    StatusCountResponse,
)
from tikaz.application.mappers.contact_mapper import to_contact_response
from tikaz.application.mappers.order_mapper import to_money_response, to_order_response
from tikaz.application.mappers.restaurant_mapper import to_restaurant_response
from tikaz.application.ports.repositories import (
    ContactFilter,
    ContactRepository,
    InvalidCursorError,
    OrderFilter,
    OrderRepository,
    ReportRepository,
    RestaurantFilter,
    RestaurantRepository,
)
from tikaz.application.use_cases.restaurant_catalog import build_pagination, validate_page
from tikaz.domain.common.money import DEFAULT_CURRENCY
from tikaz.domain.contact.entities import ContactPriority, ContactStatus, ContactType
from tikaz.domain.order.entities import OrderStatus
from tikaz.domain.restaurant.entities import RestaurantStatus

PERIOD_DAYS = {"7days": 7, "30days": 30, "90days": 90}
DEFAULT_PERIOD = "7days"
TOP_RESTAURANTS_LIMIT = 10


class InvalidAdminFilterError(Exception):
    pass


class InvalidAdminCursorError(Exception):
    pass


def resolve_period(period: str | None) -> tuple[str, int]:
    """Map a period label to its day count; unknown labels fall back to seven days."""
    if period in PERIOD_DAYS:
        return period, PERIOD_DAYS[period]
    return DEFAULT_PERIOD, PERIOD_DAYS[DEFAULT_PERIOD]


def _parse_enum(enum_cls, value: str | None, label: str):
    if value is None or value == "":
        return None
    try:
        return enum_cls(value)
    except ValueError as exc:
        raise InvalidAdminFilterError(f"invalid {label} filter: {value}") from exc


def _validate_limit(limit: int) -> None:
    if limit < 1 or limit > 200:
        raise InvalidAdminFilterError("limit must be between 1 and 200")


def _money(amount_cents: int) -> MoneyResponse:
    return MoneyResponse(amountCents=amount_cents, currency=DEFAULT_CURRENCY)


class AdminDashboard:
    def __init__(self, report_repository: ReportRepository) -> None:
        self._report_repository = report_repository

    def execute(self, now: datetime | None = None) -> DashboardStatsResponse:
        current = now or datetime.now(timezone.utc)
        day_start = datetime.combine(current.date(), time.min, tzinfo=timezone.utc)
        data = self._report_repository.dashboard(day_start, day_start + timedelta(days=1))
        return DashboardStatsResponse(
            orders=DashboardOrderCountsResponse(
                total=data.orders_total,
                today=data.orders_today,
                active=data.orders_active,
                delivered=data.orders_delivered,
                cancelled=data.orders_cancelled,
            ),
            revenue=DashboardRevenueResponse(
                today=_money(data.revenue_today_cents),
                total=_money(data.revenue_total_cents),
            ),
            restaurants=DashboardRestaurantCountsResponse(
                total=data.restaurants_total,
                active=data.restaurants_active,
                featured=data.restaurants_featured,
            ),
            contacts=DashboardContactCountsResponse(
                total=data.contacts_total,
                new=data.contacts_new,
                pending=data.contacts_pending,
            ),
            recentOrders=[
                RecentOrderResponse(
                    orderId=str(order.order_id),
                    orderNumber=str(order.order_number),
                    customerName=order.customer.name,
                    restaurantName=order.restaurant.name,
                    finalAmount=to_money_response(order.final_amount),
                    orderStatus=order.status.value,
                    createdAt=order.created_at,
                )
                for order in data.recent_orders
            ],
        )


class AdminListOrders:
    def __init__(self, order_repository: OrderRepository) -> None:
        self._order_repository = order_repository

    def execute(
        self,
        *,
        status: str | None = None,
        restaurant: str | None = None,
        customer: str | None = None,
        day: date | None = None,
        limit: int = 50,
        cursor: str | None = None,
    ) -> OrderListResponse:
        _validate_limit(limit)
        order_filter = OrderFilter(
            status=_parse_enum(OrderStatus, status, "status"),
            restaurant_name=restaurant or None,
            customer=customer or None,
            day=day,
        )
        try:
            orders, next_cursor = self._order_repository.list_filtered(
                order_filter,
                limit=limit,
                cursor=cursor,
            )
        except InvalidCursorError as exc:
            raise InvalidAdminCursorError("invalid cursor") from exc
        return OrderListResponse(
            orders=[to_order_response(order) for order in orders],
            nextCursor=next_cursor,
        )


class AdminListContacts:
    def __init__(self, contact_repository: ContactRepository) -> None:
        self._contact_repository = contact_repository

    def execute(
        self,
        *,
        status: str | None = None,
        type: str | None = None,
        priority: str | None = None,
        limit: int = 50,
        cursor: str | None = None,
    ) -> ContactListResponse:
        _validate_limit(limit)
        contact_filter = ContactFilter(
            status=_parse_enum(ContactStatus, status, "status"),
            type=_parse_enum(ContactType, type, "type"),
            priority=_parse_enum(ContactPriority, priority, "priority"),
        )
        try:
            contacts, next_cursor = self._contact_repository.list_filtered(
                contact_filter,
                limit=limit,
                cursor=cursor,
            )
        except InvalidCursorError as exc:
            raise InvalidAdminCursorError("invalid cursor") from exc
        return ContactListResponse(
            contacts=[to_contact_response(contact) for contact in contacts],
            nextCursor=next_cursor,
        )


class AdminListRestaurants:
    def __init__(self, restaurant_repository: RestaurantRepository) -> None:
        self._restaurant_repository = restaurant_repository

    def execute(
        self,
        *,
        status: str | None = None,
        cuisine: str | None = None,
        featured: bool | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> RestaurantListResponse:
        validate_page(page, limit)
        restaurants, total = self._restaurant_repository.list_page(
            RestaurantFilter(
                status=_parse_enum(RestaurantStatus, status, "status"),
                cuisine=cuisine or None,
                featured=featured,
            ),
            offset=(page - 1) * limit,
            limit=limit,
            order_by_name=True,
        )
        return RestaurantListResponse(
            restaurants=[to_restaurant_response(restaurant) for restaurant in restaurants],
            pagination=build_pagination(page, limit, total),
        )


class RevenueAnalytics:
    def __init__(self, report_repository: ReportRepository) -> None:
        self._report_repository = report_repository

    def execute(self, period: str | None = None, now: datetime | None = None) -> RevenueAnalyticsResponse:
        label, days = resolve_period(period)
        since = (now or datetime.now(timezone.utc)) - timedelta(days=days)
        daily = self._report_repository.daily_revenue(since)
        top = self._report_repository.top_restaurants(since, TOP_RESTAURANTS_LIMIT)
        return RevenueAnalyticsResponse(
            period=label,
            dailyRevenue=[
                DailyRevenueResponse(day=row.day, revenue=_money(row.revenue_cents), orders=row.orders)
                for row in daily
            ],
            topRestaurants=[
                RestaurantRevenueResponse(
                    restaurantName=row.restaurant_name,
                    revenue=_money(row.revenue_cents),
                    orders=row.orders,
                )
                for row in top
            ],
        )


class OrderAnalytics:
    def __init__(self, report_repository: ReportRepository) -> None:
        self._report_repository = report_repository

    def execute(self, period: str | None = None, now: datetime | None = None) -> OrderAnalyticsResponse:
        label, days = resolve_period(period)
        since = (now or datetime.now(timezone.utc)) - timedelta(days=days)
        data = self._report_repository.order_analytics(since)
        return OrderAnalyticsResponse(
            period=label,
            ordersByStatus=[
                StatusCountResponse(status=status, count=count) for status, count in data.by_status
            ],
            ordersByHour=[HourCountResponse(hour=hour, count=count) for hour, count in data.by_hour],
            averageOrderValue=_money(data.average_order_value_cents),
            totalOrders=data.delivered_orders,
        )
