from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Query

from tikaz.application.dto.responses import (
    ContactListResponse,
    DashboardStatsResponse,
    OrderAnalyticsResponse,
    OrderListResponse,
    RestaurantListResponse,
    RevenueAnalyticsResponse,
)
from tikaz.application.use_cases.admin_reports import (
    AdminDashboard,
    AdminListContacts,
    AdminListOrders,
    AdminListRestaurants,
    OrderAnalytics,
    RevenueAnalytics,
)
from tikaz.infrastructure.db.repositories.contact_repo import SqlAlchemyContactRepository
from tikaz.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from tikaz.infrastructure.db.repositories.report_repo import SqlAlchemyReportRepository
from tikaz.infrastructure.db.repositories.restaurant_repo import SqlAlchemyRestaurantRepository

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/dashboard/stats", response_model=DashboardStatsResponse)
def dashboard_stats() -> DashboardStatsResponse:
    return AdminDashboard(SqlAlchemyReportRepository()).execute()


@router.get("/orders", response_model=OrderListResponse)
def list_orders(
    status: str | None = Query(default=None),
    restaurant: str | None = Query(default=None),
    customer: str | None = Query(default=None),
    day: date | None = Query(default=None, alias="date"),
    limit: int = Query(default=50),
    cursor: str | None = Query(default=None),
) -> OrderListResponse:
    return AdminListOrders(SqlAlchemyOrderRepository()).execute(
        status=status,
        restaurant=restaurant,
        customer=customer,
        day=day,
        limit=limit,
        cursor=cursor,
    )


@router.get("/contacts", response_model=ContactListResponse)
def list_contacts(
    status: str | None = Query(default=None),
    type: str | None = Query(default=None),
    priority: str | None = Query(default=None),
    limit: int = Query(default=50),
    cursor: str | None = Query(default=None),
) -> ContactListResponse:
    return AdminListContacts(SqlAlchemyContactRepository()).execute(
        status=status,
        type=type,
        priority=priority,
        limit=limit,
        cursor=cursor,
    )


@router.get("/restaurants", response_model=RestaurantListResponse)
def list_restaurants(
    status: str | None = Query(default=None),
    cuisine: str | None = Query(default=None),
    featured: bool | None = Query(default=None),
    page: int = Query(default=1),
    limit: int = Query(default=20),
) -> RestaurantListResponse:
    return AdminListRestaurants(SqlAlchemyRestaurantRepository()).execute(
        status=status,
        cuisine=cuisine,
        featured=featured,
        page=page,
        limit=limit,
    )


@router.get("/analytics/revenue", response_model=RevenueAnalyticsResponse)
def revenue_analytics(period: str = Query(default="7days")) -> RevenueAnalyticsResponse:
    return RevenueAnalytics(SqlAlchemyReportRepository()).execute(period=period)


@router.get("/analytics/orders", response_model=OrderAnalyticsResponse)
def order_analytics(period: str = Query(default="7days")) -> OrderAnalyticsResponse:
    return OrderAnalytics(SqlAlchemyReportRepository()).execute(period=period)
