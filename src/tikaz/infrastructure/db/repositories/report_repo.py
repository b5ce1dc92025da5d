from __future__ import annotations

from datetime import datetime

from sqlalchemy import Engine, extract, func, select
from sqlalchemy.orm import Session, selectinload

from tikaz.application.ports.repositories import (
    DailyRevenueData,
    DashboardData,
    OrderAnalyticsData,
    ReportRepository,
    RestaurantRevenueData,
)
from tikaz.domain.contact.entities import ContactStatus
from tikaz.domain.order.entities import ACTIVE_ORDER_STATUSES, OrderStatus
from tikaz.domain.restaurant.entities import RestaurantStatus
from tikaz.infrastructure.db.models.contact import ContactModel
from tikaz.infrastructure.db.models.order import OrderModel
from tikaz.infrastructure.db.models.restaurant import RestaurantModel
from tikaz.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from tikaz.infrastructure.db.session import get_engine

RECENT_ORDERS_LIMIT = 10

_DELIVERED = OrderModel.status == OrderStatus.DELIVERED.value


def _count(session: Session, model, *criteria) -> int:
    return int(session.execute(select(func.count(model.id)).where(*criteria)).scalar_one())


def _revenue(session: Session, *criteria) -> int:
    statement = select(func.coalesce(func.sum(OrderModel.final_cents), 0)).where(_DELIVERED, *criteria)
    return int(session.execute(statement).scalar_one())


class SqlAlchemyReportRepository(ReportRepository):
    """Aggregations for the admin surface, computed in the database."""

    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def dashboard(self, day_start: datetime, day_end: datetime) -> DashboardData:
        today = (OrderModel.created_at >= day_start, OrderModel.created_at < day_end)
        recent_statement = (
            select(OrderModel)
            .options(selectinload(OrderModel.items), selectinload(OrderModel.timeline))
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            .limit(RECENT_ORDERS_LIMIT)
        )
        active_values = [status.value for status in ACTIVE_ORDER_STATUSES]
        pending_contacts = [ContactStatus.NEW.value, ContactStatus.IN_PROGRESS.value]

        with Session(self._engine) as session:
            recent = [
                SqlAlchemyOrderRepository.to_domain(model)
                for model in session.execute(recent_statement).scalars().all()
            ]
            return DashboardData(
                orders_total=_count(session, OrderModel),
                orders_today=_count(session, OrderModel, *today),
                orders_active=_count(session, OrderModel, OrderModel.status.in_(active_values)),
                orders_delivered=_count(session, OrderModel, _DELIVERED),
                orders_cancelled=_count(
                    session,
                    OrderModel,
                    OrderModel.status == OrderStatus.CANCELLED.value,
                ),
                revenue_today_cents=_revenue(session, *today),
                revenue_total_cents=_revenue(session),
                restaurants_total=_count(session, RestaurantModel),
                restaurants_active=_count(
                    session,
                    RestaurantModel,
                    RestaurantModel.status == RestaurantStatus.ACTIVE.value,
                ),
                restaurants_featured=_count(
                    session,
                    RestaurantModel,
                    RestaurantModel.featured.is_(True),
                ),
                contacts_total=_count(session, ContactModel),
                contacts_new=_count(
                    session,
                    ContactModel,
                    ContactModel.status == ContactStatus.NEW.value,
                ),
                contacts_pending=_count(
                    session,
                    ContactModel,
                    ContactModel.status.in_(pending_contacts),
                ),
                recent_orders=recent,
            )

    def daily_revenue(self, since: datetime) -> list[DailyRevenueData]:
        day = func.date(OrderModel.created_at)
        statement = (
            select(day, func.sum(OrderModel.final_cents), func.count(OrderModel.id))
            .where(_DELIVERED, OrderModel.created_at >= since)
            .group_by(day)
            .order_by(day)
        )
        with Session(self._engine) as session:
            return [
                DailyRevenueData(day=str(row_day), revenue_cents=int(revenue or 0), orders=int(orders))
                for row_day, revenue, orders in session.execute(statement)
            ]

    def top_restaurants(self, since: datetime, limit: int) -> list[RestaurantRevenueData]:
        revenue = func.sum(OrderModel.final_cents)
        statement = (
            select(OrderModel.restaurant_name, revenue, func.count(OrderModel.id))
            .where(_DELIVERED, OrderModel.created_at >= since)
            .group_by(OrderModel.restaurant_name)
            .order_by(revenue.desc(), OrderModel.restaurant_name.asc())
            .limit(limit)
        )
        with Session(self._engine) as session:
            return [
                RestaurantRevenueData(
                    restaurant_name=name,
                    revenue_cents=int(total or 0),
                    orders=int(orders),
                )
                for name, total, orders in session.execute(statement)
            ]

    def order_analytics(self, since: datetime) -> OrderAnalyticsData:
        in_period = OrderModel.created_at >= since
        hour = extract("hour", OrderModel.created_at)
        by_status_statement = (
            select(OrderModel.status, func.count(OrderModel.id))
            .where(in_period)
            .group_by(OrderModel.status)
            .order_by(func.count(OrderModel.id).desc(), OrderModel.status.asc())
        )
        by_hour_statement = (
            select(hour, func.count(OrderModel.id)).where(in_period).group_by(hour).order_by(hour)
        )
        delivered_statement = select(
            func.coalesce(func.sum(OrderModel.final_cents), 0),
            func.count(OrderModel.id),
        ).where(_DELIVERED, in_period)

        with Session(self._engine) as session:
            by_status = [(status, int(count)) for status, count in session.execute(by_status_statement)]
            by_hour = [(int(row_hour), int(count)) for row_hour, count in session.execute(by_hour_statement)]
            delivered_total, delivered_count = session.execute(delivered_statement).one()

        delivered_count = int(delivered_count)
        average = int(delivered_total) // delivered_count if delivered_count else 0
        return OrderAnalyticsData(
            by_status=by_status,
            by_hour=by_hour,
            average_order_value_cents=average,
            delivered_orders=delivered_count,
        )
