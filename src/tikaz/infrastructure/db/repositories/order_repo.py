from __future__ import annotations

from datetime import datetime, time, timedelta, timezone

from sqlalchemy import Engine, case, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from tikaz.application.ports.repositories import (
    OptimisticConcurrencyError,
    OrderFilter,
    OrderNumberConflictError,
    OrderRepository,
)
from tikaz.domain.common.ids import OrderId, OrderNumber, RestaurantId
from tikaz.domain.common.money import Money
from tikaz.domain.order.entities import (
    CustomerInfo,
    DeliveryAddress,
    Order,
    OrderItem,
    OrderRating,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    RestaurantRef,
    TimelineEntry,
)
from tikaz.infrastructure.db.models.order import OrderItemModel, OrderModel, OrderTimelineModel
from tikaz.infrastructure.db.repositories.keyset import apply_newest_first, as_utc, split_page
from tikaz.infrastructure.db.repositories.restaurant_repo import rating_increment
from tikaz.infrastructure.db.session import get_engine


def _with_children(statement):
    return statement.options(selectinload(OrderModel.items), selectinload(OrderModel.timeline))


class SqlAlchemyOrderRepository(OrderRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def add(self, order: Order) -> None:
        with Session(self._engine) as session:
            session.add(self._to_model(order))
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                taken = session.execute(
                    select(OrderModel.id).where(OrderModel.order_number == str(order.order_number))
                ).first()
                if taken is None:
                    raise
                raise OrderNumberConflictError(
                    f"order number {order.order_number} is already taken"
                ) from None

    def get(self, order_id: OrderId) -> Order | None:
        statement = _with_children(select(OrderModel)).where(OrderModel.id == str(order_id)).limit(1)
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
            if model is None:
                return None
            return self.to_domain(model)

    def find_by_identifier(self, identifier: str) -> Order | None:
        prefer_number = case((OrderModel.order_number == identifier, 0), else_=1)
        statement = (
            _with_children(select(OrderModel))
            .where(or_(OrderModel.order_number == identifier, OrderModel.id == identifier))
            .order_by(prefer_number)
            .limit(1)
        )
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
            if model is None:
                return None
            return self.to_domain(model)

    def next_sequence(self) -> int:
        with Session(self._engine) as session:
            count = session.execute(select(func.count(OrderModel.id))).scalar_one()
        return int(count) + 1

    def save_transition(self, order: Order, expected_version: int) -> Order:
        entry = order.timeline[-1]
        statement = (
            update(OrderModel)
            .where(
                OrderModel.id == str(order.order_id),
                OrderModel.version == expected_version,
            )
            .values(
                status=order.status.value,
                actual_delivery_at=order.actual_delivery_at,
                final_cents=order.final_amount.amount_cents,
                version=OrderModel.version + 1,
                updated_at=entry.occurred_at,
            )
        )
        with Session(self._engine) as session:
            result = session.execute(statement)
            if result.rowcount != 1:
                session.rollback()
                raise OptimisticConcurrencyError(f"order {order.order_id} version conflict")
            session.add(
                OrderTimelineModel(
                    order_id=str(order.order_id),
                    sequence=entry.sequence,
                    status=entry.status.value,
                    occurred_at=entry.occurred_at,
                    note=entry.note,
                )
            )
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise OptimisticConcurrencyError(
                    f"order {order.order_id} timeline entry {entry.sequence} already exists"
                ) from exc

        return self._reload(order.order_id)

    def save_rating_and_record(self, order: Order, expected_version: int) -> tuple[Order, bool]:
        """Store the rating and fold the score into the restaurant in one commit.

        Returns the reloaded order and whether a restaurant row was counted.
        """
        if order.rating is None:
            raise ValueError("order has no rating to save")
        statement = (
            update(OrderModel)
            .where(
                OrderModel.id == str(order.order_id),
                OrderModel.version == expected_version,
                OrderModel.rating_score.is_(None),
            )
            .values(
                rating_score=order.rating.score,
                rating_comment=order.rating.comment,
                rated_at=order.rating.created_at,
                final_cents=order.final_amount.amount_cents,
                version=OrderModel.version + 1,
                updated_at=order.rating.created_at,
            )
        )
        with Session(self._engine) as session:
            result = session.execute(statement)
            if result.rowcount != 1:
                session.rollback()
                raise OptimisticConcurrencyError(f"order {order.order_id} version conflict")
            counted = session.execute(
                rating_increment(order.restaurant.restaurant_id, order.rating.score)
            ).rowcount == 1
            session.commit()

        return self._reload(order.order_id), counted

    def list_for_customer(
        self,
        contact: str,
        limit: int,
        cursor: str | None,
    ) -> tuple[list[Order], str | None]:
        statement = _with_children(select(OrderModel)).where(
            or_(OrderModel.customer_email == contact, OrderModel.customer_phone == contact)
        )
        return self._page(apply_newest_first(statement, OrderModel, cursor, limit), limit)

    def list_filtered(
        self,
        order_filter: OrderFilter,
        limit: int,
        cursor: str | None,
    ) -> tuple[list[Order], str | None]:
        statement = _with_children(select(OrderModel))
        if order_filter.status is not None:
            statement = statement.where(OrderModel.status == order_filter.status.value)
        if order_filter.restaurant_name:
            statement = statement.where(
                OrderModel.restaurant_name.ilike(f"%{order_filter.restaurant_name}%")
            )
        if order_filter.customer:
            pattern = f"%{order_filter.customer}%"
            statement = statement.where(
                or_(
                    OrderModel.customer_name.ilike(pattern),
                    OrderModel.customer_email.ilike(pattern),
                    OrderModel.customer_phone.ilike(pattern),
                )
            )
        if order_filter.day is not None:
            day_start = datetime.combine(order_filter.day, time.min, tzinfo=timezone.utc)
            statement = statement.where(
                OrderModel.created_at >= day_start,
                OrderModel.created_at < day_start + timedelta(days=1),
            )
        return self._page(apply_newest_first(statement, OrderModel, cursor, limit), limit)

    def _page(self, statement, limit: int) -> tuple[list[Order], str | None]:
        with Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
            page_models, next_cursor = split_page(models, limit)
            return [self.to_domain(model) for model in page_models], next_cursor

    def _reload(self, order_id: OrderId) -> Order:
        updated = self.get(order_id)
        if updated is None:
            raise RuntimeError(f"order {order_id} not found after update")
        return updated

    def _to_model(self, order: Order) -> OrderModel:
        address = order.customer.address
        model = OrderModel(
            id=str(order.order_id),
            order_number=str(order.order_number),
            customer_name=order.customer.name,
            customer_email=order.customer.email,
            customer_phone=order.customer.phone,
            street=address.street,
            city=address.city,
            postal_code=address.postal_code,
            zone=address.zone,
            restaurant_id=str(order.restaurant.restaurant_id),
            restaurant_name=order.restaurant.name,
            total_cents=order.total_amount.amount_cents,
            delivery_fee_cents=order.delivery_fee.amount_cents,
            final_cents=order.final_amount.amount_cents,
            currency=order.currency,
            payment_method=order.payment_method.value,
            payment_status=order.payment_status.value,
            status=order.status.value,
            special_instructions=order.special_instructions,
            estimated_delivery_at=order.estimated_delivery_at,
            actual_delivery_at=order.actual_delivery_at,
            version=order.version,
            created_at=order.created_at,
            updated_at=order.updated_at or order.created_at,
        )
        model.items = [
            OrderItemModel(
                order_id=str(order.order_id),
                position=position,
                name=item.name,
                quantity=item.quantity,
                unit_price_cents=item.unit_price.amount_cents,
                currency=item.unit_price.currency,
                subtotal_cents=item.subtotal.amount_cents,
                note=item.note,
            )
            for position, item in enumerate(order.items)
        ]
        model.timeline = [
            OrderTimelineModel(
                order_id=str(order.order_id),
                sequence=entry.sequence,
                status=entry.status.value,
                occurred_at=entry.occurred_at,
                note=entry.note,
            )
            for entry in order.timeline
        ]
        if order.rating is not None:
            model.rating_score = order.rating.score
            model.rating_comment = order.rating.comment
            model.rated_at = order.rating.created_at
        return model

    @staticmethod
    def to_domain(model: OrderModel) -> Order:
        currency = model.currency
        rating = None
        if model.rating_score is not None:
            rating = OrderRating(
                score=model.rating_score,
                comment=model.rating_comment,
                created_at=as_utc(model.rated_at or model.updated_at),
            )
        return Order(
            order_id=OrderId(model.id),
            order_number=OrderNumber(model.order_number),
            customer=CustomerInfo(
                name=model.customer_name,
                email=model.customer_email,
                phone=model.customer_phone,
                address=DeliveryAddress(
                    street=model.street,
                    city=model.city,
                    postal_code=model.postal_code,
                    zone=model.zone,
                ),
            ),
            restaurant=RestaurantRef(
                restaurant_id=RestaurantId(model.restaurant_id),
                name=model.restaurant_name,
            ),
            items=[
                OrderItem(
                    name=item.name,
                    unit_price=Money(amount_cents=item.unit_price_cents, currency=item.currency),
                    quantity=item.quantity,
                    note=item.note,
                )
                for item in model.items
            ],
            total_amount=Money(amount_cents=model.total_cents, currency=currency),
            delivery_fee=Money(amount_cents=model.delivery_fee_cents, currency=currency),
            payment_method=PaymentMethod(model.payment_method),
            payment_status=PaymentStatus(model.payment_status),
            status=OrderStatus(model.status),
            timeline=[
                TimelineEntry(
                    sequence=entry.sequence,
                    status=OrderStatus(entry.status),
                    occurred_at=as_utc(entry.occurred_at),
                    note=entry.note,
                )
                for entry in model.timeline
            ],
            estimated_delivery_at=as_utc(model.estimated_delivery_at),
            actual_delivery_at=(
                as_utc(model.actual_delivery_at) if model.actual_delivery_at is not None else None
            ),
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
            special_instructions=model.special_instructions,
            rating=rating,
            version=model.version,
        )
