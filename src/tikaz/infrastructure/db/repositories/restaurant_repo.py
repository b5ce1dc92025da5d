from __future__ import annotations

from sqlalchemy import Engine, String, cast, exists, func, or_, select, update
from sqlalchemy.orm import Session, selectinload

from tikaz.application.ports.repositories import RestaurantFilter, RestaurantRepository
from tikaz.domain.common.ids import MenuItemId, RestaurantId
from tikaz.domain.common.money import Money
from tikaz.domain.restaurant.entities import (
    MenuItem,
    OpeningHours,
    Restaurant,
    RestaurantAddress,
    RestaurantContact,
    RestaurantRating,
    RestaurantStatus,
)
from tikaz.infrastructure.db.models.restaurant import (
    MenuItemModel,
    RestaurantDeliveryZoneModel,
    RestaurantModel,
)
from tikaz.infrastructure.db.session import get_engine

_AVERAGE_RATING = func.coalesce(
    RestaurantModel.rating_total / func.nullif(RestaurantModel.rating_count, 0),
    0.0,
)


def rating_increment(restaurant_id: RestaurantId, score: int):
    # Atomic increment; the average is derived from the pair on read.
    return (
        update(RestaurantModel)
        .where(RestaurantModel.id == str(restaurant_id))
        .values(
            rating_total=RestaurantModel.rating_total + score,
            rating_count=RestaurantModel.rating_count + 1,
        )
    )


def _filtered(statement, restaurant_filter: RestaurantFilter):
    if restaurant_filter.status is not None:
        statement = statement.where(RestaurantModel.status == restaurant_filter.status.value)
    if restaurant_filter.zone:
        statement = statement.where(
            exists().where(
                RestaurantDeliveryZoneModel.restaurant_id == RestaurantModel.id,
                RestaurantDeliveryZoneModel.zone == restaurant_filter.zone,
            )
        )
    if restaurant_filter.cuisine:
        statement = statement.where(RestaurantModel.cuisine.ilike(f"%{restaurant_filter.cuisine}%"))
    if restaurant_filter.featured is not None:
        statement = statement.where(RestaurantModel.featured.is_(restaurant_filter.featured))
    if restaurant_filter.search:
        pattern = f"%{restaurant_filter.search}%"
        statement = statement.where(
            or_(
                RestaurantModel.name.ilike(pattern),
                RestaurantModel.description.ilike(pattern),
                cast(RestaurantModel.tags, String).ilike(pattern),
            )
        )
    if restaurant_filter.min_rating is not None:
        statement = statement.where(_AVERAGE_RATING >= restaurant_filter.min_rating)
    if restaurant_filter.max_delivery_fee_cents is not None:
        statement = statement.where(
            RestaurantModel.delivery_fee_cents <= restaurant_filter.max_delivery_fee_cents
        )
    return statement


class SqlAlchemyRestaurantRepository(RestaurantRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def add(self, restaurant: Restaurant) -> None:
        with Session(self._engine) as session:
            session.merge(self._to_model(restaurant))
            session.commit()

    def get(self, restaurant_id: RestaurantId) -> Restaurant | None:
        statement = (
            select(RestaurantModel)
            .options(
                selectinload(RestaurantModel.delivery_zones),
                selectinload(RestaurantModel.menu_items),
            )
            .where(RestaurantModel.id == str(restaurant_id))
            .limit(1)
        )
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
            if model is None:
                return None
            return self._to_domain(model)

    def get_active(self, restaurant_id: RestaurantId) -> Restaurant | None:
        restaurant = self.get(restaurant_id)
        if restaurant is None or not restaurant.is_active:
            return None
        return restaurant

    def record_rating(self, restaurant_id: RestaurantId, score: int) -> Restaurant | None:
        with Session(self._engine) as session:
            result = session.execute(rating_increment(restaurant_id, score))
            if result.rowcount != 1:
                session.rollback()
                return None
            session.commit()
        return self.get(restaurant_id)

    def list_page(
        self,
        restaurant_filter: RestaurantFilter,
        offset: int,
        limit: int,
        order_by_name: bool = False,
    ) -> tuple[list[Restaurant], int]:
        count_statement = _filtered(select(func.count(RestaurantModel.id)), restaurant_filter)
        statement = _filtered(
            select(RestaurantModel).options(
                selectinload(RestaurantModel.delivery_zones),
                selectinload(RestaurantModel.menu_items),
            ),
            restaurant_filter,
        )
        if order_by_name:
            statement = statement.order_by(RestaurantModel.name.asc(), RestaurantModel.id.asc())
        else:
            statement = statement.order_by(
                RestaurantModel.featured.desc(),
                _AVERAGE_RATING.desc(),
                RestaurantModel.name.asc(),
            )
        statement = statement.offset(offset).limit(limit)

        with Session(self._engine) as session:
            total = int(session.execute(count_statement).scalar_one())
            models = list(session.execute(statement).scalars().all())
            return [self._to_domain(model) for model in models], total

    def distinct_zones(self) -> list[str]:
        statement = (
            select(RestaurantDeliveryZoneModel.zone)
            .join(RestaurantModel, RestaurantModel.id == RestaurantDeliveryZoneModel.restaurant_id)
            .where(RestaurantModel.status == RestaurantStatus.ACTIVE.value)
            .distinct()
            .order_by(RestaurantDeliveryZoneModel.zone)
        )
        with Session(self._engine) as session:
            return list(session.execute(statement).scalars().all())

    def distinct_cuisines(self) -> list[str]:
        statement = (
            select(RestaurantModel.cuisine)
            .where(RestaurantModel.status == RestaurantStatus.ACTIVE.value)
            .distinct()
            .order_by(RestaurantModel.cuisine)
        )
        with Session(self._engine) as session:
            return list(session.execute(statement).scalars().all())

    def _to_model(self, restaurant: Restaurant) -> RestaurantModel:
        model = RestaurantModel(
            id=str(restaurant.restaurant_id),
            name=restaurant.name,
            description=restaurant.description,
            cuisine=restaurant.cuisine,
            image_url=restaurant.image_url,
            street=restaurant.address.street,
            city=restaurant.address.city,
            postal_code=restaurant.address.postal_code,
            zone=restaurant.address.zone,
            phone=restaurant.contact.phone,
            email=restaurant.contact.email,
            website=restaurant.contact.website,
            delivery_fee_cents=restaurant.delivery_fee.amount_cents,
            minimum_order_cents=restaurant.minimum_order.amount_cents,
            currency=restaurant.currency,
            status=restaurant.status.value,
            featured=restaurant.featured,
            tags=list(restaurant.tags),
            operating_hours={
                day: {"open": hours.open, "close": hours.close, "closed": hours.closed}
                for day, hours in restaurant.operating_hours.items()
            },
            rating_total=restaurant.rating.score_total,
            rating_count=restaurant.rating.count,
        )
        model.delivery_zones = [
            RestaurantDeliveryZoneModel(
                restaurant_id=str(restaurant.restaurant_id),
                zone=zone,
                position=position,
            )
            for position, zone in enumerate(dict.fromkeys(restaurant.delivery_zones))
        ]
        model.menu_items = [
            MenuItemModel(
                id=str(item.item_id),
                restaurant_id=str(restaurant.restaurant_id),
                position=position,
                category=item.category,
                name=item.name,
                description=item.description,
                price_cents=item.price.amount_cents,
                currency=item.price.currency,
                image_url=item.image_url,
                is_available=item.is_available,
                is_spicy=item.is_spicy,
                is_vegetarian=item.is_vegetarian,
                is_vegan=item.is_vegan,
                allergens=list(item.allergens),
            )
            for position, item in enumerate(restaurant.menu)
        ]
        return model

    def _to_domain(self, model: RestaurantModel) -> Restaurant:
        currency = model.currency
        return Restaurant(
            restaurant_id=RestaurantId(model.id),
            name=model.name,
            description=model.description,
            cuisine=model.cuisine,
            image_url=model.image_url,
            address=RestaurantAddress(
                street=model.street,
                city=model.city,
                postal_code=model.postal_code,
                zone=model.zone,
            ),
            contact=RestaurantContact(
                phone=model.phone,
                email=model.email,
                website=model.website,
            ),
            delivery_zones=[zone.zone for zone in model.delivery_zones],
            delivery_fee=Money(amount_cents=model.delivery_fee_cents, currency=currency),
            minimum_order=Money(amount_cents=model.minimum_order_cents, currency=currency),
            status=RestaurantStatus(model.status),
            rating=RestaurantRating(
                score_total=float(model.rating_total),
                count=model.rating_count,
            ),
            operating_hours={
                day: OpeningHours(
                    open=hours.get("open", ""),
                    close=hours.get("close", ""),
                    closed=bool(hours.get("closed", False)),
                )
                for day, hours in (model.operating_hours or {}).items()
            },
            featured=model.featured,
            tags=list(model.tags or []),
            menu=[
                MenuItem(
                    item_id=MenuItemId(item.id),
                    category=item.category,
                    name=item.name,
                    price=Money(amount_cents=item.price_cents, currency=item.currency),
                    description=item.description,
                    image_url=item.image_url,
                    is_available=item.is_available,
                    is_spicy=item.is_spicy,
                    is_vegetarian=item.is_vegetarian,
                    is_vegan=item.is_vegan,
                    allergens=list(item.allergens or []),
                )
                for item in model.menu_items
            ],
        )
