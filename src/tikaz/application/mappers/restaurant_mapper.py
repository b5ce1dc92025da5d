from __future__ import annotations

from tikaz.application.dto.responses import (
    AddressResponse,
    MenuCategoryResponse,
    MenuItemResponse,
    MenuResponse,
    OpeningHoursResponse,
    RestaurantContactResponse,
    RestaurantRatingResponse,
    RestaurantResponse,
)
from tikaz.application.mappers.order_mapper import to_money_response
from tikaz.domain.restaurant.entities import MenuItem, Restaurant


def to_restaurant_response(
    restaurant: Restaurant,
    is_currently_open: bool | None = None,
) -> RestaurantResponse:
    return RestaurantResponse(
        restaurantId=str(restaurant.restaurant_id),
        name=restaurant.name,
        description=restaurant.description,
        cuisine=restaurant.cuisine,
        imageUrl=restaurant.image_url,
        address=AddressResponse(
            street=restaurant.address.street,
            city=restaurant.address.city,
            postalCode=restaurant.address.postal_code,
            zone=restaurant.address.zone,
        ),
        contact=RestaurantContactResponse(
            phone=restaurant.contact.phone,
            email=restaurant.contact.email,
            website=restaurant.contact.website,
        ),
        operatingHours={
            day: OpeningHoursResponse(open=hours.open, close=hours.close, closed=hours.closed)
            for day, hours in restaurant.operating_hours.items()
        },
        deliveryZones=list(restaurant.delivery_zones),
        deliveryFee=to_money_response(restaurant.delivery_fee),
        minimumOrder=to_money_response(restaurant.minimum_order),
        rating=RestaurantRatingResponse(
            average=restaurant.rating.average,
            count=restaurant.rating.count,
        ),
        status=restaurant.status.value,
        featured=restaurant.featured,
        tags=list(restaurant.tags),
        isCurrentlyOpen=is_currently_open,
    )


def to_menu_item_response(item: MenuItem) -> MenuItemResponse:
    return MenuItemResponse(
        itemId=str(item.item_id),
        name=item.name,
        description=item.description,
        price=to_money_response(item.price),
        imageUrl=item.image_url,
        isAvailable=item.is_available,
        spicy=item.is_spicy,
        vegetarian=item.is_vegetarian,
        vegan=item.is_vegan,
        allergens=list(item.allergens),
    )


def to_menu_response(restaurant: Restaurant, category: str | None = None) -> MenuResponse:
    grouped = restaurant.available_menu(category)
    return MenuResponse(
        restaurantId=str(restaurant.restaurant_id),
        restaurantName=restaurant.name,
        menu=[
            MenuCategoryResponse(
                category=name,
                items=[to_menu_item_response(item) for item in items],
            )
            for name, items in grouped.items()
        ],
    )
