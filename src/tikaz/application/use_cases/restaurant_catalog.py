from __future__ import annotations

from datetime import datetime, timedelta, timezone

from tikaz.application.dto.requests import SearchRestaurantsRequest
from tikaz.application.dto.responses import (
    CuisineListResponse,
    MenuResponse,
    PaginationResponse,
    RestaurantListResponse,
    RestaurantResponse,
    RestaurantSearchResponse,
    ZoneListResponse,
)
from tikaz.application.mappers.restaurant_mapper import to_menu_response, to_restaurant_response
from tikaz.application.ports.repositories import RestaurantFilter, RestaurantRepository
from tikaz.domain.common.ids import RestaurantId
from tikaz.domain.common.money import DEFAULT_CURRENCY, Money

SEARCH_RESULT_LIMIT = 50
MAX_PAGE_SIZE = 100


class RestaurantNotFoundError(Exception):
    pass


class InvalidPaginationError(Exception):
    pass


def validate_page(page: int, limit: int) -> None:
    if page < 1:
        raise InvalidPaginationError("page must be >= 1")
    if limit < 1 or limit > MAX_PAGE_SIZE:
        raise InvalidPaginationError(f"limit must be between 1 and {MAX_PAGE_SIZE}")


def build_pagination(page: int, limit: int, total: int) -> PaginationResponse:
    total_pages = (total + limit - 1) // limit
    return PaginationResponse(
        currentPage=page,
        totalPages=total_pages,
        totalResults=total,
        hasNextPage=page < total_pages,
        hasPreviousPage=page > 1,
    )


class ListRestaurants:
    def __init__(self, restaurant_repository: RestaurantRepository) -> None:
        self._restaurant_repository = restaurant_repository

    def execute(
        self,
        *,
        zone: str | None = None,
        cuisine: str | None = None,
        featured: bool | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> RestaurantListResponse:
        validate_page(page, limit)
        restaurants, total = self._restaurant_repository.list_page(
            RestaurantFilter(zone=zone, cuisine=cuisine, featured=featured, search=search),
            offset=(page - 1) * limit,
            limit=limit,
        )
        return RestaurantListResponse(
            restaurants=[to_restaurant_response(restaurant) for restaurant in restaurants],
            pagination=build_pagination(page, limit, total),
        )


class GetRestaurant:
    """Fetch one restaurant and report whether it is open right now.

    Opening hours are stored as local wall-clock times, so the current time is
    shifted by a fixed UTC offset before it is compared with them.
    """

    def __init__(self, restaurant_repository: RestaurantRepository, utc_offset_hours: float) -> None:
        self._restaurant_repository = restaurant_repository
        self._utc_offset = timedelta(hours=utc_offset_hours)

    def execute(self, restaurant_id: RestaurantId, now: datetime | None = None) -> RestaurantResponse:
        restaurant = self._restaurant_repository.get(restaurant_id)
        if restaurant is None:
            raise RestaurantNotFoundError(f"restaurant {restaurant_id} not found")

        current = now or datetime.now(timezone.utc)
        local_now = current.astimezone(timezone(self._utc_offset))
        return to_restaurant_response(restaurant, is_currently_open=restaurant.is_open(local_now))


class GetRestaurantMenu:
    def __init__(self, restaurant_repository: RestaurantRepository) -> None:
        self._restaurant_repository = restaurant_repository

    def execute(self, restaurant_id: RestaurantId, category: str | None = None) -> MenuResponse:
        restaurant = self._restaurant_repository.get(restaurant_id)
        if restaurant is None:
            raise RestaurantNotFoundError(f"restaurant {restaurant_id} not found")
        return to_menu_response(restaurant, category=category)


class ListDeliveryZones:
    def __init__(self, restaurant_repository: RestaurantRepository) -> None:
        self._restaurant_repository = restaurant_repository

    def execute(self) -> ZoneListResponse:
        return ZoneListResponse(zones=sorted(self._restaurant_repository.distinct_zones()))


class ListCuisines:
    def __init__(self, restaurant_repository: RestaurantRepository) -> None:
        self._restaurant_repository = restaurant_repository

    def execute(self) -> CuisineListResponse:
        return CuisineListResponse(cuisines=sorted(self._restaurant_repository.distinct_cuisines()))


class SearchRestaurants:
    def __init__(self, restaurant_repository: RestaurantRepository) -> None:
        self._restaurant_repository = restaurant_repository

    def execute(self, request_dto: SearchRestaurantsRequest) -> RestaurantSearchResponse:
        filters = request_dto.filters
        max_fee_cents = None
        if filters.max_delivery_fee is not None:
            max_fee_cents = Money.from_decimal(filters.max_delivery_fee, DEFAULT_CURRENCY).amount_cents

        restaurants, _ = self._restaurant_repository.list_page(
            RestaurantFilter(
                zone=filters.zone,
                cuisine=filters.cuisine,
                search=request_dto.query or None,
                min_rating=filters.min_rating,
                max_delivery_fee_cents=max_fee_cents,
            ),
            offset=0,
            limit=SEARCH_RESULT_LIMIT,
        )
        return RestaurantSearchResponse(
            restaurants=[to_restaurant_response(restaurant) for restaurant in restaurants],
            count=len(restaurants),
        )
