from __future__ import annotations

from fastapi import APIRouter, Query

from tikaz.application.dto.requests import SearchRestaurantsRequest
from tikaz.application.dto.responses import (
    CuisineListResponse,
    MenuResponse,
    RestaurantListResponse,
    RestaurantResponse,
    RestaurantSearchResponse,
    ZoneListResponse,
)
from tikaz.application.use_cases.restaurant_catalog import (
    GetRestaurant,
    GetRestaurantMenu,
    ListCuisines,
    ListDeliveryZones,
    ListRestaurants,
    SearchRestaurants,
)
from tikaz.domain.common.ids import RestaurantId
from tikaz.infrastructure.config.local_time import restaurant_utc_offset_hours
from tikaz.infrastructure.db.repositories.restaurant_repo import SqlAlchemyRestaurantRepository

router = APIRouter(prefix="/api/restaurants", tags=["restaurants"])


@router.get("", response_model=RestaurantListResponse)
def list_restaurants(
    zone: str | None = Query(default=None),
    cuisine: str | None = Query(default=None),
    featured: bool | None = Query(default=None),
    search: str | None = Query(default=None),
    page: int = Query(default=1),
    limit: int = Query(default=20),
) -> RestaurantListResponse:
    return ListRestaurants(SqlAlchemyRestaurantRepository()).execute(
        zone=zone,
        cuisine=cuisine,
        featured=featured,
        search=search,
        page=page,
        limit=limit,
    )


@router.get("/delivery/zones", response_model=ZoneListResponse)
def delivery_zones() -> ZoneListResponse:
    return ListDeliveryZones(SqlAlchemyRestaurantRepository()).execute()


@router.get("/cuisines/list", response_model=CuisineListResponse)
def cuisines() -> CuisineListResponse:
    return ListCuisines(SqlAlchemyRestaurantRepository()).execute()


@router.post("/search", response_model=RestaurantSearchResponse)
def search_restaurants(request_dto: SearchRestaurantsRequest) -> RestaurantSearchResponse:
    return SearchRestaurants(SqlAlchemyRestaurantRepository()).execute(request_dto)


@router.get("/{restaurant_id}", response_model=RestaurantResponse)
def get_restaurant(restaurant_id: str) -> RestaurantResponse:
    use_case = GetRestaurant(
        SqlAlchemyRestaurantRepository(),
        utc_offset_hours=restaurant_utc_offset_hours(),
    )
    return use_case.execute(RestaurantId(restaurant_id))


@router.get("/{restaurant_id}/menu", response_model=MenuResponse)
def get_restaurant_menu(
    restaurant_id: str,
    category: str | None = Query(default=None),
) -> MenuResponse:
    return GetRestaurantMenu(SqlAlchemyRestaurantRepository()).execute(
        RestaurantId(restaurant_id),
        category=category,
    )
