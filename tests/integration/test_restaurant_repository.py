from __future__ import annotations

import concurrent.futures
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from tikaz.application.ports.repositories import RestaurantFilter
from tikaz.domain.common.ids import RestaurantId
from tikaz.infrastructure.db.repositories.restaurant_repo import SqlAlchemyRestaurantRepository

RATERS = 12


def test_seeded_restaurant_round_trips() -> None:
    restaurant = SqlAlchemyRestaurantRepository().get(RestaurantId("rst_001"))

    assert restaurant is not None
    assert restaurant.name == "Chez Tante Marie"
    assert restaurant.delivery_zones == ["Nord", "Saint-Denis", "Sainte-Marie"]
    assert restaurant.delivery_fee.amount_cents == 350
    assert restaurant.minimum_order.amount_cents == 1500
    assert restaurant.rating.count == 156
    assert restaurant.rating.average == 4.8
    assert restaurant.operating_hours["friday"].close == "23:00"
    assert [item.item_id for item in restaurant.menu][:2] == ["itm_001_01", "itm_001_02"]
    assert restaurant.menu[2].is_vegan


def test_closed_day_survives_storage() -> None:
    restaurant = SqlAlchemyRestaurantRepository().get(RestaurantId("rst_002"))
    assert restaurant.operating_hours["monday"].closed
    assert not restaurant.operating_hours["tuesday"].closed


def test_list_page_orders_featured_then_rating() -> None:
    restaurants, total = SqlAlchemyRestaurantRepository().list_page(RestaurantFilter(), offset=0, limit=10)

    assert total == 5
    assert [str(restaurant.restaurant_id) for restaurant in restaurants] == [
        "rst_001",
        "rst_004",
        "rst_002",
        "rst_005",
        "rst_003",
    ]


def test_list_page_filters() -> None:
    repository = SqlAlchemyRestaurantRepository()

    by_zone, total = repository.list_page(RestaurantFilter(zone="Ouest"), offset=0, limit=10)
    assert total == 2
    assert {str(restaurant.restaurant_id) for restaurant in by_zone} == {"rst_002", "rst_004"}

    by_cuisine, _ = repository.list_page(RestaurantFilter(cuisine="ital"), offset=0, limit=10)
    assert [restaurant.name for restaurant in by_cuisine] == ["Pizza Corner 974"]

    by_tag, _ = repository.list_page(RestaurantFilter(search="sushi"), offset=0, limit=10)
    assert [restaurant.name for restaurant in by_tag] == ["Sushi Zen"]

    cheap, _ = repository.list_page(RestaurantFilter(max_delivery_fee_cents=350), offset=0, limit=10)
    assert {str(restaurant.restaurant_id) for restaurant in cheap} == {"rst_001", "rst_003"}

    top_rated, _ = repository.list_page(RestaurantFilter(min_rating=4.75), offset=0, limit=10)
    assert {str(restaurant.restaurant_id) for restaurant in top_rated} == {"rst_001", "rst_005"}

    not_featured, _ = repository.list_page(
        RestaurantFilter(featured=False),
        offset=0,
        limit=10,
        order_by_name=True,
    )
    assert [restaurant.name for restaurant in not_featured] == ["Le Glacier des Hauts", "Pizza Corner 974"]


def test_list_page_offset_keeps_total() -> None:
    restaurants, total = SqlAlchemyRestaurantRepository().list_page(RestaurantFilter(), offset=4, limit=2)
    assert total == 5
    assert len(restaurants) == 1


def test_distinct_zones_and_cuisines_are_sorted() -> None:
    repository = SqlAlchemyRestaurantRepository()
    zones = repository.distinct_zones()
    assert zones == sorted(zones)
    assert "Saint-Gilles" in zones
    assert len(zones) == len(set(zones))
    assert repository.distinct_cuisines() == sorted(
        ["Créole", "Gastronomique", "Italien", "Japonais", "Desserts"]
    )


def test_record_rating_unknown_restaurant_returns_none() -> None:
    assert SqlAlchemyRestaurantRepository().record_rating(RestaurantId("rst_missing"), 5) is None


def test_concurrent_ratings_are_all_counted() -> None:
    repository = SqlAlchemyRestaurantRepository()
    before = repository.get(RestaurantId("rst_003")).rating
    scores = [(index % 5) + 1 for index in range(RATERS)]

    with concurrent.futures.ThreadPoolExecutor(max_workers=6) as executor:
        list(executor.map(lambda score: repository.record_rating(RestaurantId("rst_003"), score), scores))

    after = repository.get(RestaurantId("rst_003")).rating
    assert after.count == before.count + RATERS
    assert round(after.score_total - before.score_total, 6) == sum(scores)
