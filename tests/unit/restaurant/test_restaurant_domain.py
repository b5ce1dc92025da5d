from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from tikaz.domain.common.ids import MenuItemId, RestaurantId
from tikaz.domain.common.money import Money
from tikaz.domain.restaurant.entities import (
    MenuItem,
    OpeningHours,
    Restaurant,
    RestaurantAddress,
    RestaurantContact,
    RestaurantRating,
)


def _restaurant(**overrides) -> Restaurant:
    values = dict(
        restaurant_id=RestaurantId("rst_001"),
        name="Chez Tante Marie",
        description="Cuisine créole",
        cuisine="Créole",
        image_url="https://example.re/marie.jpg",
        address=RestaurantAddress(
            street="15 Rue de la République",
            city="Saint-Denis",
            postal_code="97400",
            zone="Nord",
        ),
        contact=RestaurantContact(phone="+262262123456", email="contact@cheztantemarie.re"),
        delivery_zones=["Nord", "Saint-Denis"],
        delivery_fee=Money(350, "EUR"),
        minimum_order=Money(1500, "EUR"),
    )
    values.update(overrides)
    return Restaurant(**values)


def _item(item_id: str, category: str, available: bool = True) -> MenuItem:
    return MenuItem(
        item_id=MenuItemId(item_id),
        category=category,
        name=f"Item {item_id}",
        price=Money(900, "EUR"),
        is_available=available,
    )


def test_rating_moves_from_four_over_ten_to_four_point_one_over_eleven() -> None:
    rating = RestaurantRating.from_average(4.0, 10)
    updated = rating.record(5)

    assert updated.count == 11
    assert updated.average == 4.1


def test_rating_average_of_empty_rating_is_zero() -> None:
    assert RestaurantRating().average == 0.0


def test_rating_is_exact_mean_of_recorded_scores() -> None:
    rating = RestaurantRating()
    scores = [5, 4, 3, 5, 5, 2, 4]
    for score in scores:
        rating = rating.record(score)

    assert rating.count == len(scores)
    assert rating.score_total == sum(scores)
    assert rating.average == 4.0


def test_restaurant_record_rating_returns_updated_copy() -> None:
    restaurant = _restaurant(rating=RestaurantRating.from_average(4.8, 156))
    updated = restaurant.record_rating(1)

    assert restaurant.rating.count == 156
    assert updated.rating.count == 157


def test_delivers_to_checks_zone_membership() -> None:
    restaurant = _restaurant()
    assert restaurant.delivers_to("Nord")
    assert not restaurant.delivers_to("Sud")


def test_fee_and_minimum_must_share_currency() -> None:
    with pytest.raises(ValueError):
        _restaurant(minimum_order=Money(1500, "USD"))


def test_operating_hours_only_accept_weekdays() -> None:
    with pytest.raises(ValueError):
        _restaurant(operating_hours={"someday": OpeningHours(open="11:00", close="22:00")})


def test_is_open_uses_weekday_hours() -> None:
    restaurant = _restaurant(
        operating_hours={
            "monday": OpeningHours(open="", close="", closed=True),
            "tuesday": OpeningHours(open="18:00", close="23:00"),
        }
    )

    assert restaurant.is_open(datetime(2026, 10, 6, 19, 0))
    assert not restaurant.is_open(datetime(2026, 10, 6, 12, 0))
    assert not restaurant.is_open(datetime(2026, 10, 5, 19, 0))
    assert not restaurant.is_open(datetime(2026, 10, 7, 19, 0))


def test_available_menu_groups_available_items_by_category() -> None:
    restaurant = _restaurant(
        menu=[
            _item("itm_1", "Plats Principaux"),
            _item("itm_2", "Entrées"),
            _item("itm_3", "Plats Principaux", available=False),
            _item("itm_4", "Plats Principaux"),
        ]
    )

    grouped = restaurant.available_menu()
    assert list(grouped) == ["Plats Principaux", "Entrées"]
    assert [str(item.item_id) for item in grouped["Plats Principaux"]] == ["itm_1", "itm_4"]

    filtered = restaurant.available_menu("entr")
    assert list(filtered) == ["Entrées"]
