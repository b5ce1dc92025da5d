from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from tikaz.domain.common.ids import MenuItemId, RestaurantId
from tikaz.domain.common.money import Money

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class RestaurantStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    TEMPORARILY_CLOSED = "temporarily_closed"


@dataclass(frozen=True)
class RestaurantAddress:
    street: str
    city: str
    postal_code: str
    zone: str


@dataclass(frozen=True)
class RestaurantContact:
    phone: str
    email: str
    website: str | None = None


@dataclass(frozen=True)
class OpeningHours:
    open: str
    close: str
    closed: bool = False

    def is_open_at(self, hhmm: str) -> bool:
        if self.closed or not self.open or not self.close:
            return False
        return self.open <= hhmm <= self.close


@dataclass(frozen=True)
class RestaurantRating:
    """Running rating kept as a score total and a count.

    The average is derived, so it is always the mean of exactly ``count``
    scores no matter how many raters update the pair concurrently.
    """

    score_total: float = 0.0
    count: int = 0

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ValueError("rating count must be >= 0")
        if self.score_total < 0:
            raise ValueError("rating score_total must be >= 0")

    @classmethod
    def from_average(cls, average: float, count: int) -> RestaurantRating:
        return cls(score_total=average * count, count=count)

    @property
    def average(self) -> float:
        if self.count == 0:
            return 0.0
        mean = Decimal(repr(self.score_total / self.count))
        return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))

    def record(self, score: int) -> RestaurantRating:
        return RestaurantRating(score_total=self.score_total + score, count=self.count + 1)


@dataclass(frozen=True)
class MenuItem:
    item_id: MenuItemId
    category: str
    name: str
    price: Money
    description: str | None = None
    image_url: str | None = None
    is_available: bool = True
    is_spicy: bool = False
    is_vegetarian: bool = False
    is_vegan: bool = False
    allergens: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("name must be non-empty")
        if not self.category.strip():
            raise ValueError("category must be non-empty")


@dataclass(frozen=True)
class Restaurant:
    restaurant_id: RestaurantId
    name: str
    description: str
    cuisine: str
    image_url: str
    address: RestaurantAddress
    contact: RestaurantContact
    delivery_zones: list[str]
    delivery_fee: Money
    minimum_order: Money
    status: RestaurantStatus = RestaurantStatus.ACTIVE
    rating: RestaurantRating = field(default_factory=RestaurantRating)
    operating_hours: dict[str, OpeningHours] = field(default_factory=dict)
    featured: bool = False
    tags: list[str] = field(default_factory=list)
    menu: list[MenuItem] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("name must be non-empty")
        if self.delivery_fee.currency != self.minimum_order.currency:
            raise ValueError("delivery fee and minimum order must share a currency")
        unknown_days = set(self.operating_hours) - set(WEEKDAYS)
        if unknown_days:
            raise ValueError(f"unknown weekdays in operating hours: {sorted(unknown_days)}")

    @property
    def currency(self) -> str:
        return self.delivery_fee.currency

    @property
    def is_active(self) -> bool:
        return self.status == RestaurantStatus.ACTIVE

    def delivers_to(self, zone: str) -> bool:
        return zone in self.delivery_zones

    def is_open(self, local_now: datetime) -> bool:
        hours = self.operating_hours.get(WEEKDAYS[local_now.weekday()])
        if hours is None:
            return False
        return hours.is_open_at(local_now.strftime("%H:%M"))

    def record_rating(self, score: int) -> Restaurant:
        return replace(self, rating=self.rating.record(score))

    def available_menu(self, category: str | None = None) -> dict[str, list[MenuItem]]:
        """Group available items by category, optionally keeping only matching categories."""
        needle = category.lower() if category else None
        grouped: dict[str, list[MenuItem]] = {}
        for item in self.menu:
            if not item.is_available:
                continue
            if needle is not None and needle not in item.category.lower():
                continue
            grouped.setdefault(item.category, []).append(item)
        return grouped
