from __future__ import annotations

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

PHONE_PATTERN = r"^\+?[\d\s\-()]{8,15}$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


def _to_camel(value: str) -> str:
    parts = value.split("_")
    return parts[0] + "".join(part.capitalize() for part in parts[1:])


class CamelBaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class DeliveryAddressRequest(CamelBaseModel):
    street: str = Field(min_length=5, max_length=200)
    city: str = Field(min_length=2, max_length=50)
    postal_code: str = Field(min_length=5, max_length=10)
    zone: str = Field(min_length=2, max_length=50)


class CustomerRequest(CamelBaseModel):
    name: str = Field(min_length=2, max_length=100)
    email: str = Field(pattern=EMAIL_PATTERN, max_length=254)
    phone: str = Field(pattern=PHONE_PATTERN)
    address: DeliveryAddressRequest


class RestaurantRefRequest(CamelBaseModel):
    id: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=2, max_length=100)


class OrderItemRequest(CamelBaseModel):
    name: str = Field(min_length=2, max_length=100)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    quantity: int = Field(ge=1)
    note: str | None = Field(default=None, max_length=500)


class PlaceOrderRequest(CamelBaseModel):
    customer: CustomerRequest
    restaurant: RestaurantRefRequest
    items: list[OrderItemRequest] = Field(min_length=1)
    total_amount: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    payment_method: Literal["cash", "card", "mobile_money", "bank_transfer"]
    special_instructions: str | None = Field(default=None, max_length=1000)


class UpdateOrderStatusRequest(CamelBaseModel):
    status: str
    note: str | None = Field(default=None, max_length=500)


class RateOrderRequest(CamelBaseModel):
    score: int
    comment: str | None = Field(default=None, max_length=1000)


class RestaurantSearchFilters(CamelBaseModel):
    zone: str | None = None
    cuisine: str | None = None
    min_rating: float | None = Field(default=None, ge=0, le=5)
    max_delivery_fee: Decimal | None = Field(default=None, ge=0)


class SearchRestaurantsRequest(CamelBaseModel):
    query: str | None = Field(default=None, max_length=100)
    filters: RestaurantSearchFilters = Field(default_factory=RestaurantSearchFilters)


class SubmitContactRequest(CamelBaseModel):
    name: str = Field(min_length=2, max_length=100)
    email: str = Field(pattern=EMAIL_PATTERN, max_length=254)
    phone: str | None = Field(default=None, pattern=PHONE_PATTERN)
    subject: str = Field(min_length=5, max_length=200)
    message: str = Field(min_length=10, max_length=2000)
    type: Literal["general", "complaint", "suggestion", "partnership", "technical"] | None = None


class UpdateContactStatusRequest(CamelBaseModel):
    status: str
    assigned_to: str | None = Field(default=None, max_length=100)


class RespondContactRequest(CamelBaseModel):
    message: str | None = Field(default=None, max_length=5000)
    responded_by: str | None = Field(default=None, max_length=100)
