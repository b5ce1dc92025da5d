from __future__ import annotations

from typing import NewType

RestaurantId = NewType("RestaurantId", str)
MenuItemId = NewType("MenuItemId", str)
OrderId = NewType("OrderId", str)
OrderNumber = NewType("OrderNumber", str)
ContactId = NewType("ContactId", str)
