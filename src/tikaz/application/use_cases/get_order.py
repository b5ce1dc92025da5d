from __future__ import annotations

from tikaz.application.dto.responses import OrderListResponse, OrderResponse
from tikaz.application.mappers.order_mapper import to_order_response
from tikaz.application.ports.repositories import InvalidCursorError, OrderRepository


class OrderNotFoundError(Exception):
    pass


class InvalidOrderListCursorError(Exception):
    pass


class InvalidOrderListLimitError(Exception):
    pass


class GetOrder:
    """Resolve an order by its human-readable number, falling back to its id."""

    def __init__(self, order_repository: OrderRepository) -> None:
        self._order_repository = order_repository

    def execute(self, identifier: str) -> OrderResponse:
        order = self._order_repository.find_by_identifier(identifier)
        if order is None:
            raise OrderNotFoundError(f"order {identifier} not found")
        return to_order_response(order)


class ListCustomerOrders:
    def __init__(self, order_repository: OrderRepository) -> None:
        self._order_repository = order_repository

    def execute(
        self,
        contact: str,
        limit: int = 50,
        cursor: str | None = None,
    ) -> OrderListResponse:
        if limit < 1 or limit > 200:
            raise InvalidOrderListLimitError("limit must be between 1 and 200")

        normalized = contact.strip()
        if "@" in normalized:
            normalized = normalized.lower()

        try:
            orders, next_cursor = self._order_repository.list_for_customer(
                contact=normalized,
                limit=limit,
                cursor=cursor,
            )
        except InvalidCursorError as exc:
            raise InvalidOrderListCursorError("invalid cursor") from exc

        return OrderListResponse(
            orders=[to_order_response(order) for order in orders],
            nextCursor=next_cursor,
        )
