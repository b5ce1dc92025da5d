from __future__ import annotations

from fastapi import APIRouter, Query, status

from tikaz.api.middleware.request_id import get_request_id
from tikaz.application.dto.requests import (
    PlaceOrderRequest,
    RateOrderRequest,
    UpdateOrderStatusRequest,
)
from tikaz.application.dto.responses import OrderListResponse, OrderResponse
from tikaz.application.use_cases.context import TraceContext
from tikaz.application.use_cases.get_order import GetOrder, ListCustomerOrders
from tikaz.application.use_cases.place_order import PlaceOrder
from tikaz.application.use_cases.rate_order import RateOrder
from tikaz.application.use_cases.transition_order import TransitionOrder
from tikaz.domain.common.ids import OrderId
from tikaz.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from tikaz.infrastructure.db.repositories.restaurant_repo import SqlAlchemyRestaurantRepository
from tikaz.infrastructure.email.smtp_notifier import SmtpNotifier
from tikaz.infrastructure.messaging.redis_publisher import RedisEventPublisher
from tikaz.infrastructure.observability.otel import current_trace_id

router = APIRouter(prefix="/api/orders", tags=["orders"])


def _trace_ctx() -> TraceContext:
    return TraceContext(trace_id=current_trace_id(), request_id=get_request_id())


def _place_order_use_case() -> PlaceOrder:
    return PlaceOrder(
        restaurant_repository=SqlAlchemyRestaurantRepository(),
        order_repository=SqlAlchemyOrderRepository(),
        publisher=RedisEventPublisher(),
        notifier=SmtpNotifier(),
    )


def _transition_order_use_case() -> TransitionOrder:
    return TransitionOrder(
        order_repository=SqlAlchemyOrderRepository(),
        publisher=RedisEventPublisher(),
        notifier=SmtpNotifier(),
    )


def _rate_order_use_case() -> RateOrder:
    return RateOrder(order_repository=SqlAlchemyOrderRepository())


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def place_order(request_dto: PlaceOrderRequest) -> OrderResponse:
    return _place_order_use_case().execute(request_dto=request_dto, trace_ctx=_trace_ctx())


@router.get("/customer/{contact}", response_model=OrderListResponse)
def customer_orders(
    contact: str,
    limit: int = Query(default=50),
    cursor: str | None = Query(default=None),
) -> OrderListResponse:
    use_case = ListCustomerOrders(order_repository=SqlAlchemyOrderRepository())
    return use_case.execute(contact=contact, limit=limit, cursor=cursor)


@router.get("/{identifier}", response_model=OrderResponse)
def get_order(identifier: str) -> OrderResponse:
    return GetOrder(order_repository=SqlAlchemyOrderRepository()).execute(identifier=identifier)


@router.patch("/{order_id}/status", response_model=OrderResponse)
def update_order_status(order_id: str, request_dto: UpdateOrderStatusRequest) -> OrderResponse:
    return _transition_order_use_case().execute(
        order_id=OrderId(order_id),
        new_status=request_dto.status,
        trace_ctx=_trace_ctx(),
        note=request_dto.note,
    )


@router.post("/{order_id}/rating", response_model=OrderResponse)
def rate_order(order_id: str, request_dto: RateOrderRequest) -> OrderResponse:
    return _rate_order_use_case().execute(
        order_id=OrderId(order_id),
        score=request_dto.score,
        comment=request_dto.comment,
    )
