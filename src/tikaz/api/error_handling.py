from __future__ import annotations

from typing import Any, cast

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tikaz.api.middleware.request_id import get_request_id
from tikaz.application.ports.repositories import OrderNumberConflictError
from tikaz.application.use_cases.admin_reports import (
    InvalidAdminCursorError,
    InvalidAdminFilterError,
)
from tikaz.application.use_cases.contact_inbox import (
    ContactNotFoundError,
    InvalidContactResponseError,
    InvalidContactStatusError,
)
from tikaz.application.use_cases.get_order import (
    InvalidOrderListCursorError,
    InvalidOrderListLimitError,
)
from tikaz.application.use_cases.get_order import OrderNotFoundError as GetOrderNotFoundError
from tikaz.application.use_cases.place_order import (
    BelowMinimumOrderError,
    RestaurantUnavailableError,
    TotalAmountMismatchError,
    ZoneNotServedError,
)
from tikaz.application.use_cases.rate_order import OrderConflictError as RateOrderConflictError
from tikaz.application.use_cases.rate_order import OrderNotFoundError as RateOrderNotFoundError
from tikaz.application.use_cases.restaurant_catalog import (
    InvalidPaginationError,
    RestaurantNotFoundError,
)
from tikaz.application.use_cases.transition_order import InvalidStatusError
from tikaz.application.use_cases.transition_order import (
    OrderConflictError as TransitionOrderConflictError,
)
from tikaz.application.use_cases.transition_order import (
    OrderNotFoundError as TransitionOrderNotFoundError,
)
from tikaz.domain.order.entities import (
    AlreadyRatedError,
    InvalidRatingScoreError,
    OrderNotDeliveredError,
)


def _error_response(
    *,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
            },
            "requestId": get_request_id(),
        },
    )


def _exception_handler(status_code: int, code: str):
    async def handler(_: Request, exc: Exception) -> JSONResponse:
        details = getattr(exc, "details", None)
        return _error_response(
            status_code=status_code,
            code=code,
            message=str(exc),
            details=details if isinstance(details, dict) else None,
        )

    return handler


async def _http_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    http_exc = cast(StarletteHTTPException, exc)
    message = str(http_exc.detail) if http_exc.detail else "request failed"
    code = {
        400: "BAD_REQUEST",
        404: "NOT_FOUND",
        405: "METHOD_NOT_ALLOWED",
        409: "CONFLICT",
    }.get(http_exc.status_code, "HTTP_ERROR")
    return _error_response(
        status_code=http_exc.status_code,
        code=code,
        message=message,
    )


def _jsonable_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    # pydantic may put the raised exception object under ctx.error
    cleaned = []
    for error in errors:
        error = dict(error)
        ctx = error.get("ctx")
        if isinstance(ctx, dict):
            error["ctx"] = {key: str(value) for key, value in ctx.items()}
        error.pop("input", None)
        cleaned.append(error)
    return cleaned


async def _validation_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    validation_exc = cast(RequestValidationError, exc)
    return _error_response(
        status_code=400,
        code="INVALID_REQUEST",
        message="request validation failed",
        details={"errors": _jsonable_errors(list(validation_exc.errors()))},
    )


def register_exception_handlers(app: FastAPI) -> None:
    mappings: list[tuple[type[Exception], int, str]] = [
        (RestaurantUnavailableError, 400, "RESTAURANT_UNAVAILABLE"),
        (ZoneNotServedError, 400, "ZONE_NOT_SERVED"),
        (BelowMinimumOrderError, 400, "BELOW_MINIMUM_ORDER"),
        (TotalAmountMismatchError, 400, "TOTAL_AMOUNT_MISMATCH"),
        (OrderNumberConflictError, 409, "CONFLICT"),
        (GetOrderNotFoundError, 404, "ORDER_NOT_FOUND"),
        (TransitionOrderNotFoundError, 404, "ORDER_NOT_FOUND"),
        (RateOrderNotFoundError, 404, "ORDER_NOT_FOUND"),
        (InvalidStatusError, 400, "INVALID_STATUS"),
        (TransitionOrderConflictError, 409, "CONFLICT"),
        (RateOrderConflictError, 409, "CONFLICT"),
        (OrderNotDeliveredError, 409, "ORDER_NOT_DELIVERED"),
        (AlreadyRatedError, 409, "ALREADY_RATED"),
        (InvalidRatingScoreError, 400, "INVALID_RATING_SCORE"),
        (RestaurantNotFoundError, 404, "RESTAURANT_NOT_FOUND"),
        (InvalidPaginationError, 400, "INVALID_PAGINATION"),
        (ContactNotFoundError, 404, "CONTACT_NOT_FOUND"),
        (InvalidContactStatusError, 400, "INVALID_CONTACT_STATUS"),
        (InvalidContactResponseError, 400, "INVALID_CONTACT_RESPONSE"),
        (InvalidOrderListCursorError, 400, "INVALID_CURSOR"),
        (InvalidOrderListLimitError, 400, "INVALID_PAGINATION"),
        (InvalidAdminCursorError, 400, "INVALID_CURSOR"),
        (InvalidAdminFilterError, 400, "INVALID_FILTER"),
    ]

    for exc_cls, status_code, code in mappings:
        app.add_exception_handler(exc_cls, _exception_handler(status_code, code))

    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
