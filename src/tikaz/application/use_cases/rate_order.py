from __future__ import annotations

import logging
from datetime import datetime, timezone

from tikaz.application.dto.responses import OrderResponse
from tikaz.application.mappers.order_mapper import to_order_response
from tikaz.application.metrics.order_lifecycle import record_rating
from tikaz.application.ports.repositories import OptimisticConcurrencyError, OrderRepository
from tikaz.domain.common.ids import OrderId
from tikaz.domain.order.entities import InvalidRatingScoreError
from tikaz.domain.order.events import OrderRated

logger = logging.getLogger(__name__)

_MAX_ATTEMPTS = 5


class OrderNotFoundError(Exception):
    pass


class OrderConflictError(Exception):
    pass


class RateOrder:
    """Attach a customer rating to a delivered order and fold it into the restaurant mean.

    The order rating and the restaurant increment are committed together. A
    version bump that leaves the order delivered and unrated (a same-status
    transition carrying a note) is retried against the reloaded order; the
    domain check on that reload raises ``AlreadyRatedError`` or
    ``OrderNotDeliveredError`` when another writer changed what matters.
    """

    def __init__(self, order_repository: OrderRepository) -> None:
        self._order_repository = order_repository

    def execute(self, order_id: OrderId, score: int, comment: str | None = None) -> OrderResponse:
        if isinstance(score, bool) or not isinstance(score, int) or not 1 <= score <= 5:
            raise InvalidRatingScoreError("rating score must be an integer between 1 and 5")

        for attempt in range(1, _MAX_ATTEMPTS + 1):
            order = self._order_repository.get(order_id)
            if order is None:
                raise OrderNotFoundError(f"order {order_id} not found")

            now = datetime.now(timezone.utc)
            rated = order.rate(score=score, comment=comment, now=now)
            try:
                persisted, counted = self._order_repository.save_rating_and_record(
                    rated,
                    expected_version=order.version,
                )
                break
            except OptimisticConcurrencyError:
                logger.info(
                    "order_rating_retry",
                    extra={"order_id": str(order_id), "attempt": attempt},
                )
        else:
            raise OrderConflictError(f"order {order_id} rating conflict")

        event = OrderRated(
            order_id=persisted.order_id,
            restaurant_id=persisted.restaurant.restaurant_id,
            score=score,
            occurred_at=now,
        )
        if not counted:
            logger.warning(
                "rating_restaurant_missing",
                extra={"order_id": str(order_id), "restaurant_id": str(event.restaurant_id)},
            )
        record_rating(score)
        logger.info("order_rated", extra={"order_id": str(order_id), "score": score})

        return to_order_response(persisted)
