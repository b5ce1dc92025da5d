from __future__ import annotations

from fastapi import APIRouter, Response, status

from tikaz.infrastructure.db.session import ping_database
from tikaz.infrastructure.messaging.redis_client import ping_redis, redis_url

router = APIRouter()


@router.get("/health/live")
def live() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/health/ready")
def ready(response: Response) -> dict[str, object]:
    database_ready = ping_database(timeout_seconds=1.0)
    # Redis is optional; checked only when REDIS_URL is set.
    redis_ready = ping_redis(timeout_seconds=1.0) if redis_url() else True

    if database_ready and redis_ready:
        return {"status": "ok"}

    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return {
        "status": "unavailable",
        "checks": {"database": database_ready, "redis": redis_ready},
    }
