from __future__ import annotations

import logging
import time

from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger("tikaz.api.access")

REQUEST_COUNT = Counter(
    "tikaz_http_requests_total",
    "HTTP requests served, by route template",
    ["method", "path", "status_code"],
)
REQUEST_LATENCY = Histogram(
    "tikaz_http_request_duration_seconds",
    "HTTP request duration in seconds, by route template",
    ["method", "path"],
)


def route_path(request: Request) -> str:
    """Label requests by route template so ``/api/orders/{identifier}`` stays one series."""
    route = request.scope.get("route")
    template = getattr(route, "path", None)
    return template or request.url.path


def _record(request: Request, status_code: int, elapsed_seconds: float) -> dict[str, object]:
    template = route_path(request)
    REQUEST_COUNT.labels(method=request.method, path=template, status_code=str(status_code)).inc()
    REQUEST_LATENCY.labels(method=request.method, path=template).observe(elapsed_seconds)
    return {
        "method": request.method,
        "path": request.url.path,
        "status_code": status_code,
        "duration_ms": round(elapsed_seconds * 1000, 2),
    }


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("request_error", extra=_record(request, 500, time.perf_counter() - started))
            raise

        logger.info(
            "request_complete",
            extra=_record(request, response.status_code, time.perf_counter() - started),
        )
        return response
