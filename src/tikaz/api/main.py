from __future__ import annotations

import asyncio
import os
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tikaz.api.error_handling import register_exception_handlers
from tikaz.api.middleware.access_log import AccessLogMiddleware
from tikaz.api.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware
from tikaz.api.routes.admin import router as admin_router
from tikaz.api.routes.contacts import router as contacts_router
from tikaz.api.routes.health import router as health_router
from tikaz.api.routes.metrics import router as metrics_router
from tikaz.api.routes.orders import router as orders_router
from tikaz.api.routes.restaurants import router as restaurants_router
from tikaz.api.ws.manager import ConnectionManager
from tikaz.api.ws.routes import router as ws_router
from tikaz.infrastructure.messaging.redis_event_listener import start_redis_fanout
from tikaz.infrastructure.observability.logging_config import configure_logging
from tikaz.infrastructure.observability.otel import configure_otel

APP_VERSION = "1.0.0"
PRODUCTION_ORIGIN = "https://tikaz-livre.re"

ROUTERS = (
    health_router,
    metrics_router,
    restaurants_router,
    orders_router,
    contacts_router,
    admin_router,
    ws_router,
)


def cors_allow_origins() -> list[str]:
    """Any origin outside production; otherwise the comma-separated ``CORS_ALLOW_ORIGINS`` list."""
    if os.getenv("APP_ENV", "dev").strip().lower() in {"dev", "test"}:
        return ["*"]
    raw_value = os.getenv("CORS_ALLOW_ORIGINS", PRODUCTION_ORIGIN)
    return [origin.strip() for origin in raw_value.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.ws_manager = ConnectionManager()
    app.state.redis_fanout_task = asyncio.create_task(start_redis_fanout(app.state))
    try:
        yield
    finally:
        app.state.redis_fanout_task.cancel()
        with suppress(asyncio.CancelledError):
            await app.state.redis_fanout_task


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(title="TiKaz Livré API", version=APP_VERSION, lifespan=lifespan)
    register_exception_handlers(app)
    for router in ROUTERS:
        app.include_router(router)

    # Added innermost first: CORS wraps request ids, which wrap the access log.
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_allow_origins(),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )

    configure_otel(app, service_version=APP_VERSION)
    return app


app = create_app()
