from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from tikaz.api.ws.manager import ConnectionManager
from tikaz.application.ports.publisher import ADMIN_TOPIC, order_topic

router = APIRouter()
logger = logging.getLogger(__name__)


async def _serve(websocket: WebSocket, topic: str) -> None:
    manager: ConnectionManager = websocket.app.state.ws_manager
    await manager.register(websocket=websocket, topic=topic)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await manager.unregister(websocket)
    except Exception:
        logger.exception("ws_connection_error", extra={"topic": topic})
        await manager.unregister(websocket)


@router.websocket("/ws/orders/{order_id}")
async def order_updates(websocket: WebSocket, order_id: str) -> None:
    await _serve(websocket, order_topic(order_id))


@router.websocket("/ws/admin")
async def admin_updates(websocket: WebSocket) -> None:
    await _serve(websocket, ADMIN_TOPIC)
