from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from gigboard.core.security import read_token
from gigboard.services.notification_service import connection_manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications")


@router.websocket("/ws")
async def notifications_ws(websocket: WebSocket, token: str = ""):
    """
    Per-user push channel. The client authenticates with ?token=<jwt>;
    anything it sends afterwards is ignored.
    """
    principal = read_token(token) if token else None
    if principal is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    await connection_manager.register(principal.user_id, websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        await connection_manager.unregister(principal.user_id, websocket)
