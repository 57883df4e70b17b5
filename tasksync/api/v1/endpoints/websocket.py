"""WebSocket endpoint: /ws subscribes a client to change events.

Uses only the ConnectionManager on app.state. An optional ?group=<name>
puts the connection in a named group as well as the default one. Client
frames are ignored except "ping", answered with "pong".
"""

import re
from typing import Annotated

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from tasksync.api.v1.dependencies import get_ws_manager
from tasksync.api.websocket import ConnectionManager
from tasksync.schemas.websocket import WebSocketStatusResponse

router = APIRouter()

GROUP_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_.:-]{1,64}$")


async def _reject_websocket(websocket: WebSocket, reason: str, code: int = 1008) -> None:
    """Accept then immediately close with code/reason so client gets a proper close frame."""
    await websocket.accept()
    await websocket.close(code=code, reason=reason)


@router.websocket("")
async def websocket_endpoint(websocket: WebSocket):
    """Register the connection, keep it open until the client leaves."""
    manager: ConnectionManager = websocket.app.state.ws_manager
    group = websocket.query_params.get("group") or None
    if group is not None and not GROUP_NAME_PATTERN.match(group):
        await _reject_websocket(websocket, "Invalid group")
        return
    await manager.connect(websocket, group=group)
    try:
        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        pass
    finally:
        await manager.disconnect(websocket)


@router.get("/status", response_model=WebSocketStatusResponse)
async def websocket_status(
    manager: Annotated[ConnectionManager, Depends(get_ws_manager)],
) -> WebSocketStatusResponse:
    """Number of connected subscribers."""
    return WebSocketStatusResponse(
        total_connections=await manager.get_connection_count()
    )
