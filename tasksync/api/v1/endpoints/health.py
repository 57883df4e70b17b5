"""Health check endpoint: store reachability and live WebSocket connections."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from tasksync.api.v1.dependencies import get_ws_manager
from tasksync.api.websocket import ConnectionManager
from tasksync.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
async def health_check(
    request: Request,
    manager: Annotated[ConnectionManager, Depends(get_ws_manager)],
) -> HealthResponse:
    """Return ok plus store state; a down store does not fail liveness."""
    repo = getattr(request.app.state, "task_repository", None)
    store_ok = repo is not None and await repo.ping()
    return HealthResponse(
        store="connected" if store_ok else "disconnected",
        connections=await manager.get_connection_count(),
    )
