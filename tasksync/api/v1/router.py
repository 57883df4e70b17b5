"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from tasksync.api.v1.dependencies.
"""

from fastapi import APIRouter

from tasksync.api.v1.endpoints import health, tasks, websocket as ws_endpoint

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(ws_endpoint.router, prefix="/ws", tags=["websocket"])
