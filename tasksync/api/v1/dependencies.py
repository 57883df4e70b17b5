"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for the task store, TaskService, change notifier
and WebSocket manager. All of them live on app.state (see tasksync.main and
tasksync.core.lifespan); routes never construct infrastructure directly.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from tasksync.api.websocket import ConnectionManager
from tasksync.application.interfaces import IChangeNotifier, ITaskRepository
from tasksync.application.use_cases.tasks import TaskService


def get_task_repository(request: Request) -> ITaskRepository:
    """Task store opened in lifespan; 503 if the app has not started it."""
    repo = getattr(request.app.state, "task_repository", None)
    if repo is None:
        raise HTTPException(status_code=503, detail="Task store not initialized")
    return repo


def get_task_service(
    repo: Annotated[ITaskRepository, Depends(get_task_repository)],
) -> TaskService:
    """TaskService bound to the configured store."""
    return TaskService(repo)


def get_notifier(request: Request) -> IChangeNotifier:
    """Change notifier (detached until lifespan startup; emits become no-ops)."""
    return request.app.state.notifier


def get_ws_manager(request: Request) -> ConnectionManager:
    """WebSocket connection manager."""
    return request.app.state.ws_manager
