"""API and wire schemas (pydantic): tasks, change events, health, websocket."""

from tasksync.schemas.events import (
    ChangeEvent,
    TaskCreatedEvent,
    TaskDeletedEvent,
    TaskUpdatedEvent,
    parse_change_event,
)
from tasksync.schemas.task import (
    Task,
    TaskCreateRequest,
    TaskDeletedResponse,
    TaskUpdateRequest,
)

__all__ = [
    "ChangeEvent",
    "Task",
    "TaskCreateRequest",
    "TaskCreatedEvent",
    "TaskDeletedEvent",
    "TaskDeletedResponse",
    "TaskUpdateRequest",
    "TaskUpdatedEvent",
    "parse_change_event",
]
