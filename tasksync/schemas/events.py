"""Change event schemas: the tagged union pushed over the broadcast channel.

Wire format:
    {"type": "task_created", "task": {...}}
    {"type": "task_updated", "task": {...}}
    {"type": "task_deleted", "id": "..."}
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, TypeAdapter

from tasksync.schemas.task import Task

TASK_CREATED = "task_created"
TASK_UPDATED = "task_updated"
TASK_DELETED = "task_deleted"


class TaskCreatedEvent(BaseModel):
    type: Literal["task_created"] = TASK_CREATED
    task: Task


class TaskUpdatedEvent(BaseModel):
    type: Literal["task_updated"] = TASK_UPDATED
    task: Task


class TaskDeletedEvent(BaseModel):
    type: Literal["task_deleted"] = TASK_DELETED
    id: str = Field(..., min_length=1)


ChangeEvent = Annotated[
    TaskCreatedEvent | TaskUpdatedEvent | TaskDeletedEvent,
    Field(discriminator="type"),
]

_change_event_adapter: TypeAdapter[ChangeEvent] = TypeAdapter(ChangeEvent)


def parse_change_event(data: str | bytes | dict[str, Any]) -> ChangeEvent:
    """Parse a JSON frame or dict into a change event.

    Raises:
        pydantic.ValidationError: unknown type, missing fields, or an
            out-of-range status/priority in the task payload.
    """
    if isinstance(data, dict):
        return _change_event_adapter.validate_python(data)
    return _change_event_adapter.validate_json(data)


def event_to_wire(event: TaskCreatedEvent | TaskUpdatedEvent | TaskDeletedEvent) -> dict[str, Any]:
    """JSON-ready dict for sending over the channel (camelCase task fields)."""
    return event.model_dump(mode="json", by_alias=True)
