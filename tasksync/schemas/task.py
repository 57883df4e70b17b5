"""Task API schemas.

Field names are camelCase on the wire (dueDate, assignedTo, ...) and
snake_case in Python. The same Task model is the HTTP response body, the
change event payload and the entry type of the client's collection.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from tasksync.application.dtos.task import TaskCreate, TaskResult, TaskUpdate
from tasksync.domain.enums import TaskPriority, TaskStatus


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class Task(_CamelModel):
    """A persisted task as seen by API clients and broadcast subscribers."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str = ""
    status: TaskStatus
    priority: TaskPriority
    due_date: date
    assigned_to: str
    created_by: str
    created_at: datetime
    updated_at: datetime
    version: int = Field(default=1, ge=1)

    @classmethod
    def from_result(cls, result: TaskResult) -> "Task":
        """Build from the store DTO."""
        return cls(
            id=result.id,
            title=result.title,
            description=result.description,
            status=result.status,
            priority=result.priority,
            due_date=result.due_date,
            assigned_to=result.assigned_to,
            created_by=result.created_by,
            created_at=result.created_at,
            updated_at=result.updated_at,
            version=result.version,
        )

    def to_wire(self) -> dict:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class TaskCreateRequest(_CamelModel):
    """Request body for creating a task."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: date
    assigned_to: str = Field(..., min_length=1, max_length=128)
    created_by: str = Field(..., min_length=1, max_length=128)

    def to_dto(self) -> TaskCreate:
        return TaskCreate(
            title=self.title,
            description=self.description,
            status=self.status,
            priority=self.priority,
            due_date=self.due_date,
            assigned_to=self.assigned_to,
            created_by=self.created_by,
        )


class TaskUpdateRequest(_CamelModel):
    """Request body for updating a task (partial or full).

    Store-maintained fields (id, createdAt, updatedAt, version) are ignored if
    a client sends a whole task back.
    """

    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: date | None = None
    assigned_to: str | None = Field(default=None, min_length=1, max_length=128)
    created_by: str | None = Field(default=None, min_length=1, max_length=128)

    def to_dto(self) -> TaskUpdate:
        return TaskUpdate(**self.model_dump(exclude_none=True))


class TaskDeletedResponse(BaseModel):
    """Response for DELETE /tasks/{id}."""

    message: str = "Task deleted successfully"
    id: str
