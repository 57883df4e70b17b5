"""DTOs for task create/update/query and the persisted task record."""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date, datetime
from typing import Any

from tasksync.domain.enums import TaskPriority, TaskSort, TaskStatus


@dataclass(frozen=True)
class TaskResult:
    """Task as persisted by the store (id, timestamps and version store-maintained)."""

    id: str
    title: str
    description: str
    status: TaskStatus
    priority: TaskPriority
    due_date: date
    assigned_to: str
    created_by: str
    created_at: datetime
    updated_at: datetime
    version: int


@dataclass(frozen=True)
class TaskCreate:
    """Fields accepted on create (everything except id, timestamps and version)."""

    title: str
    due_date: date
    assigned_to: str
    created_by: str
    description: str = ""
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM


@dataclass(frozen=True)
class TaskUpdate:
    """Partial update; None means "leave unchanged"."""

    title: str | None = None
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: date | None = None
    assigned_to: str | None = None
    created_by: str | None = None

    def changes(self) -> dict[str, Any]:
        """Return only the fields that were set."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


@dataclass(frozen=True)
class TaskQuery:
    """List filter: optional status/priority and sort order."""

    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    sort: TaskSort | None = None
