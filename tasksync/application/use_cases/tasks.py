"""Task operations: list, get, create, update, delete (delegate to ITaskRepository)."""

from __future__ import annotations

from dataclasses import replace

from tasksync.application.dtos.task import TaskCreate, TaskQuery, TaskResult, TaskUpdate
from tasksync.application.interfaces.repositories import ITaskRepository
from tasksync.domain.exceptions import TaskNotFoundException, ValidationException

_REQUIRED_TEXT_FIELDS = ("title", "assigned_to", "created_by")


def _clean_text(value: str, field: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValidationException(f"{field} is required", field=field)
    return cleaned


class TaskService:
    """Create and query tasks. Enforces required fields before the store is touched.

    Change notification is not done here: the HTTP layer schedules it after
    the response so a slow or missing broadcast channel never delays a mutation.
    """

    def __init__(self, task_repo: ITaskRepository) -> None:
        self.task_repo = task_repo

    async def list_tasks(self, query: TaskQuery | None = None) -> list[TaskResult]:
        """Return tasks matching the optional status/priority filter and sort."""
        return await self.task_repo.list_tasks(query or TaskQuery())

    async def get_task(self, task_id: str) -> TaskResult:
        """Return task by id; raise TaskNotFoundException if unknown."""
        task = await self.task_repo.get_by_id(task_id)
        if task is None:
            raise TaskNotFoundException(task_id)
        return task

    async def create_task(self, data: TaskCreate) -> TaskResult:
        """Validate required fields (title, dueDate, assignedTo, createdBy) and persist."""
        if data.due_date is None:
            raise ValidationException("dueDate is required", field="due_date")
        cleaned = replace(
            data,
            **{f: _clean_text(getattr(data, f) or "", f) for f in _REQUIRED_TEXT_FIELDS},
            description=(data.description or "").strip(),
        )
        return await self.task_repo.create_task(cleaned)

    async def update_task(self, task_id: str, data: TaskUpdate) -> TaskResult:
        """Apply a partial update; raise TaskNotFoundException if the id is unknown.

        An empty update still bumps updatedAt and version, the same as a
        full-record PUT that repeats the current values.
        """
        changes = data.changes()
        for field in _REQUIRED_TEXT_FIELDS:
            if field in changes:
                changes[field] = _clean_text(changes[field], field)
        if "description" in changes:
            changes["description"] = changes["description"].strip()
        updated = await self.task_repo.update_task(task_id, changes)
        if updated is None:
            raise TaskNotFoundException(task_id)
        return updated

    async def delete_task(self, task_id: str) -> str:
        """Delete a task and return its id; raise TaskNotFoundException if unknown."""
        if not await self.task_repo.delete_task(task_id):
            raise TaskNotFoundException(task_id)
        return task_id
