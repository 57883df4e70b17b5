"""In-memory task repository (implements ITaskRepository).

Default backend for development and tests. Mutations are serialized with an
asyncio.Lock so each create/update/delete is atomic per task; concurrent
updates to the same task resolve last-write-wins in lock-acquisition order.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Any

from tasksync.application.dtos.task import TaskCreate, TaskQuery, TaskResult
from tasksync.domain.enums import TaskSort
from tasksync.domain.ordering import filter_tasks, sort_tasks
from tasksync.shared.utils.datetime import utc_now
from tasksync.shared.utils.generators import generate_task_id


class InMemoryTaskRepository:
    """Task repository held in a dict. Same contract as FirestoreTaskRepository."""

    def __init__(self) -> None:
        self._tasks: dict[str, TaskResult] = {}
        self._lock = asyncio.Lock()

    async def list_tasks(self, query: TaskQuery) -> list[TaskResult]:
        """Return filtered tasks; newest first unless another sort is requested."""
        async with self._lock:
            snapshot = list(self._tasks.values())
        matched = filter_tasks(snapshot, status=query.status, priority=query.priority)
        return sort_tasks(matched, query.sort or TaskSort.CREATED_DESC)

    async def get_by_id(self, task_id: str) -> TaskResult | None:
        return self._tasks.get(task_id)

    async def create_task(self, data: TaskCreate) -> TaskResult:
        now = utc_now()
        task = TaskResult(
            id=generate_task_id(),
            title=data.title,
            description=data.description,
            status=data.status,
            priority=data.priority,
            due_date=data.due_date,
            assigned_to=data.assigned_to,
            created_by=data.created_by,
            created_at=now,
            updated_at=now,
            version=1,
        )
        async with self._lock:
            self._tasks[task.id] = task
        return task

    async def update_task(
        self, task_id: str, changes: dict[str, Any]
    ) -> TaskResult | None:
        async with self._lock:
            current = self._tasks.get(task_id)
            if current is None:
                return None
            updated = replace(
                current,
                **changes,
                updated_at=utc_now(),
                version=current.version + 1,
            )
            self._tasks[task_id] = updated
        return updated

    async def delete_task(self, task_id: str) -> bool:
        async with self._lock:
            return self._tasks.pop(task_id, None) is not None

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        """Nothing to release."""
