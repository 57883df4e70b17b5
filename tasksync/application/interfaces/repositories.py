"""Repository interfaces (ports) for the application layer.

Protocols define contracts that store implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from tasksync.application.dtos.task import TaskCreate, TaskQuery, TaskResult


class ITaskRepository(Protocol):
    """Protocol for the task store (in-memory or Firestore).

    Every mutation is atomic per task. update_task increments version by one
    and refreshes updated_at; create_task assigns id, timestamps and version 1.
    """

    async def list_tasks(self, query: TaskQuery) -> list[TaskResult]:
        """Return tasks matching the query (default order: newest first)."""

    async def get_by_id(self, task_id: str) -> TaskResult | None:
        """Return a task by id, or None."""

    async def create_task(self, data: TaskCreate) -> TaskResult:
        """Persist a new task and return it with store-assigned fields."""

    async def update_task(
        self, task_id: str, changes: dict[str, Any]
    ) -> TaskResult | None:
        """Apply changes; return the updated task or None if the id is unknown."""

    async def delete_task(self, task_id: str) -> bool:
        """Delete a task; return False if the id is unknown."""

    async def ping(self) -> bool:
        """Return True if the store is reachable."""

    async def close(self) -> None:
        """Release store resources (HTTP clients etc.). Call on shutdown."""
