"""Service interfaces (ports) used by the request path."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from tasksync.application.dtos.task import TaskResult


class IChangeNotifier(Protocol):
    """Emits one change event per successful mutation. Never raises."""

    async def emit_created(self, task: TaskResult) -> bool:
        """Announce a created task; return False if it could not be sent."""

    async def emit_updated(self, task: TaskResult) -> bool:
        """Announce an updated task; return False if it could not be sent."""

    async def emit_deleted(self, task_id: str) -> bool:
        """Announce a deleted task id; return False if it could not be sent."""
