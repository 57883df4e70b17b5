"""Change notifier: turns a completed store mutation into one change event.

Publishing is best effort. A missing channel or a send failure is logged
and reported as False; it never propagates to the mutation's caller.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tasksync.application.dtos.task import TaskResult
from tasksync.schemas.events import (
    TaskCreatedEvent,
    TaskDeletedEvent,
    TaskUpdatedEvent,
    event_to_wire,
)
from tasksync.schemas.task import Task

if TYPE_CHECKING:
    from tasksync.api.websocket.manager import ConnectionManager

logger = logging.getLogger(__name__)


class ChangeNotifier:
    """Publishes task change events to every connected WebSocket client."""

    def __init__(self, manager: ConnectionManager | None = None) -> None:
        """Initialize. manager may be attached later via attach()."""
        self.manager = manager

    def attach(self, manager: ConnectionManager | None) -> None:
        """Set (or clear) the connection manager used for broadcast."""
        self.manager = manager

    def is_available(self) -> bool:
        """Return True if a broadcast channel is attached."""
        return self.manager is not None

    async def emit(
        self,
        event: TaskCreatedEvent | TaskUpdatedEvent | TaskDeletedEvent,
        group: str | None = None,
    ) -> bool:
        """Broadcast one event to all connections, or only to a named group.

        Task mutations always go to everyone (group=None).

        Returns:
            True if handed to the channel, False if the channel is missing or failed.
        """
        if self.manager is None:
            logger.debug("Broadcast channel not initialized, skipping %s", event.type)
            return False
        try:
            message = event_to_wire(event)
            if group is None:
                delivered = await self.manager.broadcast(message)
            else:
                delivered = await self.manager.broadcast_to_group(group, message)
        except Exception:
            logger.exception("Failed to broadcast %s", event.type)
            return False
        logger.debug("Broadcast %s to %d connection(s)", event.type, delivered)
        return True

    async def emit_created(self, task: TaskResult) -> bool:
        """Publish task_created."""
        return await self.emit(TaskCreatedEvent(task=Task.from_result(task)))

    async def emit_updated(self, task: TaskResult) -> bool:
        """Publish task_updated."""
        return await self.emit(TaskUpdatedEvent(task=Task.from_result(task)))

    async def emit_deleted(self, task_id: str) -> bool:
        """Publish task_deleted."""
        return await self.emit(TaskDeletedEvent(id=task_id))
