"""Sync session: one client's view of the task store.

Each mutation goes through three steps:

1. Issue: the request is sent. Conservative mode leaves the collection alone;
   optimistic mode applies updates and deletes locally first. Creates are
   always conservative because the id comes from the store.
2. Confirm: the response is reconciled (upsert for create/update, remove for
   delete).
3. Echo: the broadcast copy of the same change arrives later and is applied
   idempotently.

A failed request rolls back its optimistic change unless a newer event has
already replaced it, then re-raises. A not-found response also removes the
local entry, since the store no longer has it.

Every (re)connect of the broadcast listener triggers refresh(), a full fetch
that replaces the collection.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from tasksync.client.api import TaskApiClient
from tasksync.client.channel import BroadcastListener
from tasksync.client.reconciler import ApplyOutcome, TaskReconciler
from tasksync.core.config import ClientSettings, get_client_settings
from tasksync.domain.exceptions import (
    TaskNotFoundException,
    TaskSyncException,
    TransportException,
    ValidationException,
)
from tasksync.schemas.events import ChangeEvent
from tasksync.schemas.task import Task, TaskCreateRequest, TaskUpdateRequest

logger = logging.getLogger(__name__)


class TaskSyncSession:
    """Keeps a TaskReconciler converged with the server."""

    def __init__(
        self,
        api: TaskApiClient,
        *,
        optimistic: bool = False,
        reconciler: TaskReconciler | None = None,
    ) -> None:
        self.api = api
        self.optimistic = optimistic
        self.reconciler = reconciler or TaskReconciler()
        self.listener: BroadcastListener | None = None
        self._needs_refresh = True
        self._listener_task: asyncio.Task[None] | None = None
        self._subscribers: list[Callable[[ChangeEvent, ApplyOutcome], Any]] = []

    @property
    def stale(self) -> bool:
        """True until a full fetch has landed, and whenever the channel is down.

        With a listener attached the collection can only be trusted while the
        listener holds a live connection; events missed in between are
        recovered by the refresh on the next connect.
        """
        if self._needs_refresh:
            return True
        return self.listener is not None and not self.listener.connected

    @classmethod
    def from_settings(cls, settings: ClientSettings | None = None) -> "TaskSyncSession":
        """Build a session with HTTP client and listener from ClientSettings."""
        settings = settings or get_client_settings()
        session = cls(
            TaskApiClient(settings.api_url, timeout=settings.request_timeout),
            optimistic=settings.optimistic,
        )
        session.connect_channel(
            settings.resolved_ws_url,
            reconnect_attempts=settings.reconnect_attempts,
            reconnect_delay=settings.reconnect_delay,
            reconnect_delay_max=settings.reconnect_delay_max,
            reconnect_backoff=settings.reconnect_backoff,
            open_timeout=settings.open_timeout,
        )
        return session

    def connect_channel(self, url: str, **options: Any) -> BroadcastListener:
        """Create the broadcast listener wired to this session's hooks."""
        self.listener = BroadcastListener(
            url,
            self.handle_event,
            on_connect=self._on_connect,
            on_disconnect=self._on_disconnect,
            **options,
        )
        return self.listener

    # Lifecycle

    async def start(self) -> None:
        """Load the collection, then start listening in the background.

        The listener refreshes again on every connect. Without a listener the
        session only fetches once; call refresh() to resync.
        """
        await self.refresh()
        if self.listener is not None:
            self._listener_task = asyncio.create_task(self.listener.run())

    async def close(self) -> None:
        """Stop the listener, close the HTTP client and discard the collection."""
        if self.listener is not None:
            await self.listener.close()
        try:
            if self._listener_task is not None:
                self._listener_task.cancel()
                try:
                    await self._listener_task
                except asyncio.CancelledError:
                    pass
                except TransportException as e:
                    logger.info("Listener had already stopped: %s", e)
                except Exception:
                    logger.exception("Listener stopped with an unexpected error")
        finally:
            self._listener_task = None
            self._needs_refresh = True
            self.reconciler.clear()
            await self.api.aclose()

    async def wait(self) -> None:
        """Block until the listener stops; raises TransportException if it gave up."""
        if self._listener_task is not None:
            await self._listener_task

    async def __aenter__(self) -> "TaskSyncSession":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # Reads

    def tasks(self) -> list[Task]:
        return self.reconciler.tasks()

    def get(self, task_id: str) -> Task | None:
        return self.reconciler.get(task_id)

    # Sync

    async def refresh(self) -> list[Task]:
        """Full fetch; the result replaces the whole collection."""
        tasks = await self.api.list_tasks()
        self.reconciler.replace_all(tasks)
        self._needs_refresh = False
        logger.debug("Collection refreshed with %d tasks", len(tasks))
        return tasks

    def subscribe(self, callback: Callable[[ChangeEvent, ApplyOutcome], Any]) -> None:
        """Call callback(event, outcome) after each broadcast event is applied."""
        self._subscribers.append(callback)

    async def handle_event(self, event: ChangeEvent) -> ApplyOutcome:
        outcome = self.reconciler.apply(event)
        for callback in self._subscribers:
            try:
                callback(event, outcome)
            except Exception:
                logger.exception("Subscriber %r failed on %s", callback, event.type)
        return outcome

    async def _on_connect(self) -> None:
        try:
            await self.refresh()
        except TaskSyncException as e:
            self._needs_refresh = True
            logger.warning("Refresh after connect failed; collection stays stale: %s", e)

    def _on_disconnect(self) -> None:
        self._needs_refresh = True

    # Mutations

    async def create(self, **fields: Any) -> Task:
        request = _build(TaskCreateRequest, fields)
        task = await self.api.create_task(request)
        self.reconciler.upsert(task)
        return task

    async def update(self, task_id: str, **changes: Any) -> Task:
        request = _build(TaskUpdateRequest, changes)
        staged = previous = None
        if self.optimistic:
            current = self.reconciler.get(task_id)
            if current is not None:
                staged = current.model_copy(update=request.model_dump(exclude_none=True))
                previous = self.reconciler.stage_update(staged)
        try:
            task = await self.api.update_task(task_id, request)
        except TaskNotFoundException:
            self.reconciler.remove(task_id)
            raise
        except TaskSyncException:
            if staged is not None and previous is not None:
                if not self.reconciler.rollback_update(staged, previous):
                    logger.debug("Kept newer copy of %s instead of rolling back", task_id)
            raise
        self.reconciler.upsert(task)
        return task

    async def delete(self, task_id: str) -> str:
        staged = self.reconciler.stage_delete(task_id) if self.optimistic else None
        try:
            deleted_id = await self.api.delete_task(task_id)
        except TaskNotFoundException:
            self.reconciler.remove(task_id)
            raise
        except TaskSyncException:
            if staged is not None:
                self.reconciler.rollback_delete(staged)
            raise
        self.reconciler.remove(deleted_id)
        return deleted_id


def _build(model: type[TaskCreateRequest] | type[TaskUpdateRequest], fields: dict[str, Any]):
    """Validate mutation input locally; bad input never leaves the client."""
    try:
        return model.model_validate(fields)
    except ValidationError as e:
        raise ValidationException(
            "Invalid task fields", errors=e.errors(include_url=False, include_context=False)
        ) from e
