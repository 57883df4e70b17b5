"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic. Startup opens the task store
and checks it is reachable; failure there is fatal (the app does not start).
After startup a broken store only fails individual requests.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from tasksync.application.interfaces.repositories import ITaskRepository
from tasksync.core.config import Settings, get_settings
from tasksync.domain.exceptions import StoreUnavailableException

logger = logging.getLogger(__name__)


def create_task_repository(settings: Settings) -> ITaskRepository:
    """Build the configured task store (memory or firestore)."""
    if settings.database_backend == "firestore":
        from tasksync.infrastructure.firebase import (
            FirestoreTaskRepository,
            create_firestore_client,
        )

        return FirestoreTaskRepository(
            create_firestore_client(settings),
            collection=settings.firestore_collection,
        )
    from tasksync.infrastructure.persistence import InMemoryTaskRepository

    return InMemoryTaskRepository()


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup: task store (unless one was injected on app.state), reachability
    check, notifier wired to the WebSocket manager. Shutdown: notifier
    detached, store closed.
    """
    settings = get_settings()

    # ---- Startup ----
    repo = getattr(app.state, "task_repository", None)
    if repo is None:
        repo = create_task_repository(settings)
        app.state.task_repository = repo
    if not await repo.ping():
        await repo.close()
        raise StoreUnavailableException(settings.database_backend, "ping failed")
    logger.info("Task store ready (%s)", settings.database_backend)

    app.state.notifier.attach(app.state.ws_manager)

    yield

    # ---- Shutdown ----
    app.state.notifier.attach(None)
    await app.state.task_repository.close()
    app.state.task_repository = None
    logger.info("Task store closed")
