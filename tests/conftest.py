"""Pytest configuration and fixtures for tasksync.

HTTP tests run against create_app() with an injected in-memory store. The
fixture enters the app lifespan itself because ASGITransport does not run it.
"""

from collections.abc import AsyncIterator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from tasksync.core.lifespan import create_lifespan
from tasksync.core.limiter import limiter
from tasksync.infrastructure.persistence import InMemoryTaskRepository
from tasksync.main import create_app


@pytest.fixture(autouse=True)
def _reset_rate_limits() -> None:
    """The limiter is module-level; start every test with an empty window."""
    limiter.reset()


@pytest.fixture
def task_repo() -> InMemoryTaskRepository:
    return InMemoryTaskRepository()


@pytest.fixture
async def app(task_repo: InMemoryTaskRepository) -> AsyncIterator[FastAPI]:
    """Started application (store pinged, notifier attached)."""
    application = create_app(task_repository=task_repo)
    async with create_lifespan(application):
        yield application


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def task_payload() -> dict:
    """Valid create body (camelCase, as a browser client sends it)."""
    return {
        "title": "Buy milk",
        "description": "2 litres",
        "priority": "high",
        "dueDate": "2025-03-01",
        "assignedTo": "alice",
        "createdBy": "bob",
    }
