"""Seed sample tasks through the running API.

Goes through POST /api/v1/tasks (not the store directly) so connected
clients receive the task_created events.

Usage:
    uv run python -m scripts.seed_dev_data [path/to/tasks.json]

Without a path a small built-in sample set is used. The JSON file holds a
list of task bodies in wire format (title, dueDate, assignedTo, createdBy,
optional description/status/priority). Reads TASKSYNC_API_URL from .env.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from datetime import date, timedelta
from pathlib import Path

from dotenv import load_dotenv

from tasksync.client import TaskApiClient
from tasksync.core.config import get_client_settings
from tasksync.domain.exceptions import TaskSyncException
from tasksync.schemas.task import Task, TaskCreateRequest

logger = logging.getLogger("seed_dev_data")


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent


def _load_env() -> None:
    """Load .env from project root so get_client_settings() sees TASKSYNC_* when run as script."""
    load_dotenv(_project_root() / ".env", override=True)


def sample_tasks(today: date | None = None) -> list[TaskCreateRequest]:
    """Built-in sample set spread over the next two weeks."""
    today = today or date.today()
    rows = [
        ("Buy milk", "low", "pending", 1),
        ("Prepare sprint demo", "high", "in_progress", 3),
        ("Review pull requests", "medium", "pending", 2),
        ("Renew domain", "high", "pending", 14),
        ("Archive old tickets", "low", "completed", -1),
    ]
    return [
        TaskCreateRequest(
            title=title,
            priority=priority,
            status=status,
            due_date=today + timedelta(days=days),
            assigned_to="alice",
            created_by="seed",
        )
        for title, priority, status, days in rows
    ]


def load_tasks(path: Path) -> list[TaskCreateRequest]:
    with open(path, encoding="utf-8") as f:
        return [TaskCreateRequest.model_validate(item) for item in json.load(f)]


async def seed(api: TaskApiClient, tasks: list[TaskCreateRequest]) -> list[Task]:
    """Create each task; stops at the first failure."""
    created = []
    for request in tasks:
        task = await api.create_task(request)
        logger.info("Created %s (%s)", task.title, task.id)
        created.append(task)
    return created


async def main(argv: list[str]) -> int:
    _load_env()
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    get_client_settings.cache_clear()
    settings = get_client_settings()
    tasks = load_tasks(Path(argv[0])) if argv else sample_tasks()
    async with TaskApiClient(settings.api_url, timeout=settings.request_timeout) as api:
        try:
            created = await seed(api, tasks)
        except TaskSyncException as e:
            logger.error("Seeding failed: %s", e.message)
            return 1
    logger.info("Seeded %d task(s) into %s", len(created), settings.api_url)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main(sys.argv[1:])))
