"""Developer scripts: sample data and the watch renderer."""

from collections.abc import AsyncIterator
from datetime import date

import httpx
import pytest
from fastapi import FastAPI

from scripts.seed_dev_data import load_tasks, sample_tasks, seed
from scripts.watch_tasks import render
from tasksync.client import TaskApiClient, TaskReconciler


@pytest.fixture
async def api(app: FastAPI) -> AsyncIterator[TaskApiClient]:
    http = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")
    async with http:
        yield TaskApiClient("http://test", http_client=http)


def test_sample_tasks_are_valid() -> None:
    tasks = sample_tasks(date(2025, 1, 1))
    assert len(tasks) == 5
    assert tasks[0].due_date == date(2025, 1, 2)


def test_load_tasks_reads_wire_format(tmp_path) -> None:
    path = tmp_path / "tasks.json"
    path.write_text(
        '[{"title": "Buy milk", "dueDate": "2025-03-01", "assignedTo": "a", "createdBy": "b"}]',
        encoding="utf-8",
    )
    [task] = load_tasks(path)
    assert task.title == "Buy milk"
    assert task.due_date == date(2025, 3, 1)


async def test_seed_creates_through_api(api: TaskApiClient) -> None:
    created = await seed(api, sample_tasks(date(2025, 1, 1)))
    assert len(created) == 5
    assert len(await api.list_tasks()) == 5

    reconciler = TaskReconciler()
    reconciler.replace_all(created)
    output = render(reconciler)
    assert "Buy milk" in output
    assert output.endswith("5 task(s), 20% completed")
