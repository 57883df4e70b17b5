"""TaskApiClient: typed results from the real app, error mapping from mocked responses."""

from collections.abc import AsyncIterator
from datetime import date

import httpx
import pytest
from fastapi import FastAPI

from tasksync.client import TaskApiClient
from tasksync.domain.enums import TaskPriority, TaskSort, TaskStatus
from tasksync.domain.exceptions import (
    TaskNotFoundException,
    TransportException,
    ValidationException,
)
from tasksync.schemas.task import TaskCreateRequest, TaskUpdateRequest


@pytest.fixture
async def api(app: FastAPI) -> AsyncIterator[TaskApiClient]:
    http = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")
    async with http:
        yield TaskApiClient("http://test", http_client=http)


def _mocked(handler) -> TaskApiClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test")
    return TaskApiClient("http://test", http_client=http)


def _create_request(title: str = "Buy milk", **overrides) -> TaskCreateRequest:
    fields = {
        "title": title,
        "due_date": date(2025, 3, 1),
        "assigned_to": "alice",
        "created_by": "bob",
    }
    fields.update(overrides)
    return TaskCreateRequest(**fields)


async def test_crud_round_trip(api: TaskApiClient) -> None:
    created = await api.create_task(_create_request(priority=TaskPriority.HIGH))
    assert created.version == 1
    assert created.priority is TaskPriority.HIGH

    assert [t.id for t in await api.list_tasks()] == [created.id]
    assert (await api.get_task(created.id)) == created

    updated = await api.update_task(created.id, TaskUpdateRequest(status=TaskStatus.COMPLETED))
    assert updated.status is TaskStatus.COMPLETED
    assert updated.title == "Buy milk"
    assert updated.version == 2

    assert await api.delete_task(created.id) == created.id
    assert await api.list_tasks() == []


async def test_list_passes_filters(api: TaskApiClient) -> None:
    await api.create_task(_create_request("a", priority=TaskPriority.LOW))
    await api.create_task(_create_request("b", priority=TaskPriority.HIGH))
    high_first = await api.list_tasks(sort=TaskSort.PRIORITY_DESC)
    assert [t.title for t in high_first] == ["b", "a"]
    assert [t.title for t in await api.list_tasks(priority=TaskPriority.LOW)] == ["a"]


async def test_not_found_maps_to_task_not_found(api: TaskApiClient) -> None:
    with pytest.raises(TaskNotFoundException) as exc_info:
        await api.update_task("missing", TaskUpdateRequest(title="x"))
    assert exc_info.value.task_id == "missing"
    with pytest.raises(TaskNotFoundException):
        await api.delete_task("missing")


async def test_422_maps_to_validation_exception() -> None:
    body = {
        "error": "VALIDATION_ERROR",
        "message": "Request validation failed",
        "details": [{"loc": ["body", "title"], "msg": "Field required"}],
    }
    api = _mocked(lambda request: httpx.Response(422, json=body))
    with pytest.raises(ValidationException) as exc_info:
        await api.create_task(_create_request())
    assert exc_info.value.details["errors"][0]["loc"] == ["body", "title"]


async def test_server_error_maps_to_retryable_transport_exception() -> None:
    api = _mocked(lambda request: httpx.Response(500, json={"error": "INTERNAL_ERROR"}))
    with pytest.raises(TransportException) as exc_info:
        await api.list_tasks()
    assert exc_info.value.details["retryable"] is True


async def test_connection_error_maps_to_transport_exception() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(TransportException):
        await _mocked(handler).get_task("t1")


async def test_malformed_task_payload_never_returned() -> None:
    """A task with an out-of-range status is rejected before reaching the caller."""
    bad = {
        "id": "t1",
        "title": "x",
        "status": "archived",
        "priority": "low",
        "dueDate": "2025-01-01",
        "assignedTo": "a",
        "createdBy": "b",
        "createdAt": "2025-01-01T00:00:00Z",
        "updatedAt": "2025-01-01T00:00:00Z",
        "version": 1,
    }
    api = _mocked(lambda request: httpx.Response(200, json=bad))
    with pytest.raises(TransportException) as exc_info:
        await api.get_task("t1")
    assert exc_info.value.details["retryable"] is False


async def test_non_json_body_is_transport_error() -> None:
    api = _mocked(lambda request: httpx.Response(200, text="null-ish <html>"))
    with pytest.raises(TransportException):
        await api.list_tasks()


async def test_aclose_leaves_injected_client_open() -> None:
    http = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, json=[])))
    api = TaskApiClient("http://test", http_client=http)
    await api.aclose()
    assert http.is_closed is False
    await http.aclose()
