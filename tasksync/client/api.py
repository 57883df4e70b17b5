"""HTTP client for the task API.

Every response body is validated into a Task before it is returned, so a
malformed payload surfaces as an exception here and never reaches the
reconciler. Status codes map onto the domain exceptions:

- 404 → TaskNotFoundException
- 400/422 → ValidationException
- anything else ≥ 400, connection errors and timeouts → TransportException
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from tasksync.domain.enums import TaskPriority, TaskSort, TaskStatus
from tasksync.domain.exceptions import (
    TaskNotFoundException,
    TransportException,
    ValidationException,
)
from tasksync.schemas.task import Task, TaskCreateRequest, TaskUpdateRequest

logger = logging.getLogger(__name__)

TASKS_PATH = "/api/v1/tasks"


class TaskApiClient:
    """Thin async wrapper over /api/v1/tasks.

    Pass http_client to share a client or to route requests in-process
    (e.g. httpx.ASGITransport in tests); it is then not closed by aclose().
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> "TaskApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def list_tasks(
        self,
        status: TaskStatus | None = None,
        priority: TaskPriority | None = None,
        sort: TaskSort | None = None,
    ) -> list[Task]:
        params = {
            key: value.value
            for key, value in (("status", status), ("priority", priority), ("sort", sort))
            if value is not None
        }
        data = await self._request("GET", TASKS_PATH, params=params)
        if not isinstance(data, list):
            raise TransportException("Malformed task list response", retryable=False)
        return [self._parse_task(item) for item in data]

    async def get_task(self, task_id: str) -> Task:
        data = await self._request("GET", f"{TASKS_PATH}/{task_id}", task_id=task_id)
        return self._parse_task(data)

    async def create_task(self, request: TaskCreateRequest) -> Task:
        body = request.model_dump(mode="json", by_alias=True)
        data = await self._request("POST", TASKS_PATH, json=body)
        return self._parse_task(data)

    async def update_task(self, task_id: str, request: TaskUpdateRequest) -> Task:
        body = request.model_dump(mode="json", by_alias=True, exclude_none=True)
        data = await self._request("PUT", f"{TASKS_PATH}/{task_id}", json=body, task_id=task_id)
        return self._parse_task(data)

    async def delete_task(self, task_id: str) -> str:
        """Delete a task; returns the deleted id."""
        data = await self._request("DELETE", f"{TASKS_PATH}/{task_id}", task_id=task_id)
        if isinstance(data, dict) and data.get("id"):
            return str(data["id"])
        return task_id

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, str] | None = None,
        task_id: str | None = None,
    ) -> Any:
        try:
            response = await self._http.request(method, path, json=json, params=params)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise TransportException(f"{method} {path} failed: {e}") from e

        if response.status_code == 404 and task_id is not None:
            raise TaskNotFoundException(task_id)
        if response.status_code in (400, 422):
            body = _json_or_none(response) or {}
            errors = body.get("details") if isinstance(body, dict) else None
            message = body.get("message") if isinstance(body, dict) else None
            raise ValidationException(
                message or "Request validation failed",
                errors=errors if isinstance(errors, list) else None,
            )
        if response.status_code >= 400:
            raise TransportException(
                f"{method} {path} returned {response.status_code}",
                retryable=response.status_code >= 500,
            )
        body = _json_or_none(response)
        if body is None:
            raise TransportException(f"{method} {path} returned a non-JSON body", retryable=False)
        return body

    @staticmethod
    def _parse_task(data: Any) -> Task:
        try:
            return Task.model_validate(data)
        except ValidationError as e:
            logger.warning("Rejected malformed task payload: %s", e)
            raise TransportException("Malformed task payload", retryable=False) from e


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None
