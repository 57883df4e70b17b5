"""Firestore-backed task repository (implements ITaskRepository).

Each mutation is a single commit. Updates carry an updateTime precondition
taken from the snapshot they patch plus a server-side increment of the version
field; the new version is read from the commit response. Deletes carry an
exists precondition, so an unknown id surfaces as NOT_FOUND instead of an upsert.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

import httpx

from tasksync.application.dtos.task import TaskCreate, TaskQuery, TaskResult
from tasksync.domain.enums import TaskPriority, TaskSort, TaskStatus
from tasksync.domain.exceptions import StoreUnavailableException
from tasksync.domain.ordering import PRIORITY_RANK, STATUS_RANK
from tasksync.infrastructure.firebase import collections as c
from tasksync.infrastructure.firebase._rest_client import (
    DocumentSnapshot,
    FirestoreRESTClient,
    PreconditionFailedError,
)
from tasksync.infrastructure.firebase._rest_encoding import (
    decode_fields,
    decode_value,
    encode_fields,
)
from tasksync.shared.utils.datetime import ensure_utc, utc_now
from tasksync.shared.utils.generators import generate_task_id

logger = logging.getLogger(__name__)

_UPDATE_ATTEMPTS = 3

_SNAKE_TO_FIELD: dict[str, str] = {
    "title": c.FIELD_TITLE,
    "description": c.FIELD_DESCRIPTION,
    "status": c.FIELD_STATUS,
    "priority": c.FIELD_PRIORITY,
    "due_date": c.FIELD_DUE_DATE,
    "assigned_to": c.FIELD_ASSIGNED_TO,
    "created_by": c.FIELD_CREATED_BY,
}

_SORT_ORDER: dict[TaskSort, tuple[str, str]] = {
    TaskSort.DUE_DATE_ASC: (c.FIELD_DUE_DATE, "ASCENDING"),
    TaskSort.DUE_DATE_DESC: (c.FIELD_DUE_DATE, "DESCENDING"),
    TaskSort.PRIORITY_DESC: (c.FIELD_PRIORITY_RANK, "DESCENDING"),
    TaskSort.PRIORITY_ASC: (c.FIELD_PRIORITY_RANK, "ASCENDING"),
    TaskSort.STATUS: (c.FIELD_STATUS_RANK, "ASCENDING"),
    TaskSort.CREATED_DESC: (c.FIELD_CREATED_AT, "DESCENDING"),
}


def _to_result(doc: DocumentSnapshot) -> TaskResult:
    """Map a Firestore document to the TaskResult DTO."""
    d = doc.data
    return TaskResult(
        id=doc.id,
        title=d.get(c.FIELD_TITLE, ""),
        description=d.get(c.FIELD_DESCRIPTION) or "",
        status=TaskStatus(d.get(c.FIELD_STATUS, TaskStatus.PENDING.value)),
        priority=TaskPriority(d.get(c.FIELD_PRIORITY, TaskPriority.MEDIUM.value)),
        due_date=date.fromisoformat(d[c.FIELD_DUE_DATE]),
        assigned_to=d.get(c.FIELD_ASSIGNED_TO, ""),
        created_by=d.get(c.FIELD_CREATED_BY, ""),
        created_at=ensure_utc(d[c.FIELD_CREATED_AT]),
        updated_at=ensure_utc(d[c.FIELD_UPDATED_AT]),
        version=int(d.get(c.FIELD_VERSION, 1)),
    )


def _to_fields(changes: dict[str, Any]) -> dict[str, Any]:
    """Map snake_case DTO fields to document fields, adding derived rank fields."""
    out = {_SNAKE_TO_FIELD[k]: v for k, v in changes.items()}
    if "status" in changes:
        out[c.FIELD_STATUS_RANK] = STATUS_RANK[TaskStatus(changes["status"]).value]
    if "priority" in changes:
        out[c.FIELD_PRIORITY_RANK] = PRIORITY_RANK[TaskPriority(changes["priority"]).value]
    return out


def _committed_version(commit: dict, fallback: int) -> int:
    """Read the incremented version from the commit's transform results."""
    results = commit.get("writeResults") or [{}]
    transforms = results[0].get("transformResults") or []
    if not transforms:
        return fallback
    return int(decode_value(transforms[0]))


class FirestoreTaskRepository:
    """Task repository using Firestore. Same contract as InMemoryTaskRepository."""

    def __init__(
        self, client: FirestoreRESTClient, collection: str = c.COLLECTION_TASKS
    ) -> None:
        self._client = client
        self._collection = collection

    async def list_tasks(self, query: TaskQuery) -> list[TaskResult]:
        """Return tasks with server-side filter and order (newest first by default)."""
        filters: list[tuple[str, str, Any]] = []
        if query.status is not None:
            filters.append((c.FIELD_STATUS, "==", query.status.value))
        if query.priority is not None:
            filters.append((c.FIELD_PRIORITY, "==", query.priority.value))
        docs = await self._client.run_query(
            self._collection,
            filters=filters,
            order_by=_SORT_ORDER[query.sort or TaskSort.CREATED_DESC],
        )
        return [_to_result(doc) for doc in docs]

    async def get_by_id(self, task_id: str) -> TaskResult | None:
        doc = await self._client.get_document(self._collection, task_id)
        return _to_result(doc) if doc else None

    async def create_task(self, data: TaskCreate) -> TaskResult:
        """Create with a CUID document id; version starts at 1."""
        now = utc_now()
        fields = _to_fields(
            {
                "title": data.title,
                "description": data.description,
                "status": data.status,
                "priority": data.priority,
                "due_date": data.due_date,
                "assigned_to": data.assigned_to,
                "created_by": data.created_by,
            }
        )
        fields[c.FIELD_CREATED_AT] = now
        fields[c.FIELD_UPDATED_AT] = now
        fields[c.FIELD_VERSION] = 1
        doc = await self._client.create_document(self._collection, generate_task_id(), fields)
        return _to_result(doc)

    async def update_task(
        self, task_id: str, changes: dict[str, Any]
    ) -> TaskResult | None:
        """Patch changed fields and increment version in one commit; None if missing.

        The commit is conditioned on the updateTime of the snapshot it was
        built from, so the returned record is exactly the state this write
        produced. A concurrent write in between fails the precondition and
        the update is retried against a fresh snapshot.
        """
        fields = _to_fields(changes)
        fields[c.FIELD_UPDATED_AT] = utc_now()
        for attempt in range(1, _UPDATE_ATTEMPTS + 1):
            current = await self._client.get_document(self._collection, task_id)
            if current is None:
                return None
            precondition = (
                {"updateTime": current.update_time}
                if current.update_time
                else {"exists": True}
            )
            write = {
                "update": {
                    "name": self._client.document_name(self._collection, task_id),
                    "fields": encode_fields(fields),
                },
                "updateMask": {"fieldPaths": sorted(fields)},
                "updateTransforms": [
                    {"fieldPath": c.FIELD_VERSION, "increment": {"integerValue": "1"}}
                ],
                "currentDocument": precondition,
            }
            try:
                out = await self._client.commit([write])
            except PreconditionFailedError:
                logger.info(
                    "Task %s changed during update (attempt %d), retrying", task_id, attempt
                )
                continue
            if out is None:
                return None
            version = _committed_version(out, int(current.data.get(c.FIELD_VERSION, 1)) + 1)
            merged = {
                **current.data,
                **decode_fields(encode_fields(fields)),
                c.FIELD_VERSION: version,
            }
            return _to_result(DocumentSnapshot(current.id, merged))
        raise StoreUnavailableException(
            "firestore", f"update of {task_id} kept conflicting after {_UPDATE_ATTEMPTS} attempts"
        )

    async def delete_task(self, task_id: str) -> bool:
        write = {
            "delete": self._client.document_name(self._collection, task_id),
            "currentDocument": {"exists": True},
        }
        return await self._client.commit([write]) is not None

    async def ping(self) -> bool:
        """Return True if Firestore answers (a missing probe document still counts)."""
        try:
            await self._client.get_document(self._collection, "__ping__")
        except httpx.HTTPError as e:
            logger.warning("Firestore ping failed: %s", e)
            return False
        return True

    async def close(self) -> None:
        await self._client.aclose()
