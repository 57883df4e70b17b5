"""Filtering and sort rules shared by the in-memory store and the client view.

Works on any object exposing ``status``, ``priority``, ``due_date`` and
``created_at`` attributes (TaskResult on the server, Task on the client).
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, TypeVar

from tasksync.domain.enums import TaskPriority, TaskSort, TaskStatus

T = TypeVar("T")

PRIORITY_RANK: dict[str, int] = {
    TaskPriority.LOW.value: 1,
    TaskPriority.MEDIUM.value: 2,
    TaskPriority.HIGH.value: 3,
}

STATUS_RANK: dict[str, int] = {
    TaskStatus.PENDING.value: 1,
    TaskStatus.IN_PROGRESS.value: 2,
    TaskStatus.COMPLETED.value: 3,
}


def _value(v: Any) -> str:
    return v.value if isinstance(v, TaskStatus | TaskPriority) else v


def filter_tasks(
    tasks: Iterable[T],
    status: TaskStatus | None = None,
    priority: TaskPriority | None = None,
) -> list[T]:
    """Return tasks matching status and priority (None matches everything)."""
    out = []
    for task in tasks:
        if status is not None and _value(task.status) != status.value:
            continue
        if priority is not None and _value(task.priority) != priority.value:
            continue
        out.append(task)
    return out


def sort_tasks(tasks: Iterable[T], sort: TaskSort | None) -> list[T]:
    """Return tasks ordered by sort. None keeps the incoming order.

    Python's sort is stable, so ties keep their incoming relative order.
    """
    items = list(tasks)
    if sort is None:
        return items
    if sort is TaskSort.DUE_DATE_ASC:
        return sorted(items, key=lambda t: t.due_date)
    if sort is TaskSort.DUE_DATE_DESC:
        return sorted(items, key=lambda t: t.due_date, reverse=True)
    if sort is TaskSort.PRIORITY_DESC:
        return sorted(items, key=lambda t: PRIORITY_RANK[_value(t.priority)], reverse=True)
    if sort is TaskSort.PRIORITY_ASC:
        return sorted(items, key=lambda t: PRIORITY_RANK[_value(t.priority)])
    if sort is TaskSort.STATUS:
        return sorted(items, key=lambda t: STATUS_RANK[_value(t.status)])
    return sorted(items, key=lambda t: t.created_at, reverse=True)
