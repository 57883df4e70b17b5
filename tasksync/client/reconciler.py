"""Local task collection and the reconciliation rules applied to it.

Ordering rule: the highest per-task version wins, not the last message to
arrive. A task's version starts at 1 and the store bumps it on every update,
so a Created/Updated payload with a lower version than the local copy is
stale and dropped. Equal versions replace in place, which makes echoes of an
already-applied change a no-op.

Deleted ids are remembered as tombstones so a late Created/Updated for the
same id cannot bring the task back. Only the most recent max_tombstones ids
are kept; a full fetch (replace_all) resets both the collection and the
tombstones.

An Updated payload for an id the collection has never seen is appended,
exactly like Created.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from tasksync.domain.enums import TaskPriority, TaskSort, TaskStatus
from tasksync.domain.ordering import filter_tasks, sort_tasks
from tasksync.schemas.events import ChangeEvent, TaskDeletedEvent
from tasksync.schemas.task import Task

logger = logging.getLogger(__name__)

MAX_TOMBSTONES = 10_000


class ApplyOutcome(str, Enum):
    """What a reconciliation step did to the collection."""

    INSERTED = "inserted"
    REPLACED = "replaced"
    REMOVED = "removed"
    STALE = "stale"
    TOMBSTONED = "tombstoned"
    MISSED = "missed"


@dataclass(frozen=True)
class TaskStats:
    """Counts over the local collection."""

    total: int
    by_status: dict[str, int]
    by_priority: dict[str, int]
    completion_percent: int


@dataclass(frozen=True)
class StagedDelete:
    """A task hidden by an optimistic delete, with its former position."""

    index: int
    task: Task


class TaskReconciler:
    """Single owner of a client's task collection.

    Only the entry points below mutate the collection; callers get copies or
    immutable Task models back, never the underlying mapping.
    """

    def __init__(self, max_tombstones: int = MAX_TOMBSTONES) -> None:
        self.max_tombstones = max_tombstones
        self._tasks: dict[str, Task] = {}
        self._tombstones: OrderedDict[str, None] = OrderedDict()

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    def get(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def tasks(self) -> list[Task]:
        """All tasks in collection order (fetch order, then arrival order)."""
        return list(self._tasks.values())

    def is_tombstoned(self, task_id: str) -> bool:
        return task_id in self._tombstones

    def apply(self, event: ChangeEvent) -> ApplyOutcome:
        """Merge one change event into the collection."""
        if isinstance(event, TaskDeletedEvent):
            return self.remove(event.id)
        return self.upsert(event.task)

    def upsert(self, task: Task) -> ApplyOutcome:
        """Insert or replace by id unless the task is deleted or the payload is stale."""
        if task.id in self._tombstones:
            logger.debug("Ignoring %s v%d: task was deleted", task.id, task.version)
            return ApplyOutcome.TOMBSTONED
        current = self._tasks.get(task.id)
        if current is None:
            self._tasks[task.id] = task
            return ApplyOutcome.INSERTED
        if task.version < current.version:
            logger.debug(
                "Ignoring stale %s v%d (have v%d)", task.id, task.version, current.version
            )
            return ApplyOutcome.STALE
        self._tasks[task.id] = task
        return ApplyOutcome.REPLACED

    def remove(self, task_id: str) -> ApplyOutcome:
        """Remove by id and tombstone it. A missing id is a logged no-op."""
        self._tombstones[task_id] = None
        self._tombstones.move_to_end(task_id)
        while len(self._tombstones) > self.max_tombstones:
            self._tombstones.popitem(last=False)
        if self._tasks.pop(task_id, None) is None:
            logger.debug("Reconciliation miss: delete for unknown task %s", task_id)
            return ApplyOutcome.MISSED
        return ApplyOutcome.REMOVED

    def replace_all(self, tasks: Iterable[Task]) -> None:
        """Replace the whole collection with a full fetch result."""
        self._tasks = {task.id: task for task in tasks}
        self._tombstones.clear()

    def clear(self) -> None:
        self.replace_all(())

    # Optimistic staging: the session applies a guess first and confirms or
    # rolls it back once the request settles.

    def stage_update(self, task: Task) -> Task | None:
        """Put a speculative copy in place; return the entry it replaced (None if absent)."""
        previous = self._tasks.get(task.id)
        if previous is not None:
            self._tasks[task.id] = task
        return previous

    def rollback_update(self, staged: Task, previous: Task) -> bool:
        """Restore previous unless something newer already replaced the staged copy."""
        if self._tasks.get(staged.id) is not staged:
            return False
        self._tasks[staged.id] = previous
        return True

    def stage_delete(self, task_id: str) -> StagedDelete | None:
        """Hide a task without tombstoning it; None if it is not present."""
        if task_id not in self._tasks:
            return None
        index = list(self._tasks).index(task_id)
        return StagedDelete(index=index, task=self._tasks.pop(task_id))

    def rollback_delete(self, staged: StagedDelete) -> bool:
        """Put a hidden task back at its old position unless it was deleted or re-added meanwhile."""
        task_id = staged.task.id
        if task_id in self._tasks or task_id in self._tombstones:
            return False
        items = list(self._tasks.items())
        items.insert(min(staged.index, len(items)), (task_id, staged.task))
        self._tasks = dict(items)
        return True

    def view(
        self,
        status: TaskStatus | None = None,
        priority: TaskPriority | None = None,
        sort: TaskSort | None = None,
    ) -> list[Task]:
        """Filtered and sorted snapshot; sort None keeps collection order."""
        return sort_tasks(filter_tasks(self.tasks(), status, priority), sort)

    def stats(self) -> TaskStats:
        """Totals per status and priority plus completion rounded half-up."""
        by_status = {s: 0 for s in TaskStatus.values()}
        by_priority = {p: 0 for p in TaskPriority.values()}
        for task in self._tasks.values():
            by_status[task.status.value] += 1
            by_priority[task.priority.value] += 1
        total = len(self._tasks)
        completed = by_status[TaskStatus.COMPLETED.value]
        percent = int(completed * 100 / total + 0.5) if total else 0
        return TaskStats(
            total=total,
            by_status=by_status,
            by_priority=by_priority,
            completion_percent=percent,
        )
