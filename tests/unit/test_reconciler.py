"""TaskReconciler: idempotence, no-op deletes, convergence and version ordering."""

import itertools
from datetime import date, datetime, timezone

import pytest

from tasksync.client.reconciler import ApplyOutcome, TaskReconciler
from tasksync.domain.enums import TaskPriority, TaskSort, TaskStatus
from tasksync.schemas.events import (
    TaskCreatedEvent,
    TaskDeletedEvent,
    TaskUpdatedEvent,
    parse_change_event,
)
from tasksync.schemas.task import Task


def _task(
    task_id: str = "t1",
    version: int = 1,
    title: str = "Buy milk",
    status: TaskStatus = TaskStatus.PENDING,
    priority: TaskPriority = TaskPriority.MEDIUM,
    due: date = date(2025, 3, 1),
    created_minute: int = 0,
) -> Task:
    created = datetime(2025, 1, 1, 12, created_minute, tzinfo=timezone.utc)
    return Task(
        id=task_id,
        title=title,
        status=status,
        priority=priority,
        due_date=due,
        assigned_to="alice",
        created_by="bob",
        created_at=created,
        updated_at=created,
        version=version,
    )


def test_created_twice_equals_created_once() -> None:
    once = TaskReconciler()
    once.apply(TaskCreatedEvent(task=_task()))

    twice = TaskReconciler()
    assert twice.apply(TaskCreatedEvent(task=_task())) is ApplyOutcome.INSERTED
    assert twice.apply(TaskCreatedEvent(task=_task())) is ApplyOutcome.REPLACED
    assert twice.tasks() == once.tasks()
    assert len(twice) == 1


def test_updated_twice_equals_updated_once() -> None:
    rec = TaskReconciler()
    rec.apply(TaskCreatedEvent(task=_task()))
    event = TaskUpdatedEvent(task=_task(version=2, title="Buy bread"))
    rec.apply(event)
    snapshot = rec.tasks()
    rec.apply(event)
    assert rec.tasks() == snapshot


def test_delete_unknown_id_is_a_miss() -> None:
    rec = TaskReconciler()
    rec.apply(TaskCreatedEvent(task=_task("t1")))
    before = rec.tasks()
    assert rec.apply(TaskDeletedEvent(id="nope")) is ApplyOutcome.MISSED
    assert rec.tasks() == before


def test_delete_removes_and_second_delete_is_a_miss() -> None:
    rec = TaskReconciler()
    rec.apply(TaskCreatedEvent(task=_task()))
    assert rec.apply(TaskDeletedEvent(id="t1")) is ApplyOutcome.REMOVED
    assert rec.apply(TaskDeletedEvent(id="t1")) is ApplyOutcome.MISSED
    assert rec.tasks() == []


def test_disjoint_ids_converge_in_any_order() -> None:
    events = [
        TaskCreatedEvent(task=_task("a")),
        TaskUpdatedEvent(task=_task("b", version=3, title="b3")),
        TaskCreatedEvent(task=_task("c", priority=TaskPriority.HIGH)),
        TaskDeletedEvent(id="d"),
    ]
    results = []
    for order in itertools.permutations(events):
        rec = TaskReconciler()
        for event in order:
            rec.apply(event)
        results.append({t.id: t for t in rec.tasks()})
    assert all(r == results[0] for r in results)
    assert set(results[0]) == {"a", "b", "c"}


def test_successive_updates_keep_the_later_one() -> None:
    rec = TaskReconciler()
    rec.apply(TaskCreatedEvent(task=_task()))
    rec.apply(TaskUpdatedEvent(task=_task(version=2, title="first")))
    rec.apply(TaskUpdatedEvent(task=_task(version=3, title="second")))
    assert rec.get("t1").title == "second"


def test_equal_version_update_replaces() -> None:
    rec = TaskReconciler()
    rec.apply(TaskUpdatedEvent(task=_task(version=2, title="first")))
    assert rec.apply(TaskUpdatedEvent(task=_task(version=2, title="second"))) is (
        ApplyOutcome.REPLACED
    )
    assert rec.get("t1").title == "second"


def test_stale_update_is_ignored() -> None:
    """A late event carrying an older version never overwrites newer state."""
    rec = TaskReconciler()
    rec.apply(TaskUpdatedEvent(task=_task(version=3, title="newest")))
    assert rec.apply(TaskUpdatedEvent(task=_task(version=2, title="older"))) is (
        ApplyOutcome.STALE
    )
    assert rec.apply(TaskCreatedEvent(task=_task(version=1))) is ApplyOutcome.STALE
    assert rec.get("t1").title == "newest"


def test_update_for_unknown_id_is_appended() -> None:
    rec = TaskReconciler()
    rec.apply(TaskCreatedEvent(task=_task("a")))
    assert rec.apply(TaskUpdatedEvent(task=_task("b", version=4))) is ApplyOutcome.INSERTED
    assert [t.id for t in rec.tasks()] == ["a", "b"]


def test_replace_keeps_position() -> None:
    rec = TaskReconciler()
    for task_id in ("a", "b", "c"):
        rec.apply(TaskCreatedEvent(task=_task(task_id)))
    rec.apply(TaskUpdatedEvent(task=_task("b", version=2, title="changed")))
    assert [t.id for t in rec.tasks()] == ["a", "b", "c"]


def test_deleted_task_is_not_resurrected_by_late_events() -> None:
    rec = TaskReconciler()
    rec.apply(TaskCreatedEvent(task=_task()))
    rec.apply(TaskDeletedEvent(id="t1"))
    assert rec.apply(TaskUpdatedEvent(task=_task(version=2))) is ApplyOutcome.TOMBSTONED
    assert rec.apply(TaskCreatedEvent(task=_task())) is ApplyOutcome.TOMBSTONED
    assert "t1" not in rec


def test_delete_before_create_keeps_task_out() -> None:
    rec = TaskReconciler()
    rec.apply(TaskDeletedEvent(id="t1"))
    rec.apply(TaskCreatedEvent(task=_task()))
    assert rec.tasks() == []


def test_replace_all_resets_collection_and_tombstones() -> None:
    rec = TaskReconciler()
    rec.apply(TaskCreatedEvent(task=_task("gone")))
    rec.apply(TaskDeletedEvent(id="t1"))
    rec.replace_all([_task("t1", version=5), _task("x")])
    assert [t.id for t in rec.tasks()] == ["t1", "x"]
    assert not rec.is_tombstoned("t1")
    # the fetch wins even over a higher local version
    rec.upsert(_task("x", version=9))
    rec.replace_all([_task("x", version=2)])
    assert rec.get("x").version == 2


def test_tombstones_keep_only_most_recent_ids() -> None:
    rec = TaskReconciler(max_tombstones=2)
    for task_id in ("a", "b", "c"):
        rec.remove(task_id)
    assert not rec.is_tombstoned("a")
    assert rec.is_tombstoned("b") and rec.is_tombstoned("c")
    # deleting again refreshes an id's place in the window
    rec.remove("b")
    rec.remove("d")
    assert rec.is_tombstoned("b")
    assert not rec.is_tombstoned("c")
    assert rec.upsert(_task("a")) is ApplyOutcome.INSERTED


def test_apply_parsed_wire_frames() -> None:
    rec = TaskReconciler()
    frame = (
        '{"type": "task_created", "task": {"id": "w1", "title": "Wire", "description": "",'
        ' "status": "pending", "priority": "low", "dueDate": "2025-02-01",'
        ' "assignedTo": "a", "createdBy": "b", "createdAt": "2025-01-01T00:00:00Z",'
        ' "updatedAt": "2025-01-01T00:00:00Z", "version": 1}}'
    )
    rec.apply(parse_change_event(frame))
    rec.apply(parse_change_event('{"type": "task_deleted", "id": "w1"}'))
    assert rec.tasks() == []


def test_rollback_update_restores_previous() -> None:
    rec = TaskReconciler()
    original = _task()
    rec.upsert(original)
    staged = original.model_copy(update={"title": "guess"})
    previous = rec.stage_update(staged)
    assert rec.get("t1").title == "guess"
    assert rec.rollback_update(staged, previous) is True
    assert rec.get("t1") is original


def test_rollback_update_keeps_newer_event() -> None:
    rec = TaskReconciler()
    original = _task()
    rec.upsert(original)
    staged = original.model_copy(update={"title": "guess"})
    previous = rec.stage_update(staged)
    rec.apply(TaskUpdatedEvent(task=_task(version=2, title="someone else")))
    assert rec.rollback_update(staged, previous) is False
    assert rec.get("t1").title == "someone else"


def test_rollback_delete_restores_position() -> None:
    rec = TaskReconciler()
    for task_id in ("a", "b", "c"):
        rec.upsert(_task(task_id))
    staged = rec.stage_delete("b")
    assert [t.id for t in rec.tasks()] == ["a", "c"]
    assert not rec.is_tombstoned("b")
    assert rec.rollback_delete(staged) is True
    assert [t.id for t in rec.tasks()] == ["a", "b", "c"]


def test_rollback_delete_skipped_after_confirmed_delete() -> None:
    rec = TaskReconciler()
    rec.upsert(_task("a"))
    staged = rec.stage_delete("a")
    rec.apply(TaskDeletedEvent(id="a"))
    assert rec.rollback_delete(staged) is False
    assert rec.tasks() == []


def test_stage_delete_unknown_id() -> None:
    assert TaskReconciler().stage_delete("nope") is None


def test_view_filters_and_sorts() -> None:
    rec = TaskReconciler()
    rec.replace_all(
        [
            _task("a", priority=TaskPriority.LOW, due=date(2025, 1, 3), created_minute=1),
            _task("b", priority=TaskPriority.HIGH, due=date(2025, 1, 1), created_minute=2,
                  status=TaskStatus.COMPLETED),
            _task("c", priority=TaskPriority.MEDIUM, due=date(2025, 1, 2), created_minute=3,
                  status=TaskStatus.IN_PROGRESS),
        ]
    )
    assert [t.id for t in rec.view()] == ["a", "b", "c"]
    assert [t.id for t in rec.view(sort=TaskSort.PRIORITY_DESC)] == ["b", "c", "a"]
    assert [t.id for t in rec.view(sort=TaskSort.PRIORITY_ASC)] == ["a", "c", "b"]
    assert [t.id for t in rec.view(sort=TaskSort.DUE_DATE_ASC)] == ["b", "c", "a"]
    assert [t.id for t in rec.view(sort=TaskSort.DUE_DATE_DESC)] == ["a", "c", "b"]
    assert [t.id for t in rec.view(sort=TaskSort.STATUS)] == ["a", "c", "b"]
    assert [t.id for t in rec.view(sort=TaskSort.CREATED_DESC)] == ["c", "b", "a"]
    assert [t.id for t in rec.view(status=TaskStatus.COMPLETED)] == ["b"]
    assert [t.id for t in rec.view(priority=TaskPriority.LOW)] == ["a"]


@pytest.mark.parametrize(
    ("completed", "total", "percent"),
    [(0, 0, 0), (1, 3, 33), (2, 3, 67), (1, 2, 50), (3, 3, 100)],
)
def test_stats_completion_percent(completed: int, total: int, percent: int) -> None:
    rec = TaskReconciler()
    rec.replace_all(
        _task(str(i), status=TaskStatus.COMPLETED if i < completed else TaskStatus.PENDING)
        for i in range(total)
    )
    stats = rec.stats()
    assert stats.total == total
    assert stats.by_status["completed"] == completed
    assert stats.completion_percent == percent


def test_stats_counts_by_priority() -> None:
    rec = TaskReconciler()
    rec.replace_all([_task("a", priority=TaskPriority.HIGH), _task("b", priority=TaskPriority.HIGH)])
    stats = rec.stats()
    assert stats.by_priority == {"low": 0, "medium": 0, "high": 2}
    assert stats.by_status == {"pending": 2, "in_progress": 0, "completed": 0}
