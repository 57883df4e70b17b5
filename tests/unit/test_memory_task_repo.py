"""InMemoryTaskRepository: store-assigned ids, versions and list queries."""

from datetime import date

from tasksync.application.dtos.task import TaskCreate, TaskQuery
from tasksync.domain.enums import TaskPriority, TaskSort, TaskStatus
from tasksync.infrastructure.persistence import InMemoryTaskRepository


def _create(title: str = "Buy milk", **overrides) -> TaskCreate:
    fields = {
        "title": title,
        "due_date": date(2025, 3, 1),
        "assigned_to": "alice",
        "created_by": "bob",
    }
    fields.update(overrides)
    return TaskCreate(**fields)


async def test_create_assigns_id_timestamps_and_version() -> None:
    repo = InMemoryTaskRepository()
    a = await repo.create_task(_create())
    b = await repo.create_task(_create())
    assert a.id and b.id and a.id != b.id
    assert a.version == 1
    assert a.created_at == a.updated_at
    assert a.created_at.tzinfo is not None


async def test_update_increments_version_once_per_update() -> None:
    repo = InMemoryTaskRepository()
    task = await repo.create_task(_create())
    first = await repo.update_task(task.id, {"title": "one"})
    second = await repo.update_task(task.id, {"status": TaskStatus.COMPLETED})
    assert (first.version, second.version) == (2, 3)
    assert second.title == "one"
    assert second.created_at == task.created_at
    assert second.updated_at >= first.updated_at


async def test_update_and_delete_unknown() -> None:
    repo = InMemoryTaskRepository()
    assert await repo.update_task("nope", {"title": "x"}) is None
    assert await repo.delete_task("nope") is False


async def test_delete_then_get() -> None:
    repo = InMemoryTaskRepository()
    task = await repo.create_task(_create())
    assert await repo.delete_task(task.id) is True
    assert await repo.get_by_id(task.id) is None


async def test_list_filters_and_sorts() -> None:
    repo = InMemoryTaskRepository()
    await repo.create_task(_create("low", priority=TaskPriority.LOW))
    await repo.create_task(_create("high", priority=TaskPriority.HIGH, status=TaskStatus.COMPLETED))

    titles = [t.title for t in await repo.list_tasks(TaskQuery(sort=TaskSort.PRIORITY_DESC))]
    assert titles == ["high", "low"]

    done = await repo.list_tasks(TaskQuery(status=TaskStatus.COMPLETED))
    assert [t.title for t in done] == ["high"]


async def test_ping_and_close() -> None:
    repo = InMemoryTaskRepository()
    assert await repo.ping() is True
    await repo.close()
