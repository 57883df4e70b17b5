"""Task API: thin routes delegating to TaskService.

Each successful mutation schedules exactly one change event as a background
task, so the response is never held up by the broadcast.
"""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request

from tasksync.api.v1.dependencies import get_notifier, get_task_service
from tasksync.application.dtos.task import TaskQuery
from tasksync.application.interfaces import IChangeNotifier
from tasksync.application.use_cases.tasks import TaskService
from tasksync.core.limiter import limit_writes
from tasksync.domain.enums import TaskPriority, TaskSort, TaskStatus
from tasksync.schemas.task import (
    Task,
    TaskCreateRequest,
    TaskDeletedResponse,
    TaskUpdateRequest,
)

router = APIRouter()


@router.get("", response_model=list[Task])
async def list_tasks(
    task_svc: Annotated[TaskService, Depends(get_task_service)],
    status: Annotated[TaskStatus | None, Query()] = None,
    priority: Annotated[TaskPriority | None, Query()] = None,
    sort: Annotated[TaskSort | None, Query()] = None,
):
    """List tasks, newest first unless sort is given."""
    results = await task_svc.list_tasks(
        TaskQuery(status=status, priority=priority, sort=sort)
    )
    return [Task.from_result(r) for r in results]


@router.get("/{task_id}", response_model=Task)
async def get_task(
    task_id: str,
    task_svc: Annotated[TaskService, Depends(get_task_service)],
):
    """Get a single task (404 if unknown)."""
    return Task.from_result(await task_svc.get_task(task_id))


@router.post("", response_model=Task, status_code=201)
@limit_writes
async def create_task(
    request: Request,
    body: TaskCreateRequest,
    background_tasks: BackgroundTasks,
    task_svc: Annotated[TaskService, Depends(get_task_service)],
    notifier: Annotated[IChangeNotifier, Depends(get_notifier)],
):
    """Create a task and announce task_created."""
    created = await task_svc.create_task(body.to_dto())
    background_tasks.add_task(notifier.emit_created, created)
    return Task.from_result(created)


@router.api_route("/{task_id}", methods=["PUT", "PATCH"], response_model=Task)
@limit_writes
async def update_task(
    request: Request,
    task_id: str,
    body: TaskUpdateRequest,
    background_tasks: BackgroundTasks,
    task_svc: Annotated[TaskService, Depends(get_task_service)],
    notifier: Annotated[IChangeNotifier, Depends(get_notifier)],
):
    """Update a task (partial or full body) and announce task_updated."""
    updated = await task_svc.update_task(task_id, body.to_dto())
    background_tasks.add_task(notifier.emit_updated, updated)
    return Task.from_result(updated)


@router.delete("/{task_id}", response_model=TaskDeletedResponse)
@limit_writes
async def delete_task(
    request: Request,
    task_id: str,
    background_tasks: BackgroundTasks,
    task_svc: Annotated[TaskService, Depends(get_task_service)],
    notifier: Annotated[IChangeNotifier, Depends(get_notifier)],
):
    """Delete a task and announce task_deleted."""
    deleted_id = await task_svc.delete_task(task_id)
    background_tasks.add_task(notifier.emit_deleted, deleted_id)
    return TaskDeletedResponse(id=deleted_id)
