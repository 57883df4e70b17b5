"""Use cases: task operations."""

from tasksync.application.use_cases.tasks import TaskService

__all__ = ["TaskService"]
