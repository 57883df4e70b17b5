"""Process-local task store."""

from tasksync.infrastructure.persistence.memory_task_repo import InMemoryTaskRepository

__all__ = ["InMemoryTaskRepository"]
