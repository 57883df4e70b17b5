"""Application DTOs (no dependency on HTTP schemas or store documents)."""

from tasksync.application.dtos.task import TaskCreate, TaskQuery, TaskResult, TaskUpdate

__all__ = ["TaskCreate", "TaskQuery", "TaskResult", "TaskUpdate"]
