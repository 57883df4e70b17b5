"""Domain layer: enums, ordering rules, and exceptions.

No dependencies on infrastructure or presentation. Used by application,
infrastructure, and the sync client.
"""

from tasksync.domain.enums import TaskPriority, TaskSort, TaskStatus
from tasksync.domain.exceptions import (
    StoreUnavailableException,
    TaskNotFoundException,
    TaskSyncException,
    TransportException,
    ValidationException,
)

__all__ = [
    # Enums
    "TaskPriority",
    "TaskSort",
    "TaskStatus",
    # Exceptions
    "StoreUnavailableException",
    "TaskNotFoundException",
    "TaskSyncException",
    "TransportException",
    "ValidationException",
]
