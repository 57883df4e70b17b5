"""Domain enumerations for tasks.

Enums represent the fixed value sets a Task may carry. Anything outside these
sets is rejected before it reaches the store or a client's collection.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class TaskStatus(_ValuesMixin, str, Enum):
    """Task lifecycle status."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TaskPriority(_ValuesMixin, str, Enum):
    """Task priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskSort(_ValuesMixin, str, Enum):
    """Sort orders offered by the list endpoint and the client-side view."""

    DUE_DATE_ASC = "dueDate_asc"
    DUE_DATE_DESC = "dueDate_desc"
    PRIORITY_DESC = "priority_desc"
    PRIORITY_ASC = "priority_asc"
    STATUS = "status"
    CREATED_DESC = "created_desc"
