"""Shared utilities: datetime and id generators."""

from tasksync.shared.utils.datetime import ensure_utc, utc_now
from tasksync.shared.utils.generators import generate_task_id

__all__ = [
    "generate_task_id",
    "utc_now",
    "ensure_utc",
]
