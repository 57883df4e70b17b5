"""Shared utilities: request context, logging, and cross-cutting helpers.

Used by every layer. No business logic.
"""

from tasksync.shared.context import get_request_id, reset_request_id, set_request_id
from tasksync.shared.utils import ensure_utc, generate_task_id, utc_now

__all__ = [
    "get_request_id",
    "set_request_id",
    "reset_request_id",
    "generate_task_id",
    "utc_now",
    "ensure_utc",
]
