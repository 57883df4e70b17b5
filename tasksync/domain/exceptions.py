"""Domain exceptions for tasksync.

Shared by the server (mapped to HTTP responses in exception handlers) and the
sync client (raised to the caller of a failed mutation).
"""

from typing import Any


class TaskSyncException(Exception):
    """Base exception for all tasksync errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, task_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API error responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(TaskSyncException):
    """Raised when mutation input is malformed (missing field or enum violation)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        errors: list[Any] | None = None,
    ) -> None:
        """Initialize with message and optional field name or error list.

        Args:
            message: Description of the validation failure.
            field: Optional field that failed validation.
            errors: Optional list of per-field errors (e.g. from the API).
        """
        details: dict[str, Any] = {}
        if field:
            details["field"] = field
        if errors:
            details["errors"] = errors
        super().__init__(message, "VALIDATION_ERROR", details)


class TaskNotFoundException(TaskSyncException):
    """Raised when a mutation or lookup targets an unknown task id."""

    def __init__(self, task_id: str) -> None:
        super().__init__(
            f"Task not found: {task_id}",
            "TASK_NOT_FOUND",
            {"task_id": task_id},
        )

    @property
    def task_id(self) -> str:
        return self.details["task_id"]


class TransportException(TaskSyncException):
    """Raised when a request or the broadcast connection fails at the transport level."""

    def __init__(self, message: str, *, retryable: bool = True) -> None:
        super().__init__(message, "TRANSPORT_ERROR", {"retryable": retryable})


class StoreUnavailableException(TaskSyncException):
    """Raised at startup when the configured store cannot be reached."""

    def __init__(self, backend: str, reason: str) -> None:
        super().__init__(
            f"Task store '{backend}' is unavailable: {reason}",
            "STORE_UNAVAILABLE",
            {"backend": backend},
        )
