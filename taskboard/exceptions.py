"""
Domain errors raised by the task board core.

Each error carries the HTTP status the API layer maps it to, so route
handlers never have to translate exceptions by hand.
"""

from typing import Any


class TaskBoardError(Exception):
    """Base class for all task board errors."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message}


class ValidationError(TaskBoardError):
    """
    Input failed validation.

    Attributes:
        errors: Mapping of field name to a human-readable message.
    """

    status_code = 422
    default_message = "The given data was invalid."

    def __init__(self, errors: dict[str, str] | None = None, message: str | None = None) -> None:
        self.errors = dict(errors or {})
        if message is None and len(self.errors) == 1:
            message = next(iter(self.errors.values()))
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "errors": self.errors}


class NotFoundError(TaskBoardError):
    """A task or category does not exist."""

    status_code = 404
    default_message = "Resource not found"


class StorageError(TaskBoardError):
    """The persistence layer failed (connection loss, constraint violation)."""

    status_code = 500
    default_message = "Storage failure"


class NotificationError(TaskBoardError):
    """Event emission failed. Logged, never surfaced to callers."""

    default_message = "Notification failed"
