"""
Field-level validation for task payloads.

Used by the API before a create request reaches the service, and by the
client form before it is submitted. Each rule reports one message per
field so callers can render errors next to their inputs.
"""

from datetime import date, datetime
from typing import Any

from taskboard.models import TaskStatus

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 255


def parse_due_date(value: Any) -> date | None:
    """
    Parse a due date into a calendar date.

    Accepts ``date`` / ``datetime`` objects and ISO-8601 strings, with or
    without a time part; any time of day is discarded.

    Raises:
        ValueError: If the value cannot be read as a date.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Unsupported due_date value: {value!r}")
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()


def validate_title(title: Any) -> str | None:
    if not isinstance(title, str) or not title.strip():
        return "The task title is required."
    if len(title.strip()) < TITLE_MIN_LENGTH:
        return f"The task title must be at least {TITLE_MIN_LENGTH} characters."
    if len(title) > TITLE_MAX_LENGTH:
        return f"The task title cannot exceed {TITLE_MAX_LENGTH} characters."
    return None


def validate_status(status: Any) -> str | None:
    if status is None:
        return None
    if status not in TaskStatus.values():
        return "The selected status is invalid."
    return None


def validate_due_date(due_date: Any, today: date | None = None) -> str | None:
    try:
        parsed = parse_due_date(due_date)
    except ValueError:
        return "The due date must be a valid date."
    if parsed is not None and parsed < (today or date.today()):
        return "The due date must be today or a future date."
    return None


def validate_task_data(data: dict[str, Any], today: date | None = None) -> dict[str, str]:
    """
    Validate task data from a create request.

    Args:
        data: Dictionary containing task data.
        today: Reference date for the due date rule.

    Returns:
        Mapping of field name to error message; empty when valid.
    """
    errors: dict[str, str] = {}

    title_error = validate_title(data.get("title"))
    if title_error:
        errors["title"] = title_error

    description = data.get("description")
    if description is not None and not isinstance(description, str):
        errors["description"] = "The description must be a string."

    status_error = validate_status(data.get("status"))
    if status_error:
        errors["status"] = status_error

    due_error = validate_due_date(data.get("due_date"), today)
    if due_error:
        errors["due_date"] = due_error

    category_id = data.get("category_id")
    if category_id not in (None, ""):
        if isinstance(category_id, bool) or not str(category_id).isdigit():
            errors["category_id"] = "The selected category does not exist."

    return errors
