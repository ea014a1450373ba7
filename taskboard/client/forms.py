"""Client-side task form state and submission."""

from __future__ import annotations

from datetime import date
from typing import Any

from taskboard.client.store import TaskListStore
from taskboard.validation import validate_due_date, validate_status, validate_title

FIELDS = ("title", "description", "status", "due_date", "category_id")
VALIDATED_FIELDS = ("title", "status", "due_date")


def _blank_form() -> dict[str, Any]:
    return {
        "title": "",
        "description": "",
        "status": "pending",
        "due_date": "",
        "category_id": "",
    }


class TaskForm:
    """
    Form for creating a task.

    Fields are validated with the same rules the API applies, as soon as
    they are touched. Server-side field errors replace local ones after a
    rejected submit.
    """

    def __init__(self, today: date | None = None) -> None:
        self.today = today
        self.values: dict[str, Any] = _blank_form()
        self.errors: dict[str, str] = {}
        self.form_error = ""
        self.touched: set[str] = set()

    def touch(self, field: str) -> None:
        self.touched.add(field)
        self.validate_field(field)

    def validate_field(self, field: str) -> None:
        self.errors.pop(field, None)
        if field == "title":
            message = validate_title(self.values["title"])
        elif field == "status":
            message = validate_status(self.values["status"]) if self.values["status"] else "Status is required"
        elif field == "due_date":
            message = validate_due_date(self.values["due_date"] or None, self.today)
        else:
            message = None
        if message:
            self.errors[field] = message

    def validate(self) -> bool:
        for field in VALIDATED_FIELDS:
            self.touch(field)
        return not self.errors

    @property
    def is_valid(self) -> bool:
        return (
            validate_title(self.values["title"]) is None
            and bool(self.values["status"])
            and validate_status(self.values["status"]) is None
            and validate_due_date(self.values["due_date"] or None, self.today) is None
        )

    def payload(self) -> dict[str, Any]:
        """Request body: blank optional fields are sent as null."""
        return {field: (self.values[field] if self.values[field] != "" else None) for field in FIELDS}

    def reset(self) -> None:
        self.values = _blank_form()
        self.errors = {}
        self.form_error = ""
        self.touched = set()

    async def submit(self, store: TaskListStore) -> dict[str, Any] | None:
        """
        Validate and create the task through ``store``.

        Returns:
            The created task, or None if validation or the server rejected it.
        """
        if not self.validate():
            self.form_error = "Please fix the errors before submitting"
            return None

        self.errors = {}
        self.form_error = ""
        created = await store.create_task(self.payload())
        if created is None:
            if store.field_errors:
                self.errors = dict(store.field_errors)
            else:
                self.form_error = store.error or "An error occurred"
            return None

        self.reset()
        return created
