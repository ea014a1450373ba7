"""
Database models for the Task Board application.

This module defines SQLAlchemy models representing the data structure
of the application. Each model maps to a database table.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from taskboard import db


class TaskStatus(str, Enum):
    """Enumeration of possible task statuses."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    @property
    def label(self) -> str:
        """Human-readable label for display."""
        return self.value.replace("_", " ").title()

    @property
    def color(self) -> str:
        """Badge color used by list views."""
        return _STATUS_COLORS[self]

    @classmethod
    def values(cls) -> list[str]:
        """Return every raw status value, in declaration order."""
        return [status.value for status in cls]


_STATUS_COLORS = {
    TaskStatus.PENDING: "gray",
    TaskStatus.IN_PROGRESS: "blue",
    TaskStatus.COMPLETED: "green",
}


class Category(db.Model):
    """
    Category model grouping related tasks.

    The number of tasks in a category is never stored; repositories
    attach it at read time as ``tasks_count``.
    """

    __tablename__ = "categories"

    id: int = db.Column(db.Integer, primary_key=True)
    name: str = db.Column(db.String(100), nullable=False)

    def to_dict(self, tasks_count: int | None = None) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "name": self.name}
        if tasks_count is not None:
            data["tasks_count"] = tasks_count
        return data

    def __repr__(self) -> str:
        return f"<Category {self.id}: {self.name}>"


class Task(db.Model):
    """
    Task model representing a to-do item.

    Attributes:
        id: Unique identifier for the task.
        title: Short title describing the task.
        description: Detailed description of the task.
        status: Current status (pending, in_progress, completed).
        due_date: Optional calendar date the task is due.
        category_id: Optional reference to a category. Deleting the
            category leaves the task in place.
        created_at: Timestamp when the task was created.
        updated_at: Timestamp when the task was last modified.
    """

    __tablename__ = "tasks"

    id: int = db.Column(db.Integer, primary_key=True)
    title: str = db.Column(db.String(255), nullable=False)
    description: str | None = db.Column(db.Text, nullable=True)
    status: TaskStatus = db.Column(
        db.Enum(
            TaskStatus,
            name="task_status",
            native_enum=False,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=TaskStatus.PENDING
    )
    due_date: date | None = db.Column(db.Date, nullable=True)
    category_id: int | None = db.Column(
        db.Integer,
        db.ForeignKey("categories.id"),
        nullable=True,
        index=True
    )
    created_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )
    updated_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc)
    )

    category = db.relationship("Category", lazy="joined")

    @staticmethod
    def _to_utc_iso(value: datetime | None) -> str | None:
        """
        Convert datetime to an ISO-8601 UTC string.

        SQLite commonly returns naive datetime values even when timezone-aware
        columns are declared. For API contracts, always normalize to UTC.
        """
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        else:
            value = value.astimezone(timezone.utc)
        return value.isoformat()

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the task to a dictionary representation.

        Returns:
            Dictionary containing all task fields with the category nested.
        """
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "category": self.category.to_dict() if self.category else None,
            "created_at": self._to_utc_iso(self.created_at),
        }

    def __repr__(self) -> str:
        """Return string representation of the task."""
        return f"<Task {self.id}: {self.title}>"
