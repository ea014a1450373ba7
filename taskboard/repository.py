"""
Data access for tasks and categories.

Repositories encapsulate every query the application issues. They never
raise because a filter matched nothing (an empty page is a valid page);
they raise ``StorageError`` only when the database itself fails.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from taskboard import db
from taskboard.exceptions import StorageError
from taskboard.filters import TaskFilter
from taskboard.models import Category, Task

logger = logging.getLogger(__name__)


@dataclass
class Page:
    """
    One page of serialized tasks plus pagination metadata.

    All metadata fields are scalar integers.
    """

    items: list[dict[str, Any]] = field(default_factory=list)
    current_page: int = 1
    last_page: int = 1
    per_page: int = 10
    total: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": self.items,
            "current_page": self.current_page,
            "last_page": self.last_page,
            "per_page": self.per_page,
            "total": self.total,
        }


class TaskRepository:
    """Persistence operations for ``Task`` records."""

    def __init__(self, today: Callable[[], date] = date.today) -> None:
        self._today = today

    def get_paginated_tasks(self, filters: TaskFilter, per_page: int = 10) -> Page:
        """
        Get one page of tasks matching ``filters``, newest first.

        Args:
            filters: Filter specification; ``filters.page`` selects the page.
            per_page: Number of tasks per page.

        Returns:
            A ``Page``; requesting a page past the end yields no items.
        """
        stmt = filters.compose(today=self._today()).statement()
        try:
            pagination = db.paginate(
                stmt,
                page=filters.page,
                per_page=per_page,
                error_out=False,
                count=True,
            )
            items = [task.to_dict() for task in pagination.items]
        except SQLAlchemyError as exc:
            raise self._storage_error("list tasks", exc) from exc

        return Page(
            items=items,
            current_page=filters.page,
            last_page=max(pagination.pages, 1),
            per_page=per_page,
            total=pagination.total or 0,
        )

    def create(self, data: dict[str, Any]) -> Task:
        """
        Persist a new task.

        Args:
            data: Normalized task fields (status as ``TaskStatus``,
                due_date as ``date``).

        Returns:
            The stored task with its category loaded.
        """
        task = Task(
            title=data["title"],
            description=data.get("description"),
            status=data["status"],
            due_date=data.get("due_date"),
            category_id=data.get("category_id"),
        )
        try:
            db.session.add(task)
            db.session.commit()
            db.session.refresh(task)
        except SQLAlchemyError as exc:
            raise self._storage_error("create task", exc) from exc

        logger.info(f"Created task with ID: {task.id}")
        return task

    def find(self, task_id: int) -> Task | None:
        try:
            return db.session.get(Task, task_id)
        except SQLAlchemyError as exc:
            raise self._storage_error(f"find task {task_id}", exc) from exc

    def delete(self, task_id: int) -> None:
        """Delete a task by ID. Deleting a missing ID does nothing."""
        try:
            task = db.session.get(Task, task_id)
            if task is None:
                logger.info(f"Task {task_id} already absent, nothing to delete")
                return
            db.session.delete(task)
            db.session.commit()
        except SQLAlchemyError as exc:
            raise self._storage_error(f"delete task {task_id}", exc) from exc

        logger.info(f"Deleted task {task_id}")

    @staticmethod
    def _storage_error(action: str, exc: SQLAlchemyError) -> StorageError:
        db.session.rollback()
        logger.error(f"Failed to {action}: {exc}")
        return StorageError(f"Failed to {action}")


class CategoryRepository:
    """Read-only category lookups with live task counts."""

    def _with_counts(self):
        tasks_count = (
            select(func.count(Task.id))
            .where(Task.category_id == Category.id)
            .correlate(Category)
            .scalar_subquery()
        )
        return select(Category, tasks_count.label("tasks_count"))

    def all_with_counts(self) -> list[dict[str, Any]]:
        stmt = self._with_counts().order_by(Category.name)
        try:
            rows = db.session.execute(stmt).all()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StorageError("Failed to list categories") from exc
        return [category.to_dict(tasks_count=count) for category, count in rows]

    def find_with_count(self, category_id: int) -> dict[str, Any] | None:
        stmt = self._with_counts().where(Category.id == category_id)
        try:
            row = db.session.execute(stmt).first()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StorageError(f"Failed to find category {category_id}") from exc
        if row is None:
            return None
        category, count = row
        return category.to_dict(tasks_count=count)

    def exists(self, category_id: int) -> bool:
        try:
            return db.session.get(Category, category_id) is not None
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StorageError(f"Failed to find category {category_id}") from exc
