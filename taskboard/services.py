"""
Task service.

Sits between the API routes and the repositories: normalizes input,
applies business rules, keeps the listing cache coherent and emits
domain events. Status transitions are not enforced; any status may be
set directly on create.
"""

import logging
from typing import Any

from taskboard.cache import make_cache_key
from taskboard.events import TaskCreated
from taskboard.exceptions import NotFoundError, NotificationError, ValidationError
from taskboard.filters import TaskFilter
from taskboard.models import Task, TaskStatus
from taskboard.ports import Notifier, TaskCache
from taskboard.repository import CategoryRepository, Page, TaskRepository
from taskboard.validation import parse_due_date, validate_title

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL = 3600


class TaskService:
    """Business operations on tasks and categories."""

    def __init__(
        self,
        tasks: TaskRepository,
        categories: CategoryRepository,
        cache: TaskCache,
        notifier: Notifier,
        cache_ttl: float = DEFAULT_CACHE_TTL,
    ) -> None:
        self.tasks = tasks
        self.categories = categories
        self.cache = cache
        self.notifier = notifier
        self.cache_ttl = cache_ttl

    def get_tasks(self, filters: TaskFilter | None = None, per_page: int = 10) -> Page:
        """Get a page of tasks, served from the cache when possible."""
        filters = filters or TaskFilter()
        key = make_cache_key(filters, per_page)
        return self.cache.remember(
            key,
            self.cache_ttl,
            lambda: self.tasks.get_paginated_tasks(filters, per_page),
        )

    def get_task(self, task_id: int) -> Task:
        task = self.tasks.find(task_id)
        if task is None:
            logger.warning(f"Task {task_id} not found")
            raise NotFoundError("Task not found")
        return task

    def create_task(self, data: dict[str, Any]) -> Task:
        """
        Create a new task.

        Args:
            data: Raw task fields. ``status`` defaults to pending.

        Returns:
            The stored task.

        Raises:
            ValidationError: If the status, due date, title or category is invalid.
        """
        normalized = self._validate_and_format(data)
        task = self.tasks.create(normalized)

        # Every listing may now be stale
        self.cache.flush()

        self._dispatch(TaskCreated(task=task.to_dict()))
        return task

    def delete_task(self, task_id: int) -> None:
        """
        Delete a task by ID.

        Raises:
            NotFoundError: If no task has this ID.
        """
        task = self.tasks.find(task_id)
        if task is None:
            logger.warning(f"Task {task_id} not found")
            raise NotFoundError("Task not found")

        self.tasks.delete(task_id)
        self.cache.flush()

    def list_categories(self) -> list[dict[str, Any]]:
        return self.categories.all_with_counts()

    def get_category(self, category_id: int) -> dict[str, Any]:
        category = self.categories.find_with_count(category_id)
        if category is None:
            logger.warning(f"Category {category_id} not found")
            raise NotFoundError("Category not found")
        return category

    def _validate_and_format(self, data: dict[str, Any]) -> dict[str, Any]:
        errors: dict[str, str] = {}
        formatted = dict(data)

        title_error = validate_title(formatted.get("title"))
        if title_error:
            errors["title"] = title_error

        status = formatted.get("status")
        if status is None or status == "":
            formatted["status"] = TaskStatus.PENDING
        else:
            try:
                formatted["status"] = TaskStatus(status)
            except ValueError:
                errors["status"] = "Invalid status value"

        try:
            formatted["due_date"] = parse_due_date(formatted.get("due_date"))
        except ValueError:
            errors["due_date"] = "The due date must be a valid date."

        category_id = formatted.get("category_id")
        if category_id is None or category_id == "":
            formatted["category_id"] = None
        else:
            try:
                formatted["category_id"] = int(category_id)
            except (TypeError, ValueError):
                errors["category_id"] = "The selected category does not exist."
            else:
                if not self.categories.exists(formatted["category_id"]):
                    errors["category_id"] = "The selected category does not exist."

        if errors:
            raise ValidationError(errors)
        return formatted

    def _dispatch(self, event: TaskCreated) -> None:
        try:
            self.notifier.notify(event)
        except Exception as exc:
            error = NotificationError(f"Failed to dispatch {event.name}: {exc}")
            logger.warning(error.message)
