"""
Reactive client-side state for the task list.

``TaskListStore`` mirrors the server's filter and pagination state and
keeps the loaded task list in sync with it. Every filter or page change
schedules exactly one fetch on the running event loop. Search input is
debounced, so fast typing produces a single request.

The blocking API client runs in a worker thread (``asyncio.to_thread``),
so the event loop is never blocked. Each fetch takes a sequence number
and only the newest dispatched fetch may write its response into the
store; older responses arriving late are discarded.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any

from taskboard.client.api import ApiError, TaskApiClient
from taskboard.ports import TaskApi

logger = logging.getLogger(__name__)

FILTER_KEYS = ("status", "category_id", "search", "due")
DEFAULT_PER_PAGE = 10
DEFAULT_DEBOUNCE_SECONDS = 0.3


def _empty_filters() -> dict[str, Any]:
    return {key: "" for key in FILTER_KEYS}


def _scalar(value: Any, default: int) -> int:
    """Read a pagination field that some servers wrap in a one-element list."""
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value is None:
        return default
    return int(value)


class TaskListStore:
    """
    Client state for the task list screen.

    Attributes:
        filters: Current filter values; empty strings mean "not set".
        pagination: ``current_page``, ``last_page``, ``per_page``, ``total``.
        tasks: Tasks on the current page, as returned by the API.
        categories: All categories with their task counts.
        loading: True while at least one task fetch is in flight.
        error: Last global error message, if any.
        field_errors: Field-level errors from the last rejected create.
    """

    def __init__(
        self,
        api: TaskApi,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        per_page: int = DEFAULT_PER_PAGE,
    ) -> None:
        self.api = api
        self.debounce_seconds = debounce_seconds
        self.filters: dict[str, Any] = _empty_filters()
        self.pagination: dict[str, int] = {
            "current_page": 1,
            "last_page": 1,
            "per_page": per_page,
            "total": 0,
        }
        self.tasks: list[dict[str, Any]] = []
        self.categories: list[dict[str, Any]] = []
        self.loading = False
        self.error: str | None = None
        self.field_errors: dict[str, str] = {}

        self._sequence = 0
        self._in_flight = 0
        self._pending_search: asyncio.Task | None = None
        self._background: set[asyncio.Task] = set()

    @classmethod
    def from_config(cls, config: Any) -> TaskListStore:
        """Build a store talking to the API configured in ``config``."""
        return cls(
            TaskApiClient.from_config(config),
            debounce_seconds=config.SEARCH_DEBOUNCE_SECONDS,
            per_page=config.TASKS_PER_PAGE,
        )

    @property
    def has_filters(self) -> bool:
        return any(self.filters.get(key) for key in FILTER_KEYS)

    def request_params(self) -> dict[str, Any]:
        """Query parameters for the current filters and page."""
        params = {key: value for key, value in self.filters.items() if value not in ("", None)}
        params["page"] = self.pagination["current_page"]
        return params

    # -------------------------------------------------------------------------
    # Fetching
    # -------------------------------------------------------------------------

    async def fetch_tasks(self) -> None:
        """Load the current page; failures are recorded in ``error``."""
        self._sequence += 1
        sequence = self._sequence
        params = self.request_params()

        self._in_flight += 1
        self.loading = True
        self.error = None
        try:
            payload = await asyncio.to_thread(self.api.list_tasks, params)
            if sequence != self._sequence:
                logger.debug(f"Discarding stale task response {sequence} (latest {self._sequence})")
                return
            self._apply_page(payload)
        except Exception as exc:
            if sequence == self._sequence:
                self._capture_error(exc, "Error fetching tasks")
        finally:
            self._in_flight -= 1
            self.loading = self._in_flight > 0

    async def fetch_categories(self) -> None:
        try:
            self.categories = await asyncio.to_thread(self.api.list_categories)
        except Exception as exc:
            self._capture_error(exc, "Error fetching categories")

    async def initialize(self) -> None:
        """Load tasks and categories concurrently."""
        await asyncio.gather(self.fetch_tasks(), self.fetch_categories())

    def _apply_page(self, payload: dict[str, Any]) -> None:
        self.tasks = list(payload.get("data") or [])
        self.pagination = {
            "current_page": _scalar(payload.get("current_page"), 1),
            "last_page": _scalar(payload.get("last_page"), 1),
            "per_page": _scalar(payload.get("per_page"), self.pagination["per_page"]),
            "total": _scalar(payload.get("total"), 0),
        }

    def _capture_error(self, exc: Exception, context: str) -> None:
        if isinstance(exc, ApiError) and exc.field_errors:
            self.field_errors = dict(exc.field_errors)
            self.error = None
        elif isinstance(exc, ApiError):
            self.error = exc.message
        else:
            logger.exception(context)
            self.error = str(exc) or "An error occurred"
        logger.warning(f"{context}: {self.error or self.field_errors}")

    def _schedule_fetch(self) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self.fetch_tasks())
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    # -------------------------------------------------------------------------
    # Filter and page changes
    # -------------------------------------------------------------------------

    def set_filter(self, key: str, value: Any) -> asyncio.Task:
        """Set one filter, go back to page 1 and refetch."""
        if key not in FILTER_KEYS:
            raise KeyError(f"Unknown filter: {key}")
        self.filters[key] = value
        self.pagination["current_page"] = 1
        return self._schedule_fetch()

    def set_search(self, value: str) -> asyncio.Task:
        """
        Debounced search update.

        Each call cancels the previous pending one; only the last value
        within the debounce window triggers a fetch.
        """
        self._cancel_pending_search()
        task = asyncio.get_running_loop().create_task(self._debounced_search(value))
        self._pending_search = task
        return task

    async def _debounced_search(self, value: str) -> None:
        await asyncio.sleep(self.debounce_seconds)
        self.filters["search"] = value
        self.pagination["current_page"] = 1
        await self.fetch_tasks()

    def _cancel_pending_search(self) -> None:
        if self._pending_search is not None and not self._pending_search.done():
            self._pending_search.cancel()
        self._pending_search = None

    def set_page(self, page: int) -> asyncio.Task:
        self.pagination["current_page"] = page
        return self._schedule_fetch()

    def reset_filters(self) -> asyncio.Task:
        self._cancel_pending_search()
        self.filters = _empty_filters()
        self.pagination["current_page"] = 1
        return self._schedule_fetch()

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def create_task(self, data: dict[str, Any]) -> dict[str, Any] | None:
        """
        Create a task and reload the list.

        Returns:
            The created task, or None when the server rejected it; the
            reason is then in ``field_errors`` or ``error``.
        """
        self.field_errors = {}
        self.error = None
        try:
            created = await asyncio.to_thread(self.api.create_task, data)
        except Exception as exc:
            self._capture_error(exc, "Error creating task")
            return None
        await self.fetch_tasks()
        return created

    async def delete_task(self, task_id: int) -> bool:
        """
        Delete a task, removing it from local state before the server answers.

        If the server call fails, the local list and total are restored,
        unless a fetch started in the meantime; that fetch already carries
        the server's state.
        """
        sequence = self._sequence
        previous_tasks = self.tasks
        previous_total = self.pagination["total"]
        remaining = [task for task in self.tasks if task.get("id") != task_id]
        if len(remaining) < len(previous_tasks):
            self.tasks = remaining
            self.pagination["total"] = max(previous_total - 1, 0)
        self.error = None
        try:
            await asyncio.to_thread(self.api.delete_task, task_id)
        except Exception as exc:
            if sequence == self._sequence:
                self.tasks = previous_tasks
                self.pagination["total"] = previous_total
            self._capture_error(exc, "Error deleting task")
            return False
        return True


def is_task_overdue(task: dict[str, Any], today: date | None = None) -> bool:
    """A task is overdue when it has a past due date and is not completed."""
    due = task.get("due_date")
    if not due or task.get("status") == "completed":
        return False
    return date.fromisoformat(due) < (today or date.today())


def format_due_date(value: str | None) -> str:
    """Format an ISO due date for display."""
    if not value:
        return "No due date"
    return date.fromisoformat(value).strftime("%b %d, %Y")
