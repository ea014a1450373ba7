"""
Task filter specification and query composition.

A ``TaskFilter`` is the conjunctive set of optional predicates a client
can apply to a task listing. ``TaskFilter.compose`` turns it into a
``TaskQuery``: an ordered list of predicate objects, each contributing
one SQL clause, that the repository turns into a paginated select.

Raw request strings are parsed here, once. Past this boundary a known
status is a ``TaskStatus``, the search term is already lower-cased, and
values no task can carry compile to a clause that matches nothing.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Mapping

from sqlalchemy import Select, false, func, or_, select
from sqlalchemy.sql.elements import ColumnElement

from taskboard.models import Task, TaskStatus


class DueBucket(str, Enum):
    """Classification of a task's due date relative to today."""

    TODAY = "today"
    OVERDUE = "overdue"
    UPCOMING = "upcoming"

    @classmethod
    def parse(cls, value: str | None) -> "DueBucket | None":
        """Return the bucket for ``value``; anything unknown means no constraint."""
        try:
            return cls(value)
        except ValueError:
            return None


# -----------------------------------------------------------------------------
# Predicates
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class StatusPredicate:
    status: TaskStatus

    def clause(self) -> ColumnElement[bool]:
        return Task.status == self.status


@dataclass(frozen=True)
class CategoryPredicate:
    category_id: int

    def clause(self) -> ColumnElement[bool]:
        return Task.category_id == self.category_id


@dataclass(frozen=True)
class SearchPredicate:
    """Case-insensitive substring match on title or description."""

    term: str

    def clause(self) -> ColumnElement[bool]:
        pattern = f"%{_escape_like(self.term)}%"
        return or_(
            func.lower(Task.title).like(pattern, escape="\\"),
            func.lower(Task.description).like(pattern, escape="\\"),
        )


@dataclass(frozen=True)
class DuePredicate:
    """
    Due-date bucket relative to ``today``.

    ``today`` keeps completed tasks; ``overdue`` and ``upcoming`` drop them.
    """

    bucket: DueBucket
    today: date

    def clause(self) -> ColumnElement[bool]:
        if self.bucket is DueBucket.TODAY:
            return Task.due_date == self.today
        not_completed = Task.status != TaskStatus.COMPLETED
        if self.bucket is DueBucket.OVERDUE:
            return (Task.due_date < self.today) & not_completed
        return (Task.due_date > self.today) & not_completed


@dataclass(frozen=True)
class NoMatchPredicate:
    """Matches no row; stands in for a filter value no task can carry."""

    name: str
    value: Any

    def clause(self) -> ColumnElement[bool]:
        return false()


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@dataclass(frozen=True)
class TaskQuery:
    """Composed, reusable query over the task table."""

    predicates: tuple = ()

    def statement(self) -> Select:
        """Build the select, newest tasks first."""
        stmt = select(Task)
        for predicate in self.predicates:
            stmt = stmt.where(predicate.clause())
        return stmt.order_by(Task.created_at.desc(), Task.id.desc())


# -----------------------------------------------------------------------------
# Filter specification
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class TaskFilter:
    """
    Optional, AND-combined predicates for a task listing.

    Attributes:
        status: Exact status match. A raw string is a value no task can
            have, so the filter matches nothing.
        category_id: Exact category match. A raw string likewise matches
            nothing.
        search: Substring searched in title and description.
        due: Raw due bucket name (today, overdue, upcoming).
        page: 1-based page number.
    """

    status: TaskStatus | str | None = None
    category_id: int | str | None = None
    search: str | None = None
    due: str | None = None
    page: int = field(default=1)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "TaskFilter":
        """
        Build a filter from query parameters or a plain dict.

        Blank values mean "no constraint". An unknown status or a
        non-numeric category id is kept as its raw string and yields an
        empty listing.
        """
        data = data or {}

        status = _blank_to_none(data.get("status"))
        if status is not None:
            try:
                status = TaskStatus(status)
            except ValueError:
                status = str(status)

        category_id = _blank_to_none(data.get("category_id"))
        if category_id is not None:
            try:
                category_id = int(category_id)
            except (TypeError, ValueError):
                category_id = str(category_id)

        search = _blank_to_none(data.get("search"))
        return cls(
            status=status,
            category_id=category_id,
            search=search.strip() if isinstance(search, str) else search,
            due=_blank_to_none(data.get("due")),
            page=_parse_page(data.get("page")),
        )

    def compose(self, today: date | None = None) -> TaskQuery:
        """Translate the filter into a ``TaskQuery``; ``page`` is not part of it."""
        predicates: list = []
        if isinstance(self.status, TaskStatus):
            predicates.append(StatusPredicate(self.status))
        elif self.status is not None:
            predicates.append(NoMatchPredicate("status", self.status))
        if isinstance(self.category_id, int):
            predicates.append(CategoryPredicate(self.category_id))
        elif self.category_id is not None:
            predicates.append(NoMatchPredicate("category_id", self.category_id))
        if self.search:
            predicates.append(SearchPredicate(self.search.lower()))
        bucket = DueBucket.parse(self.due)
        if bucket is not None:
            predicates.append(DuePredicate(bucket, today or date.today()))
        return TaskQuery(tuple(predicates))

    def to_dict(self) -> dict[str, Any]:
        """Canonical form: only the fields that are set, with raw values."""
        data: dict[str, Any] = {}
        if isinstance(self.status, TaskStatus):
            data["status"] = self.status.value
        elif self.status is not None:
            data["status"] = self.status
        if self.category_id is not None:
            data["category_id"] = self.category_id
        if self.search:
            data["search"] = self.search
        if self.due:
            data["due"] = self.due
        data["page"] = self.page
        return data


def _blank_to_none(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _parse_page(value: Any) -> int:
    try:
        page = int(value)
    except (TypeError, ValueError):
        return 1
    return page if page >= 1 else 1
