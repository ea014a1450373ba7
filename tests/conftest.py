"""
Shared pytest fixtures for the Task Board test suite.

This module contains fixtures that are shared across all test modules.
Fixtures ensure test isolation by providing a fresh database and an
empty listing cache for each test.
"""

import os
import pytest
from datetime import date, datetime, timedelta, timezone
from typing import Any
from faker import Faker

# Set testing environment before importing app
os.environ["FLASK_ENV"] = "testing"

from taskboard import create_app, db
from taskboard.models import Category, Task, TaskStatus


# Initialize Faker for generating test data
fake = Faker()


# -----------------------------------------------------------------------------
# Application Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture(scope="session")
def app():
    """
    Create application instance for the test session.

    Yields:
        Flask application instance configured for testing.
    """
    application = create_app("testing")
    yield application


@pytest.fixture(scope="function")
def client(app):
    """
    Create a test client for making HTTP requests.

    Yields:
        Flask test client for making HTTP requests.
    """
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture(scope="function")
def task_service(app):
    """The task service wired by the application factory."""
    return app.extensions["task_service"]


@pytest.fixture(scope="function")
def db_session(app, task_service):
    """
    Create a fresh database and an empty cache for each test.

    The application (and its cache) lives for the whole session, so
    listings cached by one test must not leak into the next.

    Yields:
        SQLAlchemy database handle.
    """
    with app.app_context():
        db.create_all()
        task_service.cache.flush()
        yield db
        db.session.rollback()
        db.drop_all()
        task_service.cache.flush()


# -----------------------------------------------------------------------------
# Test Data Factory Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def category_factory(db_session):
    """
    Factory fixture for creating Category instances.

    Example:
        def test_something(category_factory):
            work = category_factory(name="Work")
    """

    def _create_category(name: str | None = None) -> Category:
        category = Category(name=name or fake.unique.word().title())
        db_session.session.add(category)
        db_session.session.commit()
        return category

    return _create_category


@pytest.fixture
def task_factory(db_session):
    """
    Factory fixture for creating Task instances directly in the database.

    Bypasses the service, so due dates in the past can be stored.
    Tasks created later get a later ``created_at`` unless one is given.

    Example:
        def test_something(task_factory):
            task = task_factory(title="My Task")
            assert task.id is not None
    """
    base_time = datetime.now(timezone.utc) - timedelta(days=1)
    counter = {"n": 0}

    def _create_task(
        title: str | None = None,
        description: str | None = None,
        status: TaskStatus = TaskStatus.PENDING,
        due_date: date | None = None,
        category: Category | None = None,
        created_at: datetime | None = None
    ) -> Task:
        counter["n"] += 1
        task = Task(
            title=title or fake.sentence(nb_words=4),
            description=description if description is not None else fake.paragraph(),
            status=status,
            due_date=due_date,
            category_id=category.id if category else None,
            created_at=created_at or base_time + timedelta(seconds=counter["n"])
        )
        db_session.session.add(task)
        db_session.session.commit()
        return task

    return _create_task


@pytest.fixture
def sample_task(task_factory) -> Task:
    """Create a single sample task for tests that need one task."""
    return task_factory(
        title="Sample Task",
        description="This is a sample task for testing",
        status=TaskStatus.PENDING
    )


@pytest.fixture
def dated_tasks(task_factory) -> dict[str, Task]:
    """
    Tasks spread over the due-date buckets.

    Returns:
        Mapping of a short label to the stored task.
    """
    today = date.today()
    return {
        "today_pending": task_factory(title="Due today pending", due_date=today),
        "today_completed": task_factory(
            title="Due today completed", due_date=today, status=TaskStatus.COMPLETED
        ),
        "yesterday_pending": task_factory(
            title="Due yesterday pending", due_date=today - timedelta(days=1)
        ),
        "yesterday_completed": task_factory(
            title="Due yesterday completed",
            due_date=today - timedelta(days=1),
            status=TaskStatus.COMPLETED
        ),
        "tomorrow_in_progress": task_factory(
            title="Due tomorrow in progress",
            due_date=today + timedelta(days=1),
            status=TaskStatus.IN_PROGRESS
        ),
        "tomorrow_completed": task_factory(
            title="Due tomorrow completed",
            due_date=today + timedelta(days=1),
            status=TaskStatus.COMPLETED
        ),
        "undated": task_factory(title="No due date"),
    }


# -----------------------------------------------------------------------------
# Test Data Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def valid_task_data() -> dict[str, Any]:
    """
    Provide valid task data for POST requests.

    Returns:
        Dictionary with valid task field values.
    """
    return {
        "title": "Test Task",
        "description": "This is a test task description",
        "status": TaskStatus.PENDING.value,
        "due_date": (date.today() + timedelta(days=7)).isoformat()
    }


@pytest.fixture
def api_headers() -> dict[str, str]:
    """
    Provide common headers for API requests.

    Returns:
        Dictionary of HTTP headers.
    """
    return {
        "Content-Type": "application/json",
        "Accept": "application/json"
    }
