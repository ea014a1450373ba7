"""
Unit tests for the HTTP API client.

The ``requests`` session is mocked: no network traffic happens.
"""

from unittest.mock import MagicMock

import pytest
import requests

from config import TestingConfig
from taskboard.client.api import ApiError, TaskApiClient

pytestmark = pytest.mark.unit


def make_response(status_code: int, payload=None) -> MagicMock:
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    if payload is None:
        response.json.side_effect = ValueError("No JSON")
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def api(session):
    return TaskApiClient("http://task-api/api/v1/", timeout=2, session=session)


class TestRequests:

    def test_list_tasks_sends_params_and_timeout(self, api, session):
        page = {"data": [], "current_page": 1, "last_page": 1, "per_page": 10, "total": 0}
        session.request.return_value = make_response(200, page)

        result = api.list_tasks({"status": "pending", "page": 2})

        assert result == page
        session.request.assert_called_once_with(
            method="GET",
            url="http://task-api/api/v1/tasks",
            headers={"Accept": "application/json"},
            timeout=2,
            params={"status": "pending", "page": 2},
        )

    def test_list_categories_unwraps_data(self, api, session):
        session.request.return_value = make_response(200, {"data": [{"id": 1, "name": "Work"}]})

        assert api.list_categories() == [{"id": 1, "name": "Work"}]

    def test_create_task_posts_json(self, api, session):
        session.request.return_value = make_response(201, {"id": 5, "title": "Buy milk"})

        created = api.create_task({"title": "Buy milk"})

        assert created["id"] == 5
        assert session.request.call_args.kwargs["json"] == {"title": "Buy milk"}
        assert session.request.call_args.kwargs["method"] == "POST"

    def test_delete_task_targets_task_url(self, api, session):
        session.request.return_value = make_response(200, {"message": "Task deleted successfully"})

        api.delete_task(7)

        assert session.request.call_args.kwargs["url"] == "http://task-api/api/v1/tasks/7"
        assert session.request.call_args.kwargs["method"] == "DELETE"


class TestErrors:

    def test_validation_response_carries_field_errors(self, api, session):
        session.request.return_value = make_response(
            422, {"error": "The given data was invalid.", "errors": {"title": "The task title is required."}}
        )

        with pytest.raises(ApiError) as exc_info:
            api.create_task({})

        assert exc_info.value.status_code == 422
        assert exc_info.value.field_errors == {"title": "The task title is required."}

    def test_not_found_uses_server_message(self, api, session):
        session.request.return_value = make_response(404, {"error": "Task not found"})

        with pytest.raises(ApiError) as exc_info:
            api.delete_task(1)

        assert exc_info.value.message == "Task not found"
        assert exc_info.value.field_errors == {}

    def test_non_json_error_body(self, api, session):
        session.request.return_value = make_response(502)

        with pytest.raises(ApiError) as exc_info:
            api.list_tasks({})

        assert exc_info.value.message == "Request failed with status 502"

    def test_timeout_is_wrapped(self, api, session):
        session.request.side_effect = requests.Timeout()

        with pytest.raises(ApiError) as exc_info:
            api.list_tasks({})

        assert exc_info.value.status_code is None
        assert "in time" in exc_info.value.message

    def test_connection_error_is_wrapped(self, api, session, caplog):
        session.request.side_effect = requests.ConnectionError("refused")

        with pytest.raises(ApiError, match="unavailable"):
            api.list_categories()

        assert "Task API GET /categories failed: refused" in caplog.text

    def test_timeout_is_logged_with_method_and_path(self, api, session, caplog):
        session.request.side_effect = requests.Timeout()

        with pytest.raises(ApiError):
            api.delete_task(7)

        assert "Task API DELETE /tasks/7 timed out" in caplog.text


def test_from_config():
    api = TaskApiClient.from_config(TestingConfig)

    assert api.base_url == TestingConfig.TASK_API_URL.rstrip("/")
    assert api.timeout == TestingConfig.TASK_API_TIMEOUT
