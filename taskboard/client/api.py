"""
HTTP client for the task board REST API.

Thin wrapper over :mod:`requests` that the client state store calls
from a worker thread. Every call uses the configured timeout, and every
non-2xx answer is raised as :class:`ApiError` carrying the server's
error message and, for validation failures, its field errors.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """
    Failed call to the task API.

    Attributes:
        status_code: HTTP status, or ``None`` for network-level failures.
        message: Human-readable error message.
        field_errors: Field name to message map from a 422 response.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        field_errors: dict[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.field_errors = dict(field_errors or {})


class TaskApiClient:
    """
    Blocking client for ``/api/v1``.

    Args:
        base_url: API root, e.g. ``http://localhost:5000/api/v1``.
        timeout: Per-request timeout in seconds.
        session: Optional :class:`requests.Session` to reuse connections.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 5,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config: Any) -> TaskApiClient:
        """Build a client from a configuration class."""
        return cls(config.TASK_API_URL, timeout=config.TASK_API_TIMEOUT)

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        """
        Send a request and raise :class:`ApiError` on failure.

        Raises:
            ApiError: On network errors, timeouts and non-2xx responses.
        """
        try:
            response = self.session.request(
                method=method,
                url=self._url(path),
                headers={"Accept": "application/json"},
                timeout=self.timeout,
                **kwargs,
            )
        except requests.Timeout as exc:
            logger.warning(f"Task API {method} {path} timed out")
            raise ApiError("The task service did not respond in time.") from exc
        except requests.RequestException as exc:
            logger.warning(f"Task API {method} {path} failed: {exc}")
            raise ApiError("The task service is unavailable.") from exc

        if response.ok:
            return response

        payload = _safe_json(response)
        message = payload.get("error") or f"Request failed with status {response.status_code}"
        raise ApiError(
            message,
            status_code=response.status_code,
            field_errors=payload.get("errors"),
        )

    def list_tasks(self, params: dict[str, Any]) -> dict[str, Any]:
        return self._request("GET", "/tasks", params=params).json()

    def list_categories(self) -> list[dict[str, Any]]:
        return self._request("GET", "/categories").json().get("data", [])

    def create_task(self, data: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", "/tasks", json=data).json()

    def delete_task(self, task_id: int) -> None:
        self._request("DELETE", f"/tasks/{task_id}")


def _safe_json(response: requests.Response) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}
