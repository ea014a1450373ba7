"""
Ports (interfaces) used by the task service and the client store.

The core depends on Protocols instead of concrete implementations.
This keeps the cache, the event sink and the HTTP transport swappable
and lets tests pass plain doubles.
"""

from typing import Any, Callable, Protocol, TypeVar

T = TypeVar("T")


class TaskCache(Protocol):
    """Memoizes task listings; flushed wholesale after every write."""

    def remember(self, key: str, ttl: float | None, producer: Callable[[], T]) -> T: ...

    def flush(self) -> None: ...


class Notifier(Protocol):
    """Fire-and-forget sink for domain events such as ``TaskCreated``."""

    def notify(self, event: Any) -> None: ...


class TaskApi(Protocol):
    """Blocking transport used by the client state store."""

    def list_tasks(self, params: dict[str, Any]) -> dict[str, Any]: ...

    def list_categories(self) -> list[dict[str, Any]]: ...

    def create_task(self, data: dict[str, Any]) -> dict[str, Any]: ...

    def delete_task(self, task_id: int) -> None: ...
