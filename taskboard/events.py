"""
Task domain events and the default notifier.

Events are dispatched through the ``Notifier`` port injected into the
task service. Delivery is best effort: the service logs and swallows
any failure.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskCreated:
    """Dispatched after a new task is persisted."""

    task: dict[str, Any]
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def name(self) -> str:
        return "task.created"


class LoggingNotifier:
    """Notifier that writes every event to the application log."""

    def notify(self, event: Any) -> None:
        task = getattr(event, "task", {})
        logger.info(f"Event {event.name}: task {task.get('id')} '{task.get('title')}'")

