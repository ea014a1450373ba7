"""In-memory cache for paginated task listings."""

import hashlib
import json
import logging
import threading
import time
from typing import Any, Callable, TypeVar

from taskboard.filters import TaskFilter

logger = logging.getLogger(__name__)

T = TypeVar("T")

CACHE_PREFIX = "tasks"


def make_cache_key(filters: TaskFilter | dict[str, Any], per_page: int | None = None) -> str:
    """
    Build a stable key for a filter specification and page size.

    Keys are computed over the canonical filter dict with sorted keys,
    so field order never changes the key.
    """
    params = filters.to_dict() if isinstance(filters, TaskFilter) else filters
    key = CACHE_PREFIX
    if params:
        encoded = json.dumps(params, sort_keys=True, default=str)
        key += ":" + hashlib.md5(encoded.encode("utf-8")).hexdigest()
    if per_page is not None:
        key += f":per_page_{per_page}"
    return key


class QueryCache:
    """
    Thread-safe TTL cache for the task listing namespace.

    Producers run outside the lock: two threads missing on the same key
    may both compute the value, and the last write wins. ``flush`` drops
    the whole namespace, so any write makes every cached listing stale
    at once, including listings the write could not have affected.
    """

    def __init__(
        self,
        default_ttl: float = 3600,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = 1000,
    ) -> None:
        """Initialize empty cache."""
        self.default_ttl = default_ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None if missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if expires_at <= self._clock():
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """
        Store ``value`` under ``key``.

        Expired entries are purged on every write. Past ``max_entries``
        the oldest inserted entries are evicted first.
        """
        now = self._clock()
        expires_at = now + (self.default_ttl if ttl is None else ttl)
        with self._lock:
            self._purge_expired(now)
            self._entries.pop(key, None)
            self._entries[key] = (expires_at, value)
            while len(self._entries) > self.max_entries:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
                logger.debug(f"[QueryCache] Evicted '{oldest}'")

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, (expires_at, _) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]

    def remember(self, key: str, ttl: float | None, producer: Callable[[], T]) -> T:
        """Return the cached value for ``key``, computing and storing it on a miss."""
        value = self.get(key)
        if value is not None:
            logger.debug(f"[QueryCache] Hit for '{key}'")
            return value

        logger.debug(f"[QueryCache] Miss for '{key}'")
        value = producer()
        self.set(key, value, ttl)
        return value

    def flush(self) -> None:
        """Drop every entry in the namespace."""
        with self._lock:
            count = len(self._entries)
            self._entries = {}
        logger.info(f"[QueryCache] Flushed {count} entries")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
