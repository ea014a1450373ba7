"""
Unit tests for the task listing cache.
"""

import threading

import pytest

from taskboard.cache import QueryCache, make_cache_key
from taskboard.filters import TaskFilter
from taskboard.models import TaskStatus

pytestmark = pytest.mark.unit


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return QueryCache(default_ttl=3600, clock=clock)


class TestCacheKey:

    def test_field_order_does_not_change_key(self):
        first = make_cache_key({"status": "pending", "search": "milk", "page": 1}, 10)
        second = make_cache_key({"page": 1, "search": "milk", "status": "pending"}, 10)

        assert first == second

    def test_equal_filters_share_a_key(self):
        first = TaskFilter.from_mapping({"status": "pending", "search": "milk"})
        second = TaskFilter(search="milk", status=TaskStatus.PENDING)

        assert make_cache_key(first, 10) == make_cache_key(second, 10)

    def test_page_and_page_size_are_part_of_the_key(self):
        keys = {
            make_cache_key(TaskFilter(page=1), 10),
            make_cache_key(TaskFilter(page=2), 10),
            make_cache_key(TaskFilter(page=1), 20),
        }

        assert len(keys) == 3

    def test_key_is_namespaced(self):
        assert make_cache_key(TaskFilter(), 10).startswith("tasks:")


class TestQueryCache:

    def test_remember_computes_once(self, cache):
        calls = []

        def producer():
            calls.append(1)
            return "page"

        assert cache.remember("k", None, producer) == "page"
        assert cache.remember("k", None, producer) == "page"
        assert len(calls) == 1

    def test_entries_expire_after_ttl(self, cache, clock):
        cache.set("k", "value")

        clock.now += 3599
        assert cache.get("k") == "value"

        clock.now += 1
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_explicit_ttl_overrides_default(self, cache, clock):
        cache.set("k", "value", ttl=5)

        clock.now += 5

        assert cache.get("k") is None

    def test_flush_drops_every_entry(self, cache):
        cache.set("tasks:a", 1)
        cache.set("tasks:b", 2)

        cache.flush()

        assert len(cache) == 0
        assert cache.get("tasks:a") is None

    def test_expired_entries_are_purged_on_write(self, cache, clock):
        for i in range(1000):
            cache.remember(f"tasks:{i}", 10, lambda: "page")

        clock.now += 100
        cache.remember("tasks:fresh", 10, lambda: "page")

        assert len(cache) == 1

    def test_oldest_entries_are_evicted_past_the_cap(self, clock):
        cache = QueryCache(default_ttl=3600, clock=clock, max_entries=3)

        for key in ("a", "b", "c", "d"):
            cache.set(key, key)

        assert len(cache) == 3
        assert cache.get("a") is None
        assert cache.get("d") == "d"

    def test_rewriting_a_key_refreshes_its_position(self, clock):
        cache = QueryCache(default_ttl=3600, clock=clock, max_entries=2)
        cache.set("a", 1)
        cache.set("b", 2)

        cache.set("a", 3)
        cache.set("c", 4)

        assert cache.get("a") == 3
        assert cache.get("b") is None

    def test_concurrent_reads_and_flushes(self, cache):
        errors = []

        def reader(n):
            try:
                for i in range(200):
                    cache.remember(f"k{i % 5}", None, lambda: n)
            except Exception as exc:
                errors.append(exc)

        def flusher():
            for _ in range(50):
                cache.flush()

        threads = [threading.Thread(target=reader, args=(n,)) for n in range(4)]
        threads.append(threading.Thread(target=flusher))
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
