"""
Shared pytest fixtures for redis-lru tests.

The cache is exercised against FakeStore, an in-memory double of the
StorePort boundary, so no Redis server is needed.
"""

import pytest

from redis_lru.cache import LRUCache
from redis_lru.config import CacheConfig
from tests.fakes.fake_store import FakeStore


class TickingClock:
    """Score function that advances by one on every call.

    Wall-clock milliseconds can repeat between fast consecutive calls; a
    strictly increasing counter keeps recency ordering deterministic.
    """

    def __init__(self) -> None:
        self.now = 0

    def __call__(self, key: str) -> int:
        self.now += 1
        return self.now


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def make_cache(store, clock):
    """Factory for LRU caches sharing one store and one clock.

    Usage:
        cache = make_cache(3, namespace="first")
    """

    def _make(max: int, **kwargs) -> LRUCache:
        kwargs.setdefault("score", clock)
        return LRUCache(store, CacheConfig(max=max, **kwargs))

    return _make
