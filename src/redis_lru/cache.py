"""Bounded LRU/LFU cache on top of a key-value store.

Every cached value is paired with a member of a per-namespace sorted set,
the index. The index score orders keys for eviction; the store only offers
MULTI/EXEC transactions, so the pairing is maintained by always writing and
deleting both sides in the same batch.

Values can disappear on their own when they expire. The index is not told,
so reads that find an indexed key without a value remove the stale member
before reporting a miss.
"""

from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Union

import structlog

from redis_lru import serializer
from redis_lru.config import CacheConfig, Duration, to_milliseconds
from redis_lru.exceptions import ConfigurationError
from redis_lru.keys import KeyNamer
from redis_lru.port.store_port import StorePort
from redis_lru.scoring import ScoringPolicy

logger = structlog.get_logger(__name__)

Producer = Callable[[], Union[Any, Awaitable[Any]]]


class LRUCache:
    """Cache engine for one namespace."""

    def __init__(self, store: StorePort, config: CacheConfig) -> None:
        if store is None:
            raise ConfigurationError("redis client is required.")
        if config is None:
            raise ConfigurationError("max number of items in cache must be specified.")

        self._store = store
        self._config = config
        self._namer = KeyNamer(config.namespace)
        self._scoring = ScoringPolicy(config.score, config.increment)
        self._log = logger.bind(namespace=config.namespace)

    @property
    def config(self) -> CacheConfig:
        return self._config

    async def get(self, key: str) -> Any:
        """Return the value for ``key`` and bump its score, or None on a miss.

        The score update only applies to members already in the index, so a
        miss never brings an evicted or expired key back.
        """
        value_key = self._namer.value_key(key)
        index_key = self._namer.index_key

        # ZADD CH reports 0 when the score is unchanged, so membership is
        # read separately to detect an index entry without a value.
        raw, _, indexed = await (
            self._store.batch()
            .get(value_key)
            .upsert(
                index_key,
                value_key,
                self._scoring.score(key),
                only_if_exists=True,
                increment=self._scoring.increment,
            )
            .score(index_key, value_key)
            .execute()
        )

        if raw is None:
            if indexed is not None:
                await self._heal(value_key)
            else:
                self._log.debug("Cache miss", key=key)
            return None

        self._log.debug("Cache hit", key=key)
        return serializer.loads(raw)

    async def set(self, key: str, value: Any, max_age: Optional[Duration] = None) -> Any:
        """Store ``value`` under ``key`` and evict whatever no longer fits.

        ``max_age`` (milliseconds or timedelta) overrides the namespace's
        max age for this entry. Returns ``value``.
        """
        value_key = self._namer.value_key(key)
        index_key = self._namer.index_key
        payload = serializer.dumps(value)
        expiry_ms = to_milliseconds(max_age)
        if expiry_ms is None:
            expiry_ms = self._config.max_age_ms

        _, _, boundary = await (
            self._store.batch()
            .set(value_key, payload, expiry_ms)
            .upsert(
                index_key,
                value_key,
                self._scoring.score(key),
                increment=self._scoring.increment,
            )
            .range_by_rank(index_key, self._config.max - 1, -1)
            .execute()
        )
        self._log.debug("Cache set", key=key, expiry_ms=expiry_ms, value_length=len(payload))

        # Read-then-delete rather than ZREMRANGEBYRANK, so that evicted
        # members and their values always leave together.
        exceeded = boundary[1:]
        if value_key in exceeded:
            exceeded = [m for m in exceeded if m != value_key]
            exceeded.append(boundary[0])

        if exceeded:
            await self._safe_delete(exceeded)
            self._log.info(
                "Evicted keys",
                key=key,
                evicted=[self._namer.logical_key(m) for m in exceeded],
            )
        return value

    async def get_or_set(
        self,
        key: str,
        producer: Producer,
        max_age: Optional[Duration] = None,
    ) -> Any:
        """Return the cached value, or produce, store and return a new one.

        ``producer`` takes no arguments and may return the value or an
        awaitable. Concurrent callers are not coordinated, so each of them
        may call the producer.
        """
        value = await self.get(key)
        if value is not None:
            return value

        value = producer()
        if inspect.isawaitable(value):
            value = await value
        return await self.set(key, value, max_age)

    async def peek(self, key: str) -> Any:
        """Return the value for ``key`` without changing its score."""
        value_key = self._namer.value_key(key)
        raw = await self._store.get(value_key)
        if raw is None:
            await self._heal(value_key)
            return None
        return serializer.loads(raw)

    async def delete(self, key: str) -> bool:
        """Remove ``key`` and its index entry. Returns True if a value was removed."""
        deleted = await self._safe_delete([self._namer.value_key(key)])
        return deleted > 0

    async def reset(self) -> None:
        """Remove every key of this namespace."""
        members = await self._store.range_by_rank(self._namer.index_key, 0, -1)
        await self._safe_delete(members)
        self._log.info("Cache reset", removed=len(members))

    async def has(self, key: str) -> bool:
        """True if a value is stored for ``key``. Does not change its score."""
        return await self._store.exists(self._namer.value_key(key))

    async def keys(self) -> List[str]:
        """Logical keys, most recently (or frequently) used first."""
        members = await self._ranked_members()
        return [self._namer.logical_key(m) for m in members]

    async def values(self) -> List[Any]:
        """Values in the same order as ``keys()``.

        A key whose value already expired yields None in its position.
        """
        members = await self._ranked_members()
        if not members:
            return []

        batch = self._store.batch()
        for member in members:
            batch.get(member)
        raws = await batch.execute()
        return [None if raw is None else serializer.loads(raw) for raw in raws]

    async def count(self) -> int:
        """Number of indexed keys."""
        return await self._store.cardinality(self._namer.index_key)

    async def score(self, key: str) -> Optional[float]:
        """Score the policy recorded for ``key``, or None if not indexed.

        Under LRU this is the last access time, under LFU the access count.
        """
        index_score = await self._store.score(
            self._namer.index_key, self._namer.value_key(key)
        )
        return ScoringPolicy.raw(index_score)

    async def _ranked_members(self) -> List[str]:
        # Bounded to capacity: drift can leave extra members behind for a while.
        return await self._store.range_by_rank(
            self._namer.index_key, 0, self._config.max - 1
        )

    async def _heal(self, value_key: str) -> None:
        removed = await self._store.remove(self._namer.index_key, [value_key])
        if removed:
            self._log.info(
                "Removed index entry for expired value",
                key=self._namer.logical_key(value_key),
            )

    async def _safe_delete(self, value_keys: Iterable[str]) -> int:
        value_keys = list(value_keys)
        if not value_keys:
            return 0

        _, deleted = await (
            self._store.batch()
            .remove(self._namer.index_key, value_keys)
            .delete(value_keys)
            .execute()
        )
        return deleted


def build_cache(store: StorePort, config: CacheConfig) -> LRUCache:
    """Create a cache engine for ``config.namespace`` on ``store``."""
    return LRUCache(store, config)
