"""Redis Store Gateway - implements StorePort."""

from __future__ import annotations

from typing import Any, Callable, Iterable, List, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError
import structlog

from redis_lru.config import RedisConfig
from redis_lru.port.store_port import Payload, StoreBatch, StorePort

logger = structlog.get_logger(__name__)


def _decode(value: Any) -> Any:
    if isinstance(value, bytes):
        return value.decode()
    return value


def _members(values: Iterable[Any]) -> List[str]:
    return [_decode(v) for v in values]


def _upsert_changed(increment: bool) -> Callable[[Any], bool]:
    # ZADD INCR replies with the new score (nil when XX skipped the member);
    # plain ZADD CH replies with the number of members added or changed.
    if increment:
        return lambda reply: reply is not None
    return lambda reply: bool(reply)


def _zadd_args(member: str, score: float, only_if_exists: bool, increment: bool) -> dict:
    return {
        "mapping": {member: score},
        "xx": only_if_exists,
        "ch": not increment,
        "incr": increment,
    }


class RedisStoreBatch(StoreBatch):
    """MULTI/EXEC pipeline that normalizes replies like RedisStoreGateway does."""

    def __init__(self, client: "redis.Redis") -> None:
        self._pipeline = client.pipeline(transaction=True)
        self._commands: List[str] = []
        self._parsers: List[Callable[[Any], Any]] = []

    def _queue(self, command: str, parser: Callable[[Any], Any] = lambda reply: reply) -> StoreBatch:
        self._commands.append(command)
        self._parsers.append(parser)
        return self

    def get(self, key: str) -> StoreBatch:
        self._pipeline.get(key)
        return self._queue("GET")

    def set(self, key: str, value: Payload, expiry_ms: Optional[int] = None) -> StoreBatch:
        self._pipeline.set(key, value, px=expiry_ms)
        return self._queue("SET", lambda reply: None)

    def delete(self, keys: Iterable[str]) -> StoreBatch:
        self._pipeline.delete(*keys)
        return self._queue("DEL", int)

    def upsert(
        self,
        index_key: str,
        member: str,
        score: float,
        *,
        only_if_exists: bool = False,
        increment: bool = False,
    ) -> StoreBatch:
        self._pipeline.zadd(index_key, **_zadd_args(member, score, only_if_exists, increment))
        return self._queue("ZADD", _upsert_changed(increment))

    def range_by_rank(self, index_key: str, start: int, end: int) -> StoreBatch:
        self._pipeline.zrange(index_key, start, end)
        return self._queue("ZRANGE", _members)

    def score(self, index_key: str, member: str) -> StoreBatch:
        self._pipeline.zscore(index_key, member)
        return self._queue("ZSCORE")

    def remove(self, index_key: str, members: Iterable[str]) -> StoreBatch:
        self._pipeline.zrem(index_key, *members)
        return self._queue("ZREM", int)

    async def execute(self) -> List[Any]:
        try:
            replies = await self._pipeline.execute()
        except RedisError as e:
            logger.error(
                "Redis transaction failed",
                commands=self._commands,
                error=str(e),
            )
            raise
        return [parse(reply) for parse, reply in zip(self._parsers, replies)]


class RedisStoreGateway(StorePort):
    """Gateway for the Redis store - Anti-Corruption Layer.

    The client is injected so that several cache namespaces can share one
    connection pool.
    """

    def __init__(self, client: "redis.Redis") -> None:
        self._client = client

    @classmethod
    def from_config(cls, config: RedisConfig) -> RedisStoreGateway:
        """Build a gateway with a new client for ``config.url``."""
        client = redis.Redis.from_url(
            config.url,
            password=config.password,
            socket_timeout=config.socket_timeout,
            decode_responses=True,
        )
        logger.info("Redis store gateway created", url=config.safe_url)
        return cls(client)

    async def initialize(self) -> None:
        """Check the connection."""
        await self._client.ping()
        logger.info("Redis store gateway initialized")

    async def cleanup(self) -> None:
        """Close the client's connections."""
        await self._client.aclose()
        logger.info("Redis store gateway cleaned up")

    def batch(self) -> StoreBatch:
        """Start a MULTI/EXEC batch on this gateway's client."""
        return RedisStoreBatch(self._client)

    async def _call(self, command: str, coro):
        try:
            return await coro
        except RedisError as e:
            logger.error("Redis command failed", command=command, error=str(e))
            raise

    async def get(self, key: str) -> Optional[Payload]:
        """
        Get a value from Redis.

        Args:
            key: Physical value key

        Returns:
            Stored payload, or None if absent or expired
        """
        return await self._call("GET", self._client.get(key))

    async def set(self, key: str, value: Payload, expiry_ms: Optional[int] = None) -> None:
        """
        Set a value in Redis.

        Args:
            key: Physical value key
            value: Serialized payload
            expiry_ms: Time to live in milliseconds, or None to keep it forever
        """
        await self._call("SET", self._client.set(key, value, px=expiry_ms))

    async def delete(self, keys: Iterable[str]) -> int:
        """
        Delete values from Redis.

        Args:
            keys: Physical value keys

        Returns:
            Number of keys that existed and were removed
        """
        keys = list(keys)
        if not keys:
            return 0
        return int(await self._call("DEL", self._client.delete(*keys)))

    async def exists(self, key: str) -> bool:
        """Return True if ``key`` holds a live value."""
        return bool(await self._call("EXISTS", self._client.exists(key)))

    async def upsert(
        self,
        index_key: str,
        member: str,
        score: float,
        *,
        only_if_exists: bool = False,
        increment: bool = False,
    ) -> bool:
        """
        Add or update a member of the index with ZADD.

        Args:
            index_key: Sorted set key
            member: Physical value key to index
            score: New score, or the amount to add when ``increment`` is set
            only_if_exists: Pass XX so absent members are not added
            increment: Pass INCR instead of replacing the score

        Returns:
            True if the member was added or its score changed
        """
        reply = await self._call(
            "ZADD",
            self._client.zadd(index_key, **_zadd_args(member, score, only_if_exists, increment)),
        )
        return _upsert_changed(increment)(reply)

    async def range_by_rank(self, index_key: str, start: int, end: int) -> List[str]:
        """
        Get index members by rank with ZRANGE.

        Args:
            index_key: Sorted set key
            start: First rank, inclusive
            end: Last rank, inclusive; -1 for the last member

        Returns:
            Members in ascending score order
        """
        return _members(await self._call("ZRANGE", self._client.zrange(index_key, start, end)))

    async def score(self, index_key: str, member: str) -> Optional[float]:
        """
        Get the index score of a member.

        Returns:
            Score as stored, or None if ``member`` is not indexed
        """
        return await self._call("ZSCORE", self._client.zscore(index_key, member))

    async def cardinality(self, index_key: str) -> int:
        """Number of members in the index."""
        return int(await self._call("ZCARD", self._client.zcard(index_key)))

    async def remove(self, index_key: str, members: Iterable[str]) -> int:
        """
        Remove members from the index with ZREM.

        Args:
            index_key: Sorted set key
            members: Physical value keys to drop

        Returns:
            Number of members removed
        """
        members = list(members)
        if not members:
            return 0
        return int(await self._call("ZREM", self._client.zrem(index_key, *members)))
