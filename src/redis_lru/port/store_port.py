"""Port interface for the backing key-value store."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Optional, Union

Payload = Union[bytes, str]


class StoreBatch(ABC):
    """Commands queued for one atomic transaction.

    Every command method returns the batch so calls can be chained.
    ``execute`` runs the queue all-or-nothing and returns one result per
    command, in order, normalized the same way as the matching
    ``StorePort`` method.
    """

    @abstractmethod
    def get(self, key: str) -> StoreBatch:
        pass

    @abstractmethod
    def set(self, key: str, value: Payload, expiry_ms: Optional[int] = None) -> StoreBatch:
        pass

    @abstractmethod
    def delete(self, keys: Iterable[str]) -> StoreBatch:
        pass

    @abstractmethod
    def upsert(
        self,
        index_key: str,
        member: str,
        score: float,
        *,
        only_if_exists: bool = False,
        increment: bool = False,
    ) -> StoreBatch:
        pass

    @abstractmethod
    def range_by_rank(self, index_key: str, start: int, end: int) -> StoreBatch:
        pass

    @abstractmethod
    def score(self, index_key: str, member: str) -> StoreBatch:
        pass

    @abstractmethod
    def remove(self, index_key: str, members: Iterable[str]) -> StoreBatch:
        pass

    @abstractmethod
    async def execute(self) -> List[Any]:
        pass


class StorePort(ABC):
    """Abstract interface for the store the cache is layered on.

    Flat key/value storage with optional expiry, plus one sorted set per
    namespace used as the recency index. Sorted-set ranges are ascending by
    score; ``end=-1`` means the last element.
    """

    @abstractmethod
    def batch(self) -> StoreBatch:
        """Start a new atomic batch."""
        pass

    @abstractmethod
    async def get(self, key: str) -> Optional[Payload]:
        """
        Read a value.

        Returns:
            Stored payload, or None if absent or expired
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: Payload, expiry_ms: Optional[int] = None) -> None:
        """Write a value, expiring after ``expiry_ms`` milliseconds when given."""
        pass

    @abstractmethod
    async def delete(self, keys: Iterable[str]) -> int:
        """
        Delete values.

        Returns:
            Number of keys that existed and were removed
        """
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Return True if a live value is stored under ``key``."""
        pass

    @abstractmethod
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
        Insert or update a sorted-set member.

        Args:
            index_key: Sorted set key
            member: Member to write
            score: New score, or the amount to add when ``increment`` is set
            only_if_exists: Leave the set untouched if ``member`` is absent
            increment: Add ``score`` to the current score instead of replacing it

        Returns:
            True if the member was added or its score changed
        """
        pass

    @abstractmethod
    async def range_by_rank(self, index_key: str, start: int, end: int) -> List[str]:
        """Members ranked ``start`` through ``end`` inclusive."""
        pass

    @abstractmethod
    async def score(self, index_key: str, member: str) -> Optional[float]:
        """Score of ``member``, or None if it is not in the set."""
        pass

    @abstractmethod
    async def cardinality(self, index_key: str) -> int:
        """Number of members in the sorted set."""
        pass

    @abstractmethod
    async def remove(self, index_key: str, members: Iterable[str]) -> int:
        """
        Remove sorted-set members.

        Returns:
            Number of members removed
        """
        pass
