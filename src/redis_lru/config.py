"""Configuration management.

Cache namespace settings and the Redis connection settings. Both can be
read from environment variables, and the Redis password also supports the
Docker Secrets ``_FILE`` suffix.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Optional, Union

from redis_lru.exceptions import ConfigurationError
from redis_lru.scoring import ScoreFn, constant_score, wall_clock_ms

DEFAULT_NAMESPACE = "LRU-CACHE!"

# Milliseconds as a number, or a timedelta
Duration = Union[int, float, timedelta]


def to_milliseconds(duration: Optional[Duration]) -> Optional[int]:
    """Normalize a max age to whole milliseconds (rounded up)."""
    if duration is None:
        return None
    if isinstance(duration, timedelta):
        ms = duration.total_seconds() * 1000
    elif isinstance(duration, bool) or not isinstance(duration, (int, float)):
        raise ConfigurationError(
            f"max age must be milliseconds or a timedelta, got {type(duration).__name__}"
        )
    else:
        ms = duration
    if ms <= 0:
        raise ConfigurationError(f"max age must be positive, got {duration!r}")
    return math.ceil(ms)


def _get_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if not value:
        return None
    try:
        return int(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from e


@dataclass(frozen=True)
class CacheConfig:
    """Settings for one cache namespace.

    ``max`` is required. ``score`` receives the logical key and returns a
    number; larger numbers rank first. With ``increment`` the number is added
    to the stored score instead of replacing it.
    """

    max: Optional[int] = None
    namespace: str = DEFAULT_NAMESPACE
    score: ScoreFn = wall_clock_ms
    increment: bool = False
    max_age: Optional[Duration] = None

    def __post_init__(self) -> None:
        if isinstance(self.max, bool) or not isinstance(self.max, int) or self.max <= 0:
            raise ConfigurationError("max number of items in cache must be specified.")
        if not isinstance(self.namespace, str) or not self.namespace:
            raise ConfigurationError("namespace must be a non-empty string.")
        if not callable(self.score):
            raise ConfigurationError("score must be callable.")
        to_milliseconds(self.max_age)

    @property
    def max_age_ms(self) -> Optional[int]:
        return to_milliseconds(self.max_age)

    @classmethod
    def lru(cls, max: int, **kwargs) -> CacheConfig:
        """Least recently used: wall-clock scores, replaced on every access."""
        return cls(max=max, **kwargs)

    @classmethod
    def lfu(cls, max: int, **kwargs) -> CacheConfig:
        """Least frequently used: every access adds one to the key's score."""
        kwargs.setdefault("score", constant_score)
        return cls(max=max, increment=True, **kwargs)

    @classmethod
    def from_env(cls, score: Optional[ScoreFn] = None) -> CacheConfig:
        """Read namespace settings from ``LRU_CACHE_*`` environment variables."""
        kwargs: dict = {
            "namespace": os.getenv("LRU_CACHE_NAMESPACE", DEFAULT_NAMESPACE),
            "max_age": _get_int("LRU_CACHE_MAX_AGE_MS"),
        }
        if score is not None:
            kwargs["score"] = score

        capacity = _get_int("LRU_CACHE_MAX")
        policy = os.getenv("LRU_CACHE_POLICY", "lru").lower()
        if policy == "lru":
            return cls.lru(capacity, **kwargs)
        if policy == "lfu":
            return cls.lfu(capacity, **kwargs)
        raise ConfigurationError(f"LRU_CACHE_POLICY must be 'lru' or 'lfu', got {policy!r}")


@dataclass(frozen=True)
class RedisConfig:
    """Redis connection settings."""

    url: str = "redis://localhost:6379/0"
    password: Optional[str] = None
    socket_timeout: float = 5.0

    @property
    def safe_url(self) -> str:
        """URL with credentials masked, for logging."""
        if "@" in self.url:
            scheme = self.url.split("://", 1)[0]
            return f"{scheme}://***@{self.url.split('@')[-1]}"
        return self.url

    @classmethod
    def from_env(cls) -> RedisConfig:
        """Read connection settings from the environment."""

        def get_env_or_file(name: str) -> Optional[str]:
            """Value of ``name``, or the contents of the file named by ``{name}_FILE``."""
            file_path = os.getenv(f"{name}_FILE")
            if file_path and Path(file_path).exists():
                return Path(file_path).read_text().strip()
            return os.getenv(name) or None

        timeout = os.getenv("LRU_CACHE_REDIS_SOCKET_TIMEOUT", "5.0")
        try:
            socket_timeout = float(timeout)
        except ValueError as e:
            raise ConfigurationError(
                f"LRU_CACHE_REDIS_SOCKET_TIMEOUT must be a number, got {timeout!r}"
            ) from e

        return cls(
            url=os.getenv("LRU_CACHE_REDIS_URL", "redis://localhost:6379/0"),
            password=get_env_or_file("LRU_CACHE_REDIS_PASSWORD"),
            socket_timeout=socket_timeout,
        )
