"""Tests for configuration module."""

from __future__ import annotations

import os
from datetime import timedelta
from pathlib import Path
from tempfile import NamedTemporaryFile

import pytest

from redis_lru.config import (
    DEFAULT_NAMESPACE,
    CacheConfig,
    RedisConfig,
    to_milliseconds,
)
from redis_lru.exceptions import ConfigurationError
from redis_lru.scoring import constant_score, wall_clock_ms


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for key in list(os.environ.keys()):
        if key.startswith("LRU_CACHE_"):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch


class TestCacheConfig:
    """CacheConfig"""

    def test_default_values(self) -> None:
        c = CacheConfig(max=10)
        assert c.namespace == DEFAULT_NAMESPACE
        assert c.score is wall_clock_ms
        assert c.increment is False
        assert c.max_age is None
        assert c.max_age_ms is None

    @pytest.mark.parametrize("capacity", [None, 0, -1, 2.5, "3", True])
    def test_rejects_invalid_max(self, capacity) -> None:
        with pytest.raises(ConfigurationError, match="max number of items in cache must be specified"):
            CacheConfig(max=capacity)

    def test_rejects_empty_namespace(self) -> None:
        with pytest.raises(ConfigurationError, match="namespace"):
            CacheConfig(max=1, namespace="")

    def test_rejects_non_callable_score(self) -> None:
        with pytest.raises(ConfigurationError, match="score"):
            CacheConfig(max=1, score=5)

    def test_rejects_invalid_max_age(self) -> None:
        with pytest.raises(ConfigurationError, match="positive"):
            CacheConfig(max=1, max_age=0)
        with pytest.raises(ConfigurationError, match="timedelta"):
            CacheConfig(max=1, max_age="10s")

    def test_max_age_from_timedelta(self) -> None:
        c = CacheConfig(max=1, max_age=timedelta(seconds=2))
        assert c.max_age_ms == 2000

    def test_is_immutable(self) -> None:
        c = CacheConfig(max=1)
        with pytest.raises(AttributeError):
            c.max = 2

    def test_lru_preset(self) -> None:
        c = CacheConfig.lru(5, namespace="recent")
        assert c.max == 5
        assert c.namespace == "recent"
        assert c.increment is False
        assert c.score is wall_clock_ms

    def test_lfu_preset(self) -> None:
        c = CacheConfig.lfu(5)
        assert c.increment is True
        assert c.score is constant_score

    def test_lfu_preset_accepts_custom_weight(self) -> None:
        weight = lambda key: 2  # noqa: E731
        c = CacheConfig.lfu(5, score=weight)
        assert c.score is weight


class TestCacheConfigFromEnv:
    """CacheConfig.from_env"""

    def test_requires_max(self, clean_env) -> None:
        with pytest.raises(ConfigurationError):
            CacheConfig.from_env()

    def test_reads_values(self, clean_env) -> None:
        clean_env.setenv("LRU_CACHE_MAX", "100")
        clean_env.setenv("LRU_CACHE_NAMESPACE", "articles")
        clean_env.setenv("LRU_CACHE_MAX_AGE_MS", "60000")

        c = CacheConfig.from_env()

        assert c.max == 100
        assert c.namespace == "articles"
        assert c.max_age_ms == 60000
        assert c.increment is False

    def test_lfu_policy(self, clean_env) -> None:
        clean_env.setenv("LRU_CACHE_MAX", "10")
        clean_env.setenv("LRU_CACHE_POLICY", "LFU")

        c = CacheConfig.from_env()

        assert c.increment is True
        assert c.score is constant_score

    def test_score_override(self, clean_env) -> None:
        clean_env.setenv("LRU_CACHE_MAX", "10")
        score = lambda key: 1  # noqa: E731

        assert CacheConfig.from_env(score=score).score is score

    def test_unknown_policy(self, clean_env) -> None:
        clean_env.setenv("LRU_CACHE_MAX", "10")
        clean_env.setenv("LRU_CACHE_POLICY", "fifo")

        with pytest.raises(ConfigurationError, match="LRU_CACHE_POLICY"):
            CacheConfig.from_env()

    def test_invalid_number(self, clean_env) -> None:
        clean_env.setenv("LRU_CACHE_MAX", "many")

        with pytest.raises(ConfigurationError, match="LRU_CACHE_MAX must be an integer"):
            CacheConfig.from_env()


class TestToMilliseconds:
    """to_milliseconds"""

    def test_none(self) -> None:
        assert to_milliseconds(None) is None

    def test_rounds_up_fractions(self) -> None:
        assert to_milliseconds(0.2) == 1
        assert to_milliseconds(timedelta(microseconds=1500)) == 2


class TestRedisConfig:
    """RedisConfig"""

    def test_default_values(self) -> None:
        c = RedisConfig()
        assert c.url == "redis://localhost:6379/0"
        assert c.password is None
        assert c.socket_timeout == 5.0

    def test_from_env(self, clean_env) -> None:
        clean_env.setenv("LRU_CACHE_REDIS_URL", "redis://cache:6380/2")
        clean_env.setenv("LRU_CACHE_REDIS_PASSWORD", "secret")
        clean_env.setenv("LRU_CACHE_REDIS_SOCKET_TIMEOUT", "1.5")

        c = RedisConfig.from_env()

        assert c.url == "redis://cache:6380/2"
        assert c.password == "secret"
        assert c.socket_timeout == 1.5

    def test_password_from_file(self, clean_env) -> None:
        with NamedTemporaryFile(mode="w", delete=False, suffix=".txt") as f:
            f.write("file_secret\n")
            path = f.name
        try:
            clean_env.setenv("LRU_CACHE_REDIS_PASSWORD_FILE", path)
            clean_env.setenv("LRU_CACHE_REDIS_PASSWORD", "env_secret")

            assert RedisConfig.from_env().password == "file_secret"
        finally:
            Path(path).unlink()

    def test_invalid_timeout(self, clean_env) -> None:
        clean_env.setenv("LRU_CACHE_REDIS_SOCKET_TIMEOUT", "soon")

        with pytest.raises(ConfigurationError):
            RedisConfig.from_env()

    def test_safe_url_masks_credentials(self) -> None:
        c = RedisConfig(url="redis://user:pw@cache:6379/0")
        assert c.safe_url == "redis://***@cache:6379/0"
        assert RedisConfig().safe_url == "redis://localhost:6379/0"
