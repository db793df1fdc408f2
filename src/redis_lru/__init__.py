"""Redis-backed LRU/LFU cache.

Keeps at most ``max`` entries per namespace, evicting the least recently
(or least frequently) used ones. Values are stored as JSON.

Usage:
    store = RedisStoreGateway.from_config(RedisConfig.from_env())
    cache = build_cache(store, CacheConfig.lru(100, namespace="articles"))
    await cache.set("a1", {"title": "..."})
"""

from redis_lru.cache import LRUCache, build_cache
from redis_lru.config import CacheConfig, RedisConfig
from redis_lru.exceptions import (
    ConfigurationError,
    InvalidKeyError,
    LRUCacheError,
    SerializationError,
)
from redis_lru.gateway.redis_store_gateway import RedisStoreGateway
from redis_lru.port.store_port import StoreBatch, StorePort

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "InvalidKeyError",
    "LRUCache",
    "LRUCacheError",
    "RedisConfig",
    "RedisStoreGateway",
    "SerializationError",
    "StoreBatch",
    "StorePort",
    "build_cache",
]
__version__ = "0.1.0"
