"""Port interfaces for external dependencies."""

from redis_lru.port.store_port import StoreBatch, StorePort

__all__ = ["StoreBatch", "StorePort"]
