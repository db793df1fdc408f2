"""Custom exceptions.

Classifies the failures raised by the cache engine itself. Errors coming from
the store transport are not wrapped and reach the caller unchanged.
"""

from __future__ import annotations


class LRUCacheError(Exception):
    """Base class for cache errors."""


class ConfigurationError(LRUCacheError):
    """Invalid construction arguments.

    Raised for a missing store, a missing or non-positive capacity, or an
    unusable max age.
    """


class InvalidKeyError(LRUCacheError, TypeError):
    """A logical cache key was not a string."""

    def __init__(self, key: object) -> None:
        self.key = key
        super().__init__(f"key should be a string, got {type(key).__name__}")


class SerializationError(LRUCacheError):
    """A value could not be encoded to, or decoded from, JSON."""
