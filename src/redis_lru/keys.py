"""Physical key naming for a cache namespace."""

from __future__ import annotations

from redis_lru.exceptions import InvalidKeyError


class KeyNamer:
    """Maps logical keys to store keys.

    Values live under ``{namespace}-k-{key}``; the namespace shares a single
    sorted-set index at ``{namespace}-i``.
    """

    def __init__(self, namespace: str) -> None:
        self.namespace = namespace
        self.index_key = f"{namespace}-i"
        self._prefix = f"{namespace}-k-"

    def value_key(self, key: str) -> str:
        if not isinstance(key, str):
            raise InvalidKeyError(key)
        return f"{self._prefix}{key}"

    def logical_key(self, value_key: str) -> str:
        if value_key.startswith(self._prefix):
            return value_key[len(self._prefix):]
        return value_key
