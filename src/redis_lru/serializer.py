"""JSON helpers wrapping orjson."""

from __future__ import annotations

from typing import Any

import orjson

from redis_lru.exceptions import SerializationError


def dumps(value: Any) -> bytes:
    """Serialize python object to JSON bytes."""

    try:
        return orjson.dumps(value)
    except TypeError as e:
        raise SerializationError(f"value is not JSON serializable: {e}") from e


def loads(raw: bytes | str) -> Any:
    """Deserialize a stored JSON payload."""

    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise SerializationError(f"stored payload is not valid JSON: {e}") from e
