"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Clock and wire helpers shared by the cache and its backing stores.
"""

import json
import math
import time
from typing import Any, Callable

from nscache.types import JsonObject


def now_s(clock: Callable[[], float] = time.time) -> int:
    """Current unix timestamp in whole seconds, floored."""
    return math.floor(clock())


def ttl_seconds(value: object) -> int | None:
    """
    Normalize a TTL argument, or ``None`` when it should not expire.

    Accepts non-negative integers and integral floats (``5.0``); bools,
    fractional floats, negatives and anything else mean "never expires".
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, float) and value.is_integer() and value >= 0:
        return int(value)
    return None


def encode_namespace(snapshot: JsonObject | dict[str, Any]) -> str:
    """Serialize one namespace snapshot for stores that persist text."""
    return json.dumps(snapshot, ensure_ascii=False, separators=(",", ":"))


def decode_namespace(blob: str | bytes) -> JsonObject:
    """Parse a persisted namespace snapshot; it must be a JSON object."""
    row = json.loads(blob)
    if not isinstance(row, dict):
        raise ValueError(f"namespace snapshot must be a JSON object, got {type(row).__name__}")
    return row
