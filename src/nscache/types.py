"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

This module defines the cache entry record and JSON type aliases.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, TypeAlias

JsonPrimitive: TypeAlias = str | int | float | bool | None
JsonValue: TypeAlias = JsonPrimitive | list["JsonValue"] | dict[str, "JsonValue"]
JsonObject: TypeAlias = dict[str, JsonValue]

DEFAULT_NAMESPACE = "cache"


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """One cached value with an optional absolute expiration (unix seconds)."""

    value: Any
    expires_at: int | None = None

    def is_expired(self, now: int) -> bool:
        if self.expires_at is None:
            return False
        return now >= self.expires_at

    def to_record(self) -> JsonObject:
        """Serialize into the persisted `{"value", "expiration"}` row shape."""
        row: JsonObject = {"value": self.value}
        if self.expires_at is not None:
            row["expiration"] = self.expires_at
        return row

    @staticmethod
    def from_record(row: Mapping[str, Any]) -> "CacheEntry":
        """Rebuild an entry from its persisted row."""
        expiration = row.get("expiration")
        if isinstance(expiration, bool) or not isinstance(expiration, (int, float)):
            expiration = None
        return CacheEntry(
            value=row["value"],
            expires_at=int(expiration) if expiration is not None else None,
        )
