"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: stores/base.py.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from ..types import JsonValue


class BackingStoreError(RuntimeError):
    """Raised when a backing store cannot be resolved or read."""


@runtime_checkable
class BackingStore(Protocol):
    """Two-operation persistence contract consumed by the cache."""

    backend_id: str

    def get(self, key: str, default: Any = None) -> Any: ...

    async def update(self, key: str, value: JsonValue | None) -> bool: ...


@runtime_checkable
class PreloadCapable(Protocol):
    """Stores whose reads are natively async and must be warmed before `get`."""

    async def preload(self, *keys: str) -> None: ...
