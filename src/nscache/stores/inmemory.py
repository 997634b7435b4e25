"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: stores/inmemory.py.
"""

from __future__ import annotations

import copy
from typing import Any

from .base import BackingStore
from ..types import JsonValue


class InMemoryBackingStore(BackingStore):
    """Process-local backing store suitable for development/test workloads."""

    backend_id: str = "inmemory"

    def __init__(self, *, backend_id: str = "inmemory") -> None:
        self.backend_id = backend_id
        self._rows: dict[str, JsonValue] = {}

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._rows:
            return default
        return copy.deepcopy(self._rows[key])

    async def update(self, key: str, value: JsonValue | None) -> bool:
        if value is None:
            self._rows.pop(key, None)
        else:
            self._rows[key] = copy.deepcopy(value)
        return True

    def keys(self) -> list[str]:
        """List stored top-level keys."""
        return list(self._rows)
