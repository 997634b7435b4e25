"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

JSON file backing store: one document mapping namespace -> persisted value.
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
import os
from pathlib import Path
from typing import Any

from .base import BackingStore, BackingStoreError
from ..types import JsonValue

logger = logging.getLogger("nscache.stores.file")


class JSONFileBackingStore(BackingStore):
    """
    Persist every namespace into a single JSON document on disk.

    The document is read lazily on first access and rewritten atomically
    (temp file + ``os.replace``) on each update. Writes are serialized with
    an ``asyncio.Lock`` and run in a worker thread.
    """

    backend_id: str = "file"

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._doc: dict[str, JsonValue] | None = None
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, JsonValue]:
        if self._doc is not None:
            return self._doc
        if not self._path.exists():
            self._doc = {}
            return self._doc
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                raw = json.load(handle)
        except (OSError, ValueError) as exc:
            raise BackingStoreError(
                f"Unable to read cache file '{self._path}': {exc}"
            ) from exc
        if not isinstance(raw, dict):
            raise BackingStoreError(
                f"Cache file '{self._path}' must contain a JSON object"
            )
        logger.debug("Loaded %d namespaces from %s", len(raw), self._path)
        self._doc = raw
        return self._doc

    def get(self, key: str, default: Any = None) -> Any:
        doc = self._load()
        if key not in doc:
            return default
        return copy.deepcopy(doc[key])

    async def update(self, key: str, value: JsonValue | None) -> bool:
        async with self._lock:
            doc = dict(self._load())
            if value is None:
                doc.pop(key, None)
            else:
                doc[key] = copy.deepcopy(value)
            await asyncio.to_thread(self._write, json.dumps(doc, ensure_ascii=False))
            self._doc = doc
        return True

    def _write(self, payload: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_name(self._path.name + ".tmp")
        with tmp.open("w", encoding="utf-8") as handle:
            handle.write(payload)
        os.replace(tmp, self._path)
