"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: stores/redis.py.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from .base import BackingStore, BackingStoreError, PreloadCapable
from ..types import JsonValue
from ..utils import decode_namespace, encode_namespace

logger = logging.getLogger("nscache.stores.redis")


class RedisBackingStore(BackingStore, PreloadCapable):
    """
    Redis-backed store for multi-process deployments.

    Each namespace lives at ``{prefix}:{namespace}`` as a JSON string.
    Redis reads are async, so ``preload`` must warm a namespace before
    ``get`` can serve it. Reading a namespace that was never preloaded or
    written through this store raises ``BackingStoreError`` instead of
    pretending it is empty.

    Args:
        redis_client: An ``redis.asyncio.Redis`` client instance.
        prefix: Key prefix for every namespace.
    """

    backend_id: str = "redis"

    def __init__(self, redis_client, *, prefix: str = "nscache") -> None:
        self._redis = redis_client
        self._prefix = prefix
        self._snapshots: dict[str, JsonValue] = {}
        self._loaded: set[str] = set()

    def _key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    def is_loaded(self, key: str) -> bool:
        return key in self._loaded

    async def preload(self, *keys: str) -> None:
        for key in keys:
            blob = await self._redis.get(self._key(key))
            if blob is None:
                self._snapshots.pop(key, None)
            else:
                try:
                    self._snapshots[key] = decode_namespace(blob)
                except ValueError as exc:
                    raise BackingStoreError(
                        f"Corrupt JSON under redis key '{self._key(key)}'"
                    ) from exc
            self._loaded.add(key)
            logger.debug("Preloaded redis key %s", self._key(key))

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._loaded:
            raise BackingStoreError(
                f"Redis namespace '{key}' was not preloaded; "
                "await store.preload(namespace) or use open_cache()"
            )
        if key not in self._snapshots:
            return default
        return copy.deepcopy(self._snapshots[key])

    async def update(self, key: str, value: JsonValue | None) -> bool:
        if value is None:
            await self._redis.delete(self._key(key))
            self._snapshots.pop(key, None)
            self._loaded.add(key)
            return True
        result = await self._redis.set(self._key(key), encode_namespace(value))
        self._snapshots[key] = copy.deepcopy(value)
        self._loaded.add(key)
        return bool(result)
