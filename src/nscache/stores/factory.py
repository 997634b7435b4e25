"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Factory helpers for selecting backing stores from environment variables.
"""

from __future__ import annotations

from typing import Any

from ..settings import CacheSettings
from .base import BackingStore

_MEMORY_ALIASES = ("mem", "memory", "inmemory", "in_memory")
_FILE_ALIASES = ("file", "json")


def canonical_backend(kind: str) -> str:
    """Fold backend aliases onto one name so they share a registered store."""
    kind = kind.strip().lower()
    if kind in _MEMORY_ALIASES:
        return "inmemory"
    if kind in _FILE_ALIASES:
        return "file"
    return kind


def build_backing_store(
    kind: str,
    *,
    settings: CacheSettings,
    redis_client: Any | None = None,
) -> BackingStore:
    """
    Construct a fresh store of `kind` from `settings`.

    Redis resolution:
    - Uses the provided `redis_client` when supplied.
    - Otherwise builds a client from ``settings.resolved_redis_url()``.

    Raises:
        ValueError: `kind` is not a known backend.
    """
    kind = kind.strip().lower()

    if kind in _MEMORY_ALIASES:
        from .inmemory import InMemoryBackingStore

        return InMemoryBackingStore()

    if kind in _FILE_ALIASES:
        from .file import JSONFileBackingStore

        return JSONFileBackingStore(settings.file_path)

    if kind == "redis":
        from .redis import RedisBackingStore

        client = redis_client
        if client is None:
            try:
                import redis.asyncio as redis
            except ModuleNotFoundError as exc:  # pragma: no cover
                raise RuntimeError(
                    "Redis backing store requires `redis` to be installed."
                ) from exc

            client = redis.Redis.from_url(settings.resolved_redis_url())

        return RedisBackingStore(client, prefix=settings.redis_prefix)

    raise ValueError(f"Unknown NSCACHE_BACKEND: {kind}")


def create_backing_store_from_env(
    *,
    redis_client: Any | None = None,
    settings: CacheSettings | None = None,
) -> BackingStore:
    """
    Pick a backing store from `NSCACHE_*` environment variables.

    The in-memory backend resolves to the process-wide shared store; file
    and redis backends get a fresh store configured from the settings.
    Unknown backends raise ``ValueError``.
    """
    settings = settings or CacheSettings.from_env()
    backend = settings.backend.strip().lower()

    if backend in _MEMORY_ALIASES:
        from .registry import create_backing_store

        return create_backing_store()

    return build_backing_store(backend, settings=settings, redis_client=redis_client)
