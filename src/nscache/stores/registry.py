"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Process-wide backing stores shared by every cache in the process.

Caches never own their store: the host registers one per backend (or lets
the registry build it on first use) and every namespace opened against that
name shares the same instance, so two caches over ``"file"`` write through
one lock and one in-memory document.
"""

from __future__ import annotations

from threading import Lock
from typing import Any

from ..settings import CacheSettings
from .base import BackingStore, BackingStoreError

DEFAULT_BACKEND = "inmemory"


def _normalize(name: str) -> str:
    return name.strip().lower()


class BackingStoreRegistry:
    """Named store instances, built lazily from settings when first resolved."""

    def __init__(self) -> None:
        self._stores: dict[str, BackingStore] = {}
        self._lock = Lock()

    def register(
        self,
        store: BackingStore,
        *,
        name: str | None = None,
        overwrite: bool = False,
    ) -> str:
        key = _normalize(name if name is not None else store.backend_id)
        if not key:
            raise BackingStoreError("Backing store name must be non-empty")
        with self._lock:
            current = self._stores.get(key)
            if current is not None and current is not store and not overwrite:
                raise BackingStoreError(f"Backing store already registered: {key}")
            self._stores[key] = store
        return key

    def unregister(self, name: str) -> BackingStore | None:
        with self._lock:
            return self._stores.pop(_normalize(name), None)

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._stores)

    def resolve(
        self,
        backend: str | BackingStore | None = None,
        *,
        settings: CacheSettings | None = None,
        redis_client: Any | None = None,
    ) -> BackingStore:
        """
        Return the shared store for `backend`.

        ``None`` means the default in-memory store. A store instance is
        returned unchanged. A name is looked up first; unregistered backend
        kinds (``inmemory``, ``file``, ``redis``) are built from `settings`
        and registered under that name so later lookups share them.
        """
        if backend is not None and not isinstance(backend, str):
            return backend

        from .factory import build_backing_store, canonical_backend

        key = canonical_backend(backend) if backend is not None else DEFAULT_BACKEND
        with self._lock:
            existing = self._stores.get(key)
            if existing is not None:
                return existing

            try:
                store = build_backing_store(
                    key, settings=settings or CacheSettings(), redis_client=redis_client
                )
            except ValueError as exc:
                raise BackingStoreError(f"Unknown backing store '{backend}'") from exc
            self._stores[key] = store
            return store


_DEFAULT_REGISTRY = BackingStoreRegistry()


def register_backing_store(
    store: BackingStore,
    *,
    name: str | None = None,
    overwrite: bool = False,
) -> str:
    """Share `store` under `name` (its `backend_id` by default)."""
    return _DEFAULT_REGISTRY.register(store, name=name, overwrite=overwrite)


def create_backing_store(
    backend: str | BackingStore | None = None,
    *,
    settings: CacheSettings | None = None,
    redis_client: Any | None = None,
) -> BackingStore:
    """Resolve the process-wide store for a name, an instance, or the default."""
    return _DEFAULT_REGISTRY.resolve(
        backend, settings=settings, redis_client=redis_client
    )


def list_backing_stores() -> list[str]:
    return _DEFAULT_REGISTRY.names()


def unregister_backing_store(name: str) -> BackingStore | None:
    """Forget a shared store; callers holding it keep using it."""
    return _DEFAULT_REGISTRY.unregister(name)


__all__ = [
    "DEFAULT_BACKEND",
    "BackingStoreRegistry",
    "register_backing_store",
    "create_backing_store",
    "list_backing_stores",
    "unregister_backing_store",
]
