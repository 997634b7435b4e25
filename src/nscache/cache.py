"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Namespaced, TTL-aware key-value cache mirrored into a backing store.

Every namespace owns one top-level backing store entry holding the whole
``{key: {"value", "expiration"}}`` mapping. Reads are served from memory;
mutations update memory first and then persist the full mapping.

Quick start::

    from nscache import InMemoryBackingStore, NamespacedExpiringCache

    cache = NamespacedExpiringCache(InMemoryBackingStore(), "sessions")
    await cache.put("token", "abc", ttl=60)
    cache.get("token")
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable

from .settings import CacheSettings
from .stores.base import BackingStore, PreloadCapable
from .stores.factory import create_backing_store_from_env
from .types import DEFAULT_NAMESPACE, CacheEntry, JsonObject
from .utils import now_s, ttl_seconds

logger = logging.getLogger("nscache.cache")


async def _resolved(result: bool) -> bool:
    return result


class NamespacedExpiringCache:
    """
    Cache values under one namespace of a backing store, with optional expiry.

    Expired entries are never swept. They stay in memory, are hidden from
    ``get``/``has``/``get_expiration``, and still show up in ``keys`` and
    ``all`` until overwritten, forgotten or flushed.

    ``put``, ``forget`` and ``flush`` apply their change to memory at call
    time. Inside a running event loop the store write is scheduled right
    away as a task, so writes reach the store in call order even if the
    caller awaits them out of order or never awaits them. Outside a loop
    the returned coroutine performs the write when run. Either way the
    payload is the full mapping as it stands when the write is issued, and
    the awaitable resolves to the backing store's success flag.

    Args:
        store: Backing store implementing ``get(key, default)`` and
            ``async update(key, value)``.
        namespace: Backing store key for this cache. Defaults to ``"cache"``.
        clock: Float seconds since epoch; swap in tests.
    """

    def __init__(
        self,
        store: BackingStore,
        namespace: str | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if store is None:
            raise ValueError("NamespacedExpiringCache requires a backing store")
        self._store = store
        self._namespace = namespace or DEFAULT_NAMESPACE
        self._clock = clock
        self._entries: dict[str, CacheEntry] = self._hydrate()
        self._pending: set[asyncio.Future[bool]] = set()

    @property
    def store(self) -> BackingStore:
        return self._store

    @property
    def namespace(self) -> str:
        return self._namespace

    def _hydrate(self) -> dict[str, CacheEntry]:
        raw = self._store.get(self._namespace, {})
        if not isinstance(raw, dict):
            logger.warning(
                "Ignoring non-mapping snapshot for namespace %s", self._namespace
            )
            return {}
        entries: dict[str, CacheEntry] = {}
        for key, row in raw.items():
            if not isinstance(row, dict) or "value" not in row:
                logger.warning(
                    "Skipping malformed row %r in namespace %s", key, self._namespace
                )
                continue
            entries[str(key)] = CacheEntry.from_record(row)
        logger.debug(
            "Hydrated %d entries for namespace %s", len(entries), self._namespace
        )
        return entries

    def _snapshot(self) -> JsonObject:
        return {key: entry.to_record() for key, entry in self._entries.items()}

    def _dispatch(self, persist: Awaitable[bool]) -> Awaitable[bool]:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return persist
        task = asyncio.ensure_future(persist)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _persist(self, *, clearing: bool = False) -> bool:
        # Built when the write is issued so a late write never carries stale state.
        payload: JsonObject | None = self._snapshot()
        if clearing and not payload:
            payload = None
        try:
            ok = await self._store.update(self._namespace, payload)
        except Exception:
            logger.warning(
                "Backing store update failed for namespace %s",
                self._namespace,
                exc_info=True,
            )
            return False
        if not ok:
            logger.warning(
                "Backing store rejected update for namespace %s", self._namespace
            )
        return bool(ok)

    def put(self, key: str, value: Any, ttl: int | None = None) -> Awaitable[bool]:
        """
        Store `value` under `key`, expiring `ttl` seconds from now if given.

        Resolves ``False`` without touching memory or the store when `key` is
        not a string or `value` is ``None``. A `ttl` that is not a
        non-negative whole number (``5`` or ``5.0``) means the entry never
        expires.
        """
        if not isinstance(key, str) or value is None:
            return self._dispatch(_resolved(False))
        seconds = ttl_seconds(ttl)
        expires_at = now_s(self._clock) + seconds if seconds is not None else None
        self._entries[key] = CacheEntry(value=value, expires_at=expires_at)
        return self._dispatch(self._persist())

    def get(self, key: str, default: Any = None) -> Any:
        """Return the live value for `key`, or `default` if missing or expired."""
        entry = self._entries.get(key) if isinstance(key, str) else None
        if entry is None or entry.is_expired(now_s(self._clock)):
            return default
        return entry.value

    def has(self, key: str) -> bool:
        entry = self._entries.get(key) if isinstance(key, str) else None
        return entry is not None and not entry.is_expired(now_s(self._clock))

    def forget(self, key: str) -> Awaitable[bool]:
        """Remove `key`. Forgetting a missing key succeeds without a store write."""
        if not isinstance(key, str) or key not in self._entries:
            return self._dispatch(_resolved(True))
        del self._entries[key]
        return self._dispatch(self._persist())

    def keys(self) -> list[str]:
        """All stored keys in insertion order, expired ones included."""
        return list(self._entries)

    def all(self) -> dict[str, Any]:
        """Raw values of every stored entry, expired ones included."""
        return {key: entry.value for key, entry in self._entries.items()}

    def flush(self) -> Awaitable[bool]:
        """Drop every entry and clear the namespace in the backing store."""
        self._entries = {}
        return self._dispatch(self._persist(clearing=True))

    def get_expiration(self, key: str) -> int | None:
        """Expiration timestamp of a live entry; ``None`` otherwise."""
        if not self.has(key):
            return None
        return self._entries[key].expires_at

    def is_expired(self, key: str) -> bool:
        entry = self._entries.get(key) if isinstance(key, str) else None
        if entry is None:
            return False
        return entry.is_expired(now_s(self._clock))

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return (
            f"NamespacedExpiringCache(namespace={self._namespace!r}, "
            f"backend={getattr(self._store, 'backend_id', '?')!r}, "
            f"entries={len(self._entries)})"
        )


async def open_cache(
    namespace: str | None = None,
    *,
    store: BackingStore | None = None,
    settings: CacheSettings | None = None,
    clock: Callable[[], float] = time.time,
) -> NamespacedExpiringCache:
    """
    Resolve a backing store, warm it if needed, and build a cache over it.

    Falls back to `create_backing_store_from_env` when no `store` is given
    and to ``settings.namespace`` when no `namespace` is given.
    """
    settings = settings or CacheSettings.from_env()
    if store is None:
        store = create_backing_store_from_env(settings=settings)
    resolved_namespace = namespace or settings.namespace
    if isinstance(store, PreloadCapable):
        await store.preload(resolved_namespace)
    return NamespacedExpiringCache(store, resolved_namespace, clock=clock)
