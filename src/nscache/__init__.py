"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

This module provides the public API for the namespaced expiring cache.
"""

from __future__ import annotations

from .cache import NamespacedExpiringCache, open_cache
from .settings import CacheSettings
from .stores import (
    BackingStore,
    BackingStoreError,
    InMemoryBackingStore,
    JSONFileBackingStore,
    PreloadCapable,
    RedisBackingStore,
    create_backing_store,
    create_backing_store_from_env,
    list_backing_stores,
    register_backing_store,
    unregister_backing_store,
)
from .types import DEFAULT_NAMESPACE, CacheEntry, JsonObject, JsonValue
from .utils import now_s

__all__ = [
    "NamespacedExpiringCache",
    "open_cache",
    "CacheSettings",
    "CacheEntry",
    "DEFAULT_NAMESPACE",
    "JsonValue",
    "JsonObject",
    "now_s",
    "BackingStore",
    "BackingStoreError",
    "PreloadCapable",
    "InMemoryBackingStore",
    "JSONFileBackingStore",
    "RedisBackingStore",
    "register_backing_store",
    "unregister_backing_store",
    "create_backing_store",
    "list_backing_stores",
    "create_backing_store_from_env",
]
