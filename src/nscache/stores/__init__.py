"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

This module provides backing store adapters for the cache.
"""

from .base import BackingStore, BackingStoreError, PreloadCapable
from .factory import build_backing_store, create_backing_store_from_env
from .file import JSONFileBackingStore
from .inmemory import InMemoryBackingStore
from .redis import RedisBackingStore
from .registry import (
    BackingStoreRegistry,
    create_backing_store,
    list_backing_stores,
    register_backing_store,
    unregister_backing_store,
)

__all__ = [
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
    "build_backing_store",
    "BackingStoreRegistry",
]
