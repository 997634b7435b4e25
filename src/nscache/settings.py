"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Cache settings and explicit config loading.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .types import DEFAULT_NAMESPACE

ENV_PREFIX = "NSCACHE_"


def _env(suffix: str, default: str | None = None) -> str | None:
    """Read ``NSCACHE_<suffix>``; blank values count as unset."""
    raw = os.getenv(ENV_PREFIX + suffix)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


@dataclass(frozen=True, slots=True)
class CacheSettings:
    """Explicit settings used to pick a backing store and default namespace."""

    namespace: str = DEFAULT_NAMESPACE
    backend: str = "inmemory"
    file_path: str = ".nscache/state.json"

    redis_url: str | None = None
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: str | None = None
    redis_prefix: str = "nscache"

    @staticmethod
    def from_env() -> "CacheSettings":
        """Load settings from `NSCACHE_*` environment variables."""
        defaults = CacheSettings()
        return CacheSettings(
            namespace=_env("NAMESPACE", defaults.namespace),
            backend=_env("BACKEND", defaults.backend).lower(),
            file_path=_env("FILE_PATH", defaults.file_path),
            redis_url=_env("REDIS_URL"),
            redis_host=_env("REDIS_HOST", defaults.redis_host),
            redis_port=int(_env("REDIS_PORT", str(defaults.redis_port))),
            redis_db=int(_env("REDIS_DB", str(defaults.redis_db))),
            redis_password=_env("REDIS_PASSWORD"),
            redis_prefix=_env("REDIS_PREFIX", defaults.redis_prefix),
        )

    def resolved_redis_url(self) -> str:
        """Explicit URL, else one assembled from host/port/db/password."""
        if self.redis_url:
            return self.redis_url
        auth = f":{self.redis_password}@" if self.redis_password else ""
        return f"redis://{auth}{self.redis_host}:{self.redis_port}/{self.redis_db}"
