"""Engine configuration — singleton SyncConfig resolved at startup."""

from __future__ import annotations

from functools import lru_cache

from htsync_common import SyncConfig


@lru_cache(maxsize=1)
def get_config() -> SyncConfig:
    """Return the global SyncConfig (resolved once, cached)."""
    return SyncConfig()
