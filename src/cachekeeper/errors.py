"""Exceptions raised by the caching decision layer."""

from __future__ import annotations


class CacheKeeperError(RuntimeError):
    """Base exception for cachekeeper failures."""


class StoreError(CacheKeeperError):
    """Raised when a cache store operation fails."""


class FetchError(CacheKeeperError):
    """Raised when reading response headers or body from origin fails."""


class InconsistentCacheStateError(CacheKeeperError):
    """Raised when a keep decision asks to serve a record that does not exist."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Keep decision returned for cache key {key!r} without a stored record")
        self.key = key


__all__ = [
    "CacheKeeperError",
    "StoreError",
    "FetchError",
    "InconsistentCacheStateError",
]
