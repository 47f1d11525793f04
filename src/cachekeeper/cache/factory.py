"""
Cache store factory.

Creates and initializes the store selected by application settings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cachekeeper.cache.backends.memory import MemoryCacheStore
from cachekeeper.cache.backends.sqlite import SQLiteCacheStore

if TYPE_CHECKING:
    from cachekeeper.cache.store import CacheStore
    from cachekeeper.config import Settings


async def create_cache_store(settings: Settings) -> CacheStore:
    """
    Create and initialize a cache store based on settings.

    Args:
        settings: Application settings

    Returns:
        Ready-to-use cache store

    Raises:
        ValueError: If the backend type is unsupported
        StoreError: If the store cannot be opened
    """
    backend_type = settings.STORE_BACKEND.lower()

    if backend_type == "memory":
        return MemoryCacheStore()
    if backend_type == "sqlite":
        store = SQLiteCacheStore(db_path=settings.STORE_DB_PATH)
        await store.initialize()
        return store

    raise ValueError(
        f"Unsupported cache store backend: {backend_type}. "
        "Supported backends: memory, sqlite"
    )


async def close_cache_store(store: CacheStore) -> None:
    """Release resources held by ``store``, if it holds any."""
    if isinstance(store, SQLiteCacheStore):
        await store.close()
