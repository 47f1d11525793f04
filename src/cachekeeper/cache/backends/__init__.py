"""Cache store implementations."""

from cachekeeper.cache.backends.memory import MemoryCacheStore
from cachekeeper.cache.backends.sqlite import SQLiteCacheStore

__all__ = ["MemoryCacheStore", "SQLiteCacheStore"]
