"""Cache record model, key derivation, policies and stores."""

from __future__ import annotations

from cachekeeper.cache.backends import MemoryCacheStore, SQLiteCacheStore
from cachekeeper.cache.factory import close_cache_store, create_cache_store
from cachekeeper.cache.key import hash_stable, normalize_input, normalize_url, request_cache_key
from cachekeeper.cache.models import (
    CACHE_INDEFINITELY,
    NO_CACHE,
    NO_KEY,
    CacheIndefinitely,
    CacheKey,
    CacheRecord,
    CacheUntil,
    ExpirationDecision,
    KeepDecision,
    Key,
    NoCache,
    NoKey,
    Outcome,
)
from cachekeeper.cache.policy import (
    CachePolicyConfig,
    CachingPolicy,
    FunctionCachingPolicy,
    TTLCachingPolicy,
    utc_now,
)
from cachekeeper.cache.store import CacheStore

__all__ = [
    "CACHE_INDEFINITELY",
    "NO_CACHE",
    "NO_KEY",
    "CacheIndefinitely",
    "CacheKey",
    "CacheRecord",
    "CacheUntil",
    "ExpirationDecision",
    "KeepDecision",
    "Key",
    "NoCache",
    "NoKey",
    "Outcome",
    "CachingPolicy",
    "FunctionCachingPolicy",
    "CachePolicyConfig",
    "TTLCachingPolicy",
    "utc_now",
    "CacheStore",
    "MemoryCacheStore",
    "SQLiteCacheStore",
    "create_cache_store",
    "close_cache_store",
    "hash_stable",
    "normalize_input",
    "normalize_url",
    "request_cache_key",
]
