"""cachekeeper: policy-driven caching decisions between a request path and an origin."""

from cachekeeper.cache import (
    CACHE_INDEFINITELY,
    NO_CACHE,
    NO_KEY,
    CacheIndefinitely,
    CacheKey,
    CachePolicyConfig,
    CacheRecord,
    CacheStore,
    CacheUntil,
    CachingPolicy,
    ExpirationDecision,
    FunctionCachingPolicy,
    KeepDecision,
    Key,
    MemoryCacheStore,
    NoCache,
    NoKey,
    Outcome,
    SQLiteCacheStore,
    TTLCachingPolicy,
)
from cachekeeper.engine import CacheMiddleware, CacheResult, handle_request
from cachekeeper.errors import (
    CacheKeeperError,
    FetchError,
    InconsistentCacheStateError,
    StoreError,
)
from cachekeeper.fetch import (
    BufferedResponseHandle,
    Fetcher,
    HttpxFetcher,
    HttpxFetcherConfig,
    ResponseHandle,
)
from cachekeeper.http import HttpMethod, HttpVersion, Request, Response, StatusCategory

__version__ = "0.1.0"

__all__ = [
    "handle_request",
    "CacheMiddleware",
    "CacheResult",
    "Request",
    "Response",
    "HttpMethod",
    "HttpVersion",
    "StatusCategory",
    "CacheKey",
    "Key",
    "NoKey",
    "NO_KEY",
    "KeepDecision",
    "ExpirationDecision",
    "NoCache",
    "CacheIndefinitely",
    "CacheUntil",
    "NO_CACHE",
    "CACHE_INDEFINITELY",
    "Outcome",
    "CacheRecord",
    "CachingPolicy",
    "FunctionCachingPolicy",
    "CachePolicyConfig",
    "TTLCachingPolicy",
    "CacheStore",
    "MemoryCacheStore",
    "SQLiteCacheStore",
    "Fetcher",
    "ResponseHandle",
    "BufferedResponseHandle",
    "HttpxFetcher",
    "HttpxFetcherConfig",
    "CacheKeeperError",
    "StoreError",
    "FetchError",
    "InconsistentCacheStateError",
]
