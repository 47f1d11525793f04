"""Caching policies: the decisions the engine delegates.

A policy is a single strategy object carrying an opaque ``params`` value.
The engine passes ``policy.params`` into every call, so caller-specific state
travels with the policy instead of living in globals or closures.

Two implementations are provided:

- ``FunctionCachingPolicy`` adapts plain callables.
- ``TTLCachingPolicy`` caches successful GET/HEAD responses for a fixed TTL,
  configured by a ``CachePolicyConfig``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import UTC, datetime, timedelta
from typing import Callable, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from cachekeeper.cache.key import request_cache_key
from cachekeeper.cache.models import (
    CACHE_INDEFINITELY,
    NO_CACHE,
    NO_KEY,
    CacheKey,
    CacheUntil,
    ExpirationDecision,
    KeepDecision,
    Key,
)
from cachekeeper.http import Request, Response, StatusCategory

ParamsT = TypeVar("ParamsT")


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


class CachingPolicy(ABC, Generic[ParamsT]):
    """Decision functions consulted by the engine.

    Attributes:
        params: Caller-specific value passed to every decision function.
    """

    def __init__(self, params: ParamsT) -> None:
        self.params = params

    @abstractmethod
    def key(self, request: Request, params: ParamsT) -> CacheKey:
        """Derive the cache key for ``request``, or ``NO_KEY`` to bypass caching."""
        ...

    @abstractmethod
    def keep(
        self,
        request: Request,
        cached_response: Response,
        call_timestamp: datetime,
        expiration_time: Optional[datetime],
        params: ParamsT,
    ) -> KeepDecision:
        """Decide what to do with an existing record.

        Called once for every cache hit and never on a miss.
        """
        ...

    def expiration(
        self,
        request: Request,
        response: Response,
        params: ParamsT,
    ) -> Optional[ExpirationDecision]:
        """Decide whether and until when a fetched response may be stored.

        ``response`` has no body: it has not been read from origin yet.
        Called once for every cache miss and every update. Returning ``None``
        is the same as ``NO_CACHE``.
        """
        return None

    def now(self, params: ParamsT) -> datetime:
        """Timestamp recorded on new cache records."""
        return utc_now()


KeyFn = Callable[[Request, ParamsT], CacheKey]
KeepFn = Callable[[Request, Response, datetime, Optional[datetime], ParamsT], KeepDecision]
ExpirationFn = Callable[[Request, Response, ParamsT], ExpirationDecision]
NowFn = Callable[[ParamsT], datetime]


class FunctionCachingPolicy(CachingPolicy[ParamsT]):
    """Policy assembled from independent callables.

    Example:
        >>> policy = FunctionCachingPolicy(
        ...     params={"ttl": 60},
        ...     key_fn=lambda request, params: Key(request.url),
        ...     keep_fn=lambda request, response, ts, exp, params: KeepDecision.KEEP,
        ... )
    """

    def __init__(
        self,
        params: ParamsT,
        key_fn: KeyFn[ParamsT],
        keep_fn: KeepFn[ParamsT],
        expiration_fn: Optional[ExpirationFn[ParamsT]] = None,
        now_fn: Optional[NowFn[ParamsT]] = None,
    ) -> None:
        super().__init__(params)
        self._key_fn = key_fn
        self._keep_fn = keep_fn
        self._expiration_fn = expiration_fn
        self._now_fn = now_fn

    def key(self, request: Request, params: ParamsT) -> CacheKey:
        return self._key_fn(request, params)

    def keep(
        self,
        request: Request,
        cached_response: Response,
        call_timestamp: datetime,
        expiration_time: Optional[datetime],
        params: ParamsT,
    ) -> KeepDecision:
        return self._keep_fn(request, cached_response, call_timestamp, expiration_time, params)

    def expiration(
        self,
        request: Request,
        response: Response,
        params: ParamsT,
    ) -> Optional[ExpirationDecision]:
        if self._expiration_fn is None:
            return None
        return self._expiration_fn(request, response, params)

    def now(self, params: ParamsT) -> datetime:
        if self._now_fn is None:
            return utc_now()
        return self._now_fn(params)


class CachePolicyConfig(BaseModel):
    """Configuration for ``TTLCachingPolicy``.

    Attributes:
        enable_caching: Global flag; when False every request bypasses the cache.
        default_ttl: Seconds a response stays fresh. None caches indefinitely,
            0 disables storing.
        cacheable_methods: Request methods eligible for caching.
        cacheable_statuses: Status categories eligible for caching.
        max_cacheable_length: Largest Content-Length that will be stored.
        honor_no_store: Refuse responses carrying ``Cache-Control: no-store``.
        vary_headers: Request headers that take part in the cache key.
        ignore_query: Leave query parameters out of the cache key.
    """

    enable_caching: bool = Field(default=True, description="Global caching enabled flag")
    default_ttl: Optional[int] = Field(
        default=3600, ge=0, description="TTL in seconds; None caches indefinitely"
    )
    cacheable_methods: set[str] = Field(
        default_factory=lambda: {"GET", "HEAD"},
        description="Request methods that should be cached",
    )
    cacheable_statuses: set[StatusCategory] = Field(
        default_factory=lambda: {StatusCategory.SUCCESS},
        description="Response status categories that should be cached",
    )
    max_cacheable_length: Optional[int] = Field(
        default=10 * 1024 * 1024, ge=0, description="Maximum Content-Length to cache"
    )
    honor_no_store: bool = Field(
        default=True, description="Do not cache responses marked Cache-Control: no-store"
    )
    vary_headers: list[str] = Field(
        default_factory=list, description="Request headers included in the cache key"
    )
    ignore_query: bool = Field(
        default=False, description="Exclude query parameters from the cache key"
    )


class TTLCachingPolicy(CachingPolicy[CachePolicyConfig]):
    """Cache eligible responses for a fixed time-to-live.

    Records are served while unexpired and refreshed (``UPDATE``) afterwards.
    """

    def __init__(
        self,
        config: Optional[CachePolicyConfig] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        super().__init__(config or CachePolicyConfig())
        self._clock = clock

    def key(self, request: Request, params: CachePolicyConfig) -> CacheKey:
        if not params.enable_caching:
            return NO_KEY
        if request.method_name not in {m.upper() for m in params.cacheable_methods}:
            return NO_KEY
        return Key(
            request_cache_key(
                request,
                vary_headers=params.vary_headers,
                ignore_query=params.ignore_query,
            )
        )

    def keep(
        self,
        request: Request,
        cached_response: Response,
        call_timestamp: datetime,
        expiration_time: Optional[datetime],
        params: CachePolicyConfig,
    ) -> KeepDecision:
        if expiration_time is None or self.now(params) < expiration_time:
            return KeepDecision.KEEP
        return KeepDecision.UPDATE

    def expiration(
        self,
        request: Request,
        response: Response,
        params: CachePolicyConfig,
    ) -> Optional[ExpirationDecision]:
        if response.status_category not in params.cacheable_statuses:
            return NO_CACHE
        if params.honor_no_store and _has_no_store(response):
            return NO_CACHE
        if params.max_cacheable_length is not None:
            length = _content_length(response)
            if length is not None and length > params.max_cacheable_length:
                return NO_CACHE

        if params.default_ttl is None:
            return CACHE_INDEFINITELY
        if params.default_ttl == 0:
            return NO_CACHE
        return CacheUntil(self.now(params) + timedelta(seconds=params.default_ttl))

    def now(self, params: CachePolicyConfig) -> datetime:
        return self._clock()


def _has_no_store(response: Response) -> bool:
    for value in response.header("Cache-Control"):
        directives = {part.strip().lower() for part in value.split(",")}
        if "no-store" in directives:
            return True
    return False


def _content_length(response: Response) -> Optional[int]:
    values = response.header("Content-Length")
    if not values:
        return None
    try:
        return int(values[0])
    except ValueError:
        return None


__all__ = [
    "CachingPolicy",
    "FunctionCachingPolicy",
    "CachePolicyConfig",
    "TTLCachingPolicy",
    "utc_now",
]
