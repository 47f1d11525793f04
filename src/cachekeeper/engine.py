"""Caching decision engine.

``handle_request`` resolves a request into one of five outcomes by consulting
a caching policy, a cache store and an origin fetcher, strictly in this
order::

    key -> store.get -> keep decision -> read headers
        -> expiration decision -> read body -> store.put

Each step gates the next, so nothing runs concurrently within a request. The
engine keeps no state between calls and never swallows collaborator errors:
``StoreError`` and ``FetchError`` reach the caller unchanged.

Outcomes by path:

==========================  ==========================  ===============
Record                      Decisions                   Outcome
==========================  ==========================  ===============
(no key)                                                CACHE_OFF
absent                      expiration NoCache          CACHE_OFF
absent                      cacheable                   CACHE_MISS
present                     SKIP                        CACHE_OFF
present                     KEEP                        CACHE_HIT
present                     EVICT                       CACHE_EVICT
present                     UPDATE, cacheable           CACHE_UPDATE
present                     UPDATE, NoCache             CACHE_OFF
==========================  ==========================  ===============
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, Optional

from cachekeeper.cache.models import (
    NO_CACHE,
    CacheIndefinitely,
    CacheRecord,
    CacheUntil,
    KeepDecision,
    Key,
    NoCache,
    NoKey,
    Outcome,
)
from cachekeeper.cache.policy import CachingPolicy, ParamsT
from cachekeeper.cache.store import CacheStore
from cachekeeper.errors import InconsistentCacheStateError
from cachekeeper.fetch.base import Fetcher, fetch_response, headers_only
from cachekeeper.http import Request, Response

logger = logging.getLogger(__name__)


def evaluate_keep(
    policy: CachingPolicy[Any],
    request: Request,
    record: Optional[CacheRecord],
) -> Optional[KeepDecision]:
    """Ask the policy what to do with ``record``; None when there is no record."""
    if record is None:
        return None
    return policy.keep(
        request,
        record.original_response,
        record.call_timestamp,
        record.expiration_time,
        policy.params,
    )


async def handle_request(
    request: Request,
    store: CacheStore,
    fetcher: Fetcher,
    policy: CachingPolicy[Any],
) -> tuple[Optional[Response], Outcome]:
    """Serve ``request`` from cache or origin according to ``policy``.

    Args:
        request: Incoming request.
        store: Cache store holding records.
        fetcher: Origin fetcher.
        policy: Caching policy; its ``params`` are passed to every decision.

    Returns:
        The response and the outcome. The response is None when the cache
        was bypassed before any origin call (no key, SKIP) or when a record
        was evicted; the caller then reads from origin itself.

    Raises:
        InconsistentCacheStateError: If a KEEP decision has no record to serve.
        StoreError: If a store operation fails.
        FetchError: If reading from origin fails.
        TypeError: If the policy returns a value outside the decision types.
    """
    params = policy.params

    cache_key = policy.key(request, params)
    if isinstance(cache_key, NoKey):
        logger.debug("No cache key for %s %s", request.method_name, request.url)
        return None, Outcome.CACHE_OFF
    if not isinstance(cache_key, Key):
        raise TypeError(f"Unsupported cache key: {cache_key!r}")
    key = cache_key.value

    record = await store.get(key)
    decision = evaluate_keep(policy, request, record)
    logger.debug("Cache key %s: record=%s decision=%s", key, record is not None, decision)

    if decision is KeepDecision.SKIP:
        return None, Outcome.CACHE_OFF
    if decision is KeepDecision.KEEP:
        if record is None:
            logger.error("Keep decision for cache key %s without a stored record", key)
            raise InconsistentCacheStateError(key)
        return record.original_response, Outcome.CACHE_HIT
    if decision is KeepDecision.EVICT:
        await store.delete(key)
        return None, Outcome.CACHE_EVICT
    if decision is not None and decision is not KeepDecision.UPDATE:
        raise TypeError(f"Unsupported keep decision: {decision!r}")

    handle = await fetcher.read_headers(request)
    try:
        head = headers_only(handle)
        expiration = policy.expiration(request, head, params) or NO_CACHE

        expiration_time: Optional[datetime]
        if isinstance(expiration, (NoCache, CacheIndefinitely)):
            expiration_time = None
        elif isinstance(expiration, CacheUntil):
            expiration_time = expiration.expires_at
        else:
            raise TypeError(f"Unsupported expiration decision: {expiration!r}")

        body = await handle.body()
    except BaseException:
        await handle.aclose()
        raise

    response = head.with_body(body)

    if isinstance(expiration, NoCache):
        logger.debug("Response for cache key %s is not cacheable", key)
        return response, Outcome.CACHE_OFF

    new_record = CacheRecord(
        call_timestamp=policy.now(params),
        expiration_time=expiration_time,
        original_request=request,
        original_response=response,
    )
    await store.put(key, new_record)

    outcome = Outcome.CACHE_UPDATE if decision is KeepDecision.UPDATE else Outcome.CACHE_MISS
    logger.debug("Cache key %s: %s", key, outcome.value)
    return response, outcome


@dataclass(frozen=True, slots=True)
class CacheResult:
    """Response delivered to the caller and how it was obtained."""

    response: Response
    outcome: Outcome

    @property
    def from_cache(self) -> bool:
        return self.outcome is Outcome.CACHE_HIT


class CacheMiddleware(Generic[ParamsT]):
    """Bundles a store, a fetcher and a policy for repeated use.

    ``handle`` is the bare engine call. ``send`` always returns a response,
    reading from origin directly whenever the engine returned none.
    """

    def __init__(
        self,
        store: CacheStore,
        fetcher: Fetcher,
        policy: CachingPolicy[ParamsT],
    ) -> None:
        self.store = store
        self.fetcher = fetcher
        self.policy = policy
        self.stats: Counter[Outcome] = Counter()

    async def handle(self, request: Request) -> tuple[Optional[Response], Outcome]:
        response, outcome = await handle_request(request, self.store, self.fetcher, self.policy)
        self.stats[outcome] += 1
        return response, outcome

    async def send(self, request: Request) -> CacheResult:
        response, outcome = await self.handle(request)
        if response is None:
            response = await fetch_response(self.fetcher, request)
        return CacheResult(response=response, outcome=outcome)


__all__ = [
    "handle_request",
    "evaluate_keep",
    "CacheMiddleware",
    "CacheResult",
]
