"""Decision variants and the persisted cache record.

The keep, expiration and outcome types are closed variant sets. Call sites
check them exhaustively and reject anything else with ``TypeError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from cachekeeper.http import Request, Response


@dataclass(frozen=True, slots=True)
class NoKey:
    """The request is not cacheable; the engine must not touch the store."""


@dataclass(frozen=True, slots=True)
class Key:
    """Cache key derived from a request."""

    value: str


CacheKey = Union[NoKey, Key]

NO_KEY = NoKey()


class KeepDecision(str, Enum):
    """Verdict on an existing cache record (hit path only)."""

    SKIP = "skip"
    """Leave the record alone and let the caller read from origin directly."""

    KEEP = "keep"
    """Serve the stored response unchanged."""

    UPDATE = "update"
    """Fetch from origin and overwrite the record if the response is cacheable."""

    EVICT = "evict"
    """Delete the record."""


@dataclass(frozen=True, slots=True)
class NoCache:
    """Do not store the fetched response."""


@dataclass(frozen=True, slots=True)
class CacheIndefinitely:
    """Store the fetched response without an expiration time."""


@dataclass(frozen=True, slots=True)
class CacheUntil:
    """Store the fetched response until ``expires_at``."""

    expires_at: datetime


ExpirationDecision = Union[NoCache, CacheIndefinitely, CacheUntil]

NO_CACHE = NoCache()
CACHE_INDEFINITELY = CacheIndefinitely()


class Outcome(str, Enum):
    """What the engine did for a request."""

    CACHE_OFF = "cache_off"
    """Cache was bypassed: no key, skip decision, or uncacheable response."""

    CACHE_MISS = "cache_miss"
    """No record existed; the fetched response was stored."""

    CACHE_HIT = "cache_hit"
    """The stored response was served."""

    CACHE_UPDATE = "cache_update"
    """A record existed and was replaced by the fetched response."""

    CACHE_EVICT = "cache_evict"
    """The stored record was deleted."""


class CacheRecord(BaseModel):
    """A stored request/response pair with its timestamps.

    ``expiration_time`` of ``None`` means the record is kept indefinitely.
    The engine never compares timestamps itself; the keep decision does.
    """

    model_config = ConfigDict(frozen=True)

    call_timestamp: datetime = Field(description="When the origin call was recorded")
    expiration_time: Optional[datetime] = Field(
        default=None, description="Expiration time, None for no expiration"
    )
    original_request: Request = Field(description="Request that produced the response")
    original_response: Response = Field(description="Response with its full body")


__all__ = [
    "NoKey",
    "Key",
    "CacheKey",
    "NO_KEY",
    "KeepDecision",
    "NoCache",
    "CacheIndefinitely",
    "CacheUntil",
    "ExpirationDecision",
    "NO_CACHE",
    "CACHE_INDEFINITELY",
    "Outcome",
    "CacheRecord",
]
