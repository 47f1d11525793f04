"""Shared fakes and fixtures for cachekeeper tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any, Callable, Optional

import pytest

from cachekeeper.cache.backends.memory import MemoryCacheStore
from cachekeeper.cache.models import (
    NO_CACHE,
    CacheKey,
    CacheRecord,
    ExpirationDecision,
    KeepDecision,
    Key,
)
from cachekeeper.cache.policy import FunctionCachingPolicy
from cachekeeper.fetch.base import BufferedResponseHandle
from cachekeeper.http import Request, Response

FIXED_NOW = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)


class RecordingStore(MemoryCacheStore):
    """Memory store that logs every operation into a shared call list."""

    def __init__(self, calls: list[tuple[str, str]]) -> None:
        super().__init__()
        self.calls = calls

    async def get(self, key: str) -> Optional[CacheRecord]:
        self.calls.append(("get", key))
        return await super().get(key)

    async def put(self, key: str, record: CacheRecord) -> None:
        self.calls.append(("put", key))
        await super().put(key, record)

    async def delete(self, key: str) -> Optional[CacheRecord]:
        self.calls.append(("delete", key))
        return await super().delete(key)

    def seed(self, key: str, record: CacheRecord) -> None:
        """Insert a record without logging a call."""
        self._records[key] = record


class RecordingHandle(BufferedResponseHandle):
    def __init__(self, response: Response, calls: list[tuple[str, str]]) -> None:
        super().__init__(response)
        self.calls = calls

    async def body(self) -> bytes:
        self.calls.append(("body", self.url))
        return await super().body()


class FakeFetcher:
    """Fetcher serving a fixed response and logging both fetch phases."""

    def __init__(self, calls: list[tuple[str, str]], response: Response) -> None:
        self.calls = calls
        self.response = response
        self.error: Optional[Exception] = None

    async def read_headers(self, request: Request) -> RecordingHandle:
        self.calls.append(("read_headers", request.url))
        if self.error is not None:
            raise self.error
        return RecordingHandle(self.response, self.calls)

    @property
    def invoked(self) -> bool:
        return any(name in ("read_headers", "body") for name, _ in self.calls)


@pytest.fixture
def calls() -> list[tuple[str, str]]:
    return []


@pytest.fixture
def request_a() -> Request:
    return Request(url="https://origin.example/a", headers={"Accept": ["application/json"]})


@pytest.fixture
def origin_response() -> Response:
    return Response(
        url="https://origin.example/a",
        status=200,
        reason="OK",
        headers={"Content-Type": ["application/json"]},
        body=b'{"fresh": true}',
    )


@pytest.fixture
def cached_response() -> Response:
    return Response(
        url="https://origin.example/a",
        status=200,
        reason="OK",
        headers={"Content-Type": ["application/json"]},
        body=b'{"cached": true}',
    )


@pytest.fixture
def store(calls: list[tuple[str, str]]) -> RecordingStore:
    return RecordingStore(calls)


@pytest.fixture
def fetcher(calls: list[tuple[str, str]], origin_response: Response) -> FakeFetcher:
    return FakeFetcher(calls, origin_response)


@pytest.fixture
def make_record(
    request_a: Request, cached_response: Response
) -> Callable[..., CacheRecord]:
    def _make(expiration_time: Optional[datetime] = None) -> CacheRecord:
        return CacheRecord(
            call_timestamp=FIXED_NOW - timedelta(minutes=5),
            expiration_time=expiration_time,
            original_request=request_a,
            original_response=cached_response,
        )

    return _make


@pytest.fixture
def make_policy() -> Callable[..., FunctionCachingPolicy[dict[str, Any]]]:
    """Build a policy returning fixed decisions and recording its invocations."""

    def _make(
        key: CacheKey = Key("a"),
        keep: KeepDecision = KeepDecision.KEEP,
        expiration: Optional[ExpirationDecision] = NO_CACHE,
        with_expiration: bool = True,
    ) -> FunctionCachingPolicy[dict[str, Any]]:
        params: dict[str, Any] = {"keep_calls": [], "expiration_calls": [], "key_calls": 0}

        def key_fn(request: Request, p: dict[str, Any]) -> CacheKey:
            p["key_calls"] += 1
            return key

        def keep_fn(
            request: Request,
            response: Response,
            call_timestamp: datetime,
            expiration_time: Optional[datetime],
            p: dict[str, Any],
        ) -> KeepDecision:
            p["keep_calls"].append((response, call_timestamp, expiration_time))
            return keep

        def expiration_fn(
            request: Request, response: Response, p: dict[str, Any]
        ) -> Optional[ExpirationDecision]:
            p["expiration_calls"].append(response)
            return expiration

        return FunctionCachingPolicy(
            params=params,
            key_fn=key_fn,
            keep_fn=keep_fn,
            expiration_fn=expiration_fn if with_expiration else None,
            now_fn=lambda p: FIXED_NOW,
        )

    return _make


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW
