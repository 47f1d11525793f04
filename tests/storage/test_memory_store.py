"""Tests for the in-memory cache store."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from cachekeeper.cache.backends.memory import MemoryCacheStore
from cachekeeper.cache.models import CacheRecord
from cachekeeper.http import Request, Response


def _record(body: bytes = b"payload") -> CacheRecord:
    return CacheRecord(
        call_timestamp=datetime(2026, 2, 1, tzinfo=UTC),
        original_request=Request(url="https://example.com/item"),
        original_response=Response(url="https://example.com/item", status=200, body=body),
    )


@pytest.mark.asyncio
async def test_get_missing_key_returns_none() -> None:
    store = MemoryCacheStore()
    assert await store.get("missing") is None


@pytest.mark.asyncio
async def test_put_then_get() -> None:
    store = MemoryCacheStore()
    record = _record()

    await store.put("k", record)

    assert await store.get("k") == record
    assert "k" in store
    assert len(store) == 1


@pytest.mark.asyncio
async def test_put_replaces_existing_record() -> None:
    store = MemoryCacheStore()
    await store.put("k", _record(b"old"))
    await store.put("k", _record(b"new"))

    stored = await store.get("k")
    assert stored is not None
    assert stored.original_response.body == b"new"
    assert len(store) == 1


@pytest.mark.asyncio
async def test_delete_returns_removed_record() -> None:
    store = MemoryCacheStore()
    record = _record()
    await store.put("k", record)

    assert await store.delete("k") == record
    assert await store.get("k") is None
    assert await store.delete("k") is None


@pytest.mark.asyncio
async def test_clear_removes_everything() -> None:
    store = MemoryCacheStore()
    await store.put("a", _record())
    await store.put("b", _record())

    store.clear()

    assert len(store) == 0
