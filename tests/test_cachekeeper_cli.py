from __future__ import annotations

import json
from pathlib import Path
from typing import Iterator

import httpx
import pytest
from typer.testing import CliRunner

from cachekeeper import cli
from cachekeeper.cli import app
from cachekeeper.config import Settings, get_settings
from cachekeeper.errors import FetchError
from cachekeeper.fetch.httpx_fetcher import HttpxFetcher

runner = CliRunner()

pytestmark = pytest.mark.slow


@pytest.fixture
def origin_calls(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[list[str]]:
    """Point the CLI at a temporary cache and a mocked origin."""
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(f"{request.method} {request.url}")
        if request.url.path == "/private":
            return httpx.Response(200, headers={"Cache-Control": "no-store"}, content=b"secret")
        return httpx.Response(200, headers={"Content-Type": "text/plain"}, content=b"hello")

    def create_fetcher(settings: Settings) -> HttpxFetcher:
        return HttpxFetcher(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))

    monkeypatch.setenv("CACHEKEEPER_STORE_BACKEND", "sqlite")
    monkeypatch.setenv("CACHEKEEPER_STORE_DB_PATH", str(tmp_path / "cache.db"))
    monkeypatch.setattr(cli, "create_fetcher", create_fetcher)
    get_settings.cache_clear()
    yield calls
    get_settings.cache_clear()


def test_fetch_miss_then_hit(origin_calls: list[str]) -> None:
    """Second fetch of the same URL is served from the cache."""
    first = runner.invoke(app, ["fetch", "https://origin.example/greeting"])
    assert first.exit_code == 0
    assert json.loads(first.stdout) == {
        "outcome": "cache_miss",
        "status": 200,
        "url": "https://origin.example/greeting",
        "bytes": 5,
    }

    second = runner.invoke(app, ["fetch", "https://origin.example/greeting"])
    assert second.exit_code == 0
    assert json.loads(second.stdout)["outcome"] == "cache_hit"
    assert origin_calls == ["GET https://origin.example/greeting"]


def test_fetch_uncacheable_method(origin_calls: list[str]) -> None:
    result = runner.invoke(app, ["fetch", "-X", "POST", "https://origin.example/greeting"])
    assert result.exit_code == 0
    assert json.loads(result.stdout)["outcome"] == "cache_off"
    assert origin_calls == ["POST https://origin.example/greeting"]


def test_fetch_no_store_response(origin_calls: list[str]) -> None:
    for _ in range(2):
        result = runner.invoke(app, ["fetch", "https://origin.example/private"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["outcome"] == "cache_off"
    assert len(origin_calls) == 2


def test_fetch_rejects_malformed_header(origin_calls: list[str]) -> None:
    result = runner.invoke(app, ["fetch", "-H", "no-colon", "https://origin.example/greeting"])
    assert result.exit_code != 0
    assert origin_calls == []


def test_inspect_and_evict(origin_calls: list[str]) -> None:
    runner.invoke(app, ["fetch", "https://origin.example/greeting"])

    inspected = runner.invoke(app, ["inspect", "https://origin.example/greeting"])
    assert inspected.exit_code == 0
    summary = json.loads(inspected.stdout)
    assert summary["url"] == "https://origin.example/greeting"
    assert summary["method"] == "GET"
    assert summary["status"] == 200
    assert summary["bytes"] == 5
    assert summary["expiration_time"] is not None

    evicted = runner.invoke(app, ["evict", "https://origin.example/greeting"])
    assert evicted.exit_code == 0
    assert json.loads(evicted.stdout)["key"] == summary["key"]

    missing = runner.invoke(app, ["inspect", "https://origin.example/greeting"])
    assert missing.exit_code == 1


def test_inspect_uncacheable_request(origin_calls: list[str]) -> None:
    result = runner.invoke(app, ["inspect", "-X", "DELETE", "https://origin.example/greeting"])
    assert result.exit_code == 1


def test_store_closed_when_fetcher_setup_fails(
    origin_calls: list[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    closed: list[object] = []
    close_cache_store = cli.close_cache_store

    async def recording_close(store: object) -> None:
        closed.append(store)
        await close_cache_store(store)

    def failing_fetcher(settings: Settings) -> HttpxFetcher:
        raise FetchError("no client available")

    monkeypatch.setattr(cli, "close_cache_store", recording_close)
    monkeypatch.setattr(cli, "create_fetcher", failing_fetcher)

    result = runner.invoke(app, ["fetch", "https://origin.example/greeting"])

    assert result.exit_code == 1
    assert len(closed) == 1
    assert origin_calls == []
