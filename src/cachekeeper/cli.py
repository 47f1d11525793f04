from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional

import typer

from cachekeeper.cache.factory import close_cache_store, create_cache_store
from cachekeeper.cache.models import CacheRecord, Key
from cachekeeper.cache.policy import TTLCachingPolicy
from cachekeeper.config import Settings, get_settings
from cachekeeper.engine import CacheMiddleware, CacheResult
from cachekeeper.errors import CacheKeeperError
from cachekeeper.fetch.httpx_fetcher import HttpxFetcher
from cachekeeper.http import Headers, Request

app = typer.Typer(no_args_is_help=True, help="Policy-driven HTTP response caching")


def create_fetcher(settings: Settings) -> HttpxFetcher:
    return HttpxFetcher(config=settings.fetcher_config())


def _configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _parse_headers(values: Optional[list[str]]) -> Headers:
    headers: Headers = {}
    for item in values or []:
        name, sep, value = item.partition(":")
        if not sep or not name.strip():
            raise typer.BadParameter(f"Expected NAME:VALUE, got {item!r}", param_hint="--header")
        headers.setdefault(name.strip(), []).append(value.strip())
    return headers


def _cache_key(settings: Settings, request: Request) -> str:
    policy = TTLCachingPolicy(settings.policy_config())
    cache_key = policy.key(request, policy.params)
    if not isinstance(cache_key, Key):
        typer.echo(f"{request.method_name} {request.url} is not cacheable", err=True)
        raise typer.Exit(1)
    return cache_key.value


def _record_summary(key: str, record: CacheRecord) -> dict[str, Any]:
    expiration_time = record.expiration_time
    return {
        "key": key,
        "call_timestamp": record.call_timestamp.isoformat(),
        "expiration_time": expiration_time.isoformat() if expiration_time else None,
        "method": record.original_request.method_name,
        "url": record.original_request.url,
        "status": record.original_response.status,
        "bytes": len(record.original_response.body),
    }


async def _send(settings: Settings, request: Request) -> CacheResult:
    store = await create_cache_store(settings)
    try:
        fetcher = create_fetcher(settings)
        try:
            policy = TTLCachingPolicy(settings.policy_config())
            return await CacheMiddleware(store, fetcher, policy).send(request)
        finally:
            await fetcher.close()
    finally:
        await close_cache_store(store)


async def _get_record(settings: Settings, key: str, *, delete: bool) -> Optional[CacheRecord]:
    store = await create_cache_store(settings)
    try:
        if delete:
            return await store.delete(key)
        return await store.get(key)
    finally:
        await close_cache_store(store)


@app.command("fetch")
def fetch_url(
    url: str = typer.Argument(..., help="URL to request"),
    method: str = typer.Option("GET", "--method", "-X", help="HTTP method"),
    header: Optional[list[str]] = typer.Option(
        None, "--header", "-H", help="Request header as NAME:VALUE (repeatable)."
    ),
) -> None:
    """Request URL through the cache and report the outcome."""
    settings = get_settings()
    _configure_logging(settings)
    request = Request(method=method, url=url, headers=_parse_headers(header))

    try:
        result = asyncio.run(_send(settings, request))
    except CacheKeeperError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(1)

    payload = {
        "outcome": result.outcome.value,
        "status": result.response.status,
        "url": result.response.url,
        "bytes": len(result.response.body),
    }
    typer.echo(json.dumps(payload))


@app.command("inspect")
def inspect_record(
    url: str = typer.Argument(..., help="URL whose cache record to show"),
    method: str = typer.Option("GET", "--method", "-X", help="HTTP method"),
) -> None:
    """Show the stored cache record for URL."""
    settings = get_settings()
    _configure_logging(settings)
    request = Request(method=method, url=url)
    key = _cache_key(settings, request)

    try:
        record = asyncio.run(_get_record(settings, key, delete=False))
    except CacheKeeperError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(1)

    if record is None:
        typer.echo(f"No cache record for {request.method_name} {url}", err=True)
        raise typer.Exit(1)
    typer.echo(json.dumps(_record_summary(key, record)))


@app.command("evict")
def evict_record(
    url: str = typer.Argument(..., help="URL whose cache record to delete"),
    method: str = typer.Option("GET", "--method", "-X", help="HTTP method"),
) -> None:
    """Delete the stored cache record for URL."""
    settings = get_settings()
    _configure_logging(settings)
    request = Request(method=method, url=url)
    key = _cache_key(settings, request)

    try:
        record = asyncio.run(_get_record(settings, key, delete=True))
    except CacheKeeperError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(1)

    if record is None:
        typer.echo(f"No cache record for {request.method_name} {url}", err=True)
        raise typer.Exit(1)
    typer.echo(json.dumps(_record_summary(key, record)))
