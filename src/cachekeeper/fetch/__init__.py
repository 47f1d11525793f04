"""Two-phase origin fetching."""

from cachekeeper.fetch.base import (
    BufferedResponseHandle,
    Fetcher,
    ResponseHandle,
    fetch_response,
    headers_only,
)
from cachekeeper.fetch.httpx_fetcher import HttpxFetcher, HttpxFetcherConfig, HttpxResponseHandle

__all__ = [
    "Fetcher",
    "ResponseHandle",
    "BufferedResponseHandle",
    "fetch_response",
    "headers_only",
    "HttpxFetcher",
    "HttpxFetcherConfig",
    "HttpxResponseHandle",
]
