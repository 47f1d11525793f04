"""Stable cache key derivation for HTTP requests.

Semantically equivalent requests (same method, same URL up to fragment and
query parameter order, same values for the selected headers) produce the
same key.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Iterable

import httpx

from cachekeeper.http import Request


def normalize_input(data: Any) -> Any:
    """Normalize nested dictionaries and lists into a stable ordering.

    Dictionary keys are sorted recursively. Lists keep their order.

    Example:
        >>> normalize_input({"b": 1, "a": 2})
        {'a': 2, 'b': 1}
    """
    if isinstance(data, dict):
        return {k: normalize_input(v) for k, v in sorted(data.items())}
    elif isinstance(data, list):
        return [normalize_input(item) for item in data]
    else:
        return data


def hash_stable(data: Any) -> str:
    """Generate a SHA-256 hex digest from the canonical JSON form of ``data``."""
    stable_json = json.dumps(data, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(stable_json.encode("utf-8")).hexdigest()


def normalize_url(url: str, *, ignore_query: bool = False) -> dict[str, Any]:
    """Split a URL into a canonical structure.

    The fragment is dropped, scheme and host are lower-cased by ``httpx``,
    and query parameters are sorted by name then value.

    Args:
        url: Absolute URL to normalize.
        ignore_query: Drop the query string entirely.

    Returns:
        Dictionary with ``base`` and ``query`` entries.
    """
    parsed = httpx.URL(url)
    base = f"{parsed.scheme}://{parsed.netloc.decode('ascii')}{parsed.path or '/'}"
    query: list[list[str]] = []
    if not ignore_query:
        query = [[name, value] for name, value in sorted(parsed.params.multi_items())]
    return {"base": base, "query": query}


def request_cache_key(
    request: Request,
    *,
    vary_headers: Iterable[str] = (),
    ignore_query: bool = False,
) -> str:
    """Compute a canonical cache key for ``request``.

    Args:
        request: Request to derive the key from.
        vary_headers: Header names whose values become part of the key.
            Names are matched case-insensitively.
        ignore_query: Exclude query parameters from the key.

    Returns:
        A hexadecimal SHA-256 digest.

    Example:
        >>> a = Request(url="https://example.com/a?y=2&x=1#top")
        >>> b = Request(url="https://example.com/a?x=1&y=2")
        >>> request_cache_key(a) == request_cache_key(b)
        True
    """
    method = request.method_name
    headers = {name.lower(): request.header(name) for name in vary_headers}
    normalized = {
        "method": method,
        "url": normalize_url(request.url, ignore_query=ignore_query),
        "headers": normalize_input(headers),
    }
    return hash_stable(normalized)


__all__ = ["normalize_input", "hash_stable", "normalize_url", "request_cache_key"]
