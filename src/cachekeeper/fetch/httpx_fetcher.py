"""Origin fetcher backed by ``httpx.AsyncClient``.

Requests are sent in streaming mode so only the status line and headers are
received by ``read_headers``; the body is transferred when the handle's
``body()`` is awaited.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel, Field

from cachekeeper.errors import FetchError
from cachekeeper.http import Headers, HttpVersion, Request

logger = logging.getLogger(__name__)


class HttpxFetcherConfig(BaseModel):
    """Configuration for the httpx origin fetcher."""

    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    follow_redirects: bool = Field(default=False, description="Follow HTTP redirects")
    headers: dict[str, str] = Field(
        default_factory=dict, description="Headers added to every origin request"
    )


class HttpxResponseHandle:
    """Streamed httpx response whose body is read on demand."""

    def __init__(self, response: httpx.Response) -> None:
        try:
            self.version = HttpVersion.parse(response.http_version)
        except ValueError as exc:
            raise FetchError(f"Unsupported HTTP version from {response.url}: {exc}") from exc
        self.url = str(response.url)
        self.status = response.status_code
        self.reason = response.reason_phrase
        self.headers = _to_headers(response.headers)
        self._response = response
        self._consumed = False

    async def body(self) -> bytes:
        if self._consumed:
            raise FetchError(f"Response body for {self.url} has already been read")
        self._consumed = True
        try:
            return await self._response.aread()
        except httpx.HTTPError as exc:
            logger.warning("Failed to read response body from %s: %s", self.url, exc)
            raise FetchError(f"Failed to read response body from {self.url}: {exc}") from exc
        finally:
            await self._response.aclose()

    async def aclose(self) -> None:
        """Close the stream without reading the body."""
        await self._response.aclose()


class HttpxFetcher:
    """Fetch origin responses with httpx.

    Either pass a ``config`` and let the fetcher own its client, or pass a
    preconfigured ``client`` (for example one with a custom transport), in
    which case closing it remains the caller's responsibility.
    """

    def __init__(
        self,
        config: Optional[HttpxFetcherConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.config = config or HttpxFetcherConfig()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=self.config.timeout,
            follow_redirects=self.config.follow_redirects,
            headers=self.config.headers,
        )

    async def read_headers(self, request: Request) -> HttpxResponseHandle:
        """Send ``request`` and return as soon as the response headers arrive.

        Raises:
            FetchError: If the request cannot be built or sent.
        """
        try:
            outgoing = self._client.build_request(
                request.method_name,
                request.url,
                headers=[
                    (name, value) for name, values in request.headers.items() for value in values
                ],
                content=request.body or None,
            )
            response = await self._client.send(outgoing, stream=True)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Origin request %s %s failed: %s", request.method_name, request.url, exc)
            raise FetchError(
                f"Origin request {request.method_name} {request.url} failed: {exc}"
            ) from exc

        try:
            return HttpxResponseHandle(response)
        except FetchError:
            await response.aclose()
            raise

    async def close(self) -> None:
        """Close the underlying client if this fetcher created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpxFetcher":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()


def _to_headers(headers: httpx.Headers) -> Headers:
    result: Headers = {}
    for name, value in headers.multi_items():
        result.setdefault(name, []).append(value)
    return result
