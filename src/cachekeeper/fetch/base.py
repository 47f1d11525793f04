"""Origin fetch abstraction.

Fetching is split in two phases: ``read_headers`` returns a handle whose
status line and headers are available immediately, and the handle's
``body()`` performs the actual transfer. This lets a caching policy reject
a response before a potentially large body is paid for.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol

from cachekeeper.errors import FetchError
from cachekeeper.http import Headers, HttpVersion, Request, Response


class ResponseHandle(Protocol):
    """Response whose body has not been read yet."""

    version: HttpVersion
    url: str
    status: int
    reason: str
    headers: Headers

    @abstractmethod
    async def body(self) -> bytes:
        """Read the response body.

        May be called at most once.

        Raises:
            FetchError: If the transfer fails or the body was already read.
        """
        ...

    @abstractmethod
    async def aclose(self) -> None:
        """Release the response without reading its body.

        Safe to call more than once, and after ``body()``.
        """
        ...


class Fetcher(Protocol):
    """Performs origin requests."""

    @abstractmethod
    async def read_headers(self, request: Request) -> ResponseHandle:
        """Send ``request`` and return once the response headers are available.

        Raises:
            FetchError: If the request cannot be sent or no response arrives.
        """
        ...


class BufferedResponseHandle:
    """Response handle over a ``Response`` already held in memory."""

    def __init__(self, response: Response) -> None:
        self.version = response.version
        self.url = response.url
        self.status = response.status
        self.reason = response.reason
        self.headers = response.headers
        self._body = response.body
        self._consumed = False

    async def body(self) -> bytes:
        if self._consumed:
            raise FetchError(f"Response body for {self.url} has already been read")
        self._consumed = True
        return self._body

    async def aclose(self) -> None:
        pass


def headers_only(handle: ResponseHandle) -> Response:
    """Build a ``Response`` from a handle without reading its body."""
    return Response(
        version=handle.version,
        url=handle.url,
        status=handle.status,
        reason=handle.reason,
        headers=handle.headers,
    )


async def fetch_response(fetcher: Fetcher, request: Request) -> Response:
    """Read a full response from origin, headers first, then body."""
    handle = await fetcher.read_headers(request)
    response = headers_only(handle)
    return response.with_body(await handle.body())
