"""HTTP value types shared by the decision engine, cache stores and fetchers.

Requests and responses are immutable data records. They carry no transport
behaviour: fetchers build them from whatever client they wrap, and stores
persist them as JSON (bodies are base64 encoded so binary payloads survive).
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Ordered multimap: header name -> values in the order they were received.
Headers = dict[str, list[str]]


class HttpMethod(str, Enum):
    """Standard HTTP request methods. Other method names are kept as plain strings."""

    OPTIONS = "OPTIONS"
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    HEAD = "HEAD"
    TRACE = "TRACE"
    CONNECT = "CONNECT"
    PATCH = "PATCH"


class HttpVersion(str, Enum):
    """Known HTTP protocol versions."""

    HTTP_09 = "HTTP/0.9"
    HTTP_10 = "HTTP/1.0"
    HTTP_11 = "HTTP/1.1"
    HTTP_2 = "HTTP/2.0"
    HTTP_3 = "HTTP/3.0"

    @classmethod
    def parse(cls, value: str) -> HttpVersion:
        """Parse a protocol version string such as ``HTTP/1.1`` or ``HTTP/2``.

        Raises:
            ValueError: If the version is not one of the known versions.
        """
        normalized = value.strip().upper()
        return _VERSION_ALIASES.get(normalized) or cls(normalized)


_VERSION_ALIASES = {
    "HTTP/2": HttpVersion.HTTP_2,
    "HTTP/3": HttpVersion.HTTP_3,
}


class StatusCategory(str, Enum):
    """Coarse grouping of HTTP status codes."""

    INFORMATIONAL = "1xx"
    SUCCESS = "2xx"
    REDIRECTION = "3xx"
    CLIENT_ERROR = "4xx"
    SERVER_ERROR = "5xx"
    UNKNOWN = "unknown"


def status_category(status: int) -> StatusCategory:
    """Classify a status code by range; anything outside 100-599 is UNKNOWN.

    Example:
        >>> status_category(204)
        <StatusCategory.SUCCESS: '2xx'>
        >>> status_category(42)
        <StatusCategory.UNKNOWN: 'unknown'>
    """
    if 100 <= status < 200:
        return StatusCategory.INFORMATIONAL
    if 200 <= status < 300:
        return StatusCategory.SUCCESS
    if 300 <= status < 400:
        return StatusCategory.REDIRECTION
    if 400 <= status < 500:
        return StatusCategory.CLIENT_ERROR
    if 500 <= status < 600:
        return StatusCategory.SERVER_ERROR
    return StatusCategory.UNKNOWN


def header_values(headers: Headers, name: str) -> list[str]:
    """Return every value stored under ``name``, matching names case-insensitively."""
    wanted = name.lower()
    values: list[str] = []
    for header_name, header_list in headers.items():
        if header_name.lower() == wanted:
            values.extend(header_list)
    return values


class Request(BaseModel):
    """HTTP request as seen by the caching layer."""

    model_config = ConfigDict(
        frozen=True,
        ser_json_bytes="base64",
        val_json_bytes="base64",
    )

    method: Union[HttpMethod, str] = Field(
        default=HttpMethod.GET,
        union_mode="left_to_right",
        description="Standard method, or the upper-cased name of a custom one",
    )
    url: str = Field(description="Absolute request URL")
    headers: Headers = Field(default_factory=dict, description="Request headers")
    body: bytes = Field(default=b"", description="Request body")

    @field_validator("method", mode="before")
    @classmethod
    def _normalize_method(cls, value: Any) -> Any:
        if isinstance(value, str) and not isinstance(value, HttpMethod):
            return value.strip().upper()
        return value

    @property
    def method_name(self) -> str:
        if isinstance(self.method, HttpMethod):
            return self.method.value
        return self.method

    def header(self, name: str) -> list[str]:
        """Values of the header ``name`` (case-insensitive)."""
        return header_values(self.headers, name)


class Response(BaseModel):
    """HTTP response as seen by the caching layer.

    A response handed to an expiration decision has an empty body: the body
    is only transferred after that decision has been made.
    """

    model_config = ConfigDict(
        frozen=True,
        ser_json_bytes="base64",
        val_json_bytes="base64",
    )

    version: HttpVersion = Field(default=HttpVersion.HTTP_11, description="Protocol version")
    url: str = Field(description="URL the response was served from")
    status: int = Field(ge=0, le=65535, description="HTTP status code")
    reason: str = Field(default="", description="Status reason phrase")
    headers: Headers = Field(default_factory=dict, description="Response headers")
    body: bytes = Field(default=b"", description="Response body")

    @field_validator("version", mode="before")
    @classmethod
    def _parse_version(cls, value: Any) -> Any:
        if isinstance(value, str) and not isinstance(value, HttpVersion):
            return HttpVersion.parse(value)
        return value

    @property
    def status_category(self) -> StatusCategory:
        return status_category(self.status)

    def header(self, name: str) -> list[str]:
        """Values of the header ``name`` (case-insensitive)."""
        return header_values(self.headers, name)

    def without_body(self) -> Response:
        """Copy of this response with an empty body."""
        return self.model_copy(update={"body": b""})

    def with_body(self, body: bytes) -> Response:
        """Copy of this response carrying ``body``."""
        return self.model_copy(update={"body": body})


__all__ = [
    "Headers",
    "HttpMethod",
    "HttpVersion",
    "StatusCategory",
    "status_category",
    "header_values",
    "Request",
    "Response",
]
