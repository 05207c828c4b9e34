# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl as ssl_module
from enum import Enum

import httpx


class ApiErrorKind(str, Enum):
    NETWORK_ERROR = "NETWORK_ERROR"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    DECODING_ERROR = "DECODING_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_FOUND = "NOT_FOUND"
    SERVER_ERROR = "SERVER_ERROR"
    UNKNOWN = "UNKNOWN"


class NetworkErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


def categorize_exception(exc: BaseException | None) -> NetworkErrorCategory:
    """
    Map Python/httpx/aiohttp exceptions to NetworkErrorCategory.

    httpx wraps lower-level socket errors, so the wrapped cause is inspected
    before falling back to the httpx class.
    """
    if exc is None:
        return NetworkErrorCategory.UNKNOWN_ERROR

    if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
        return NetworkErrorCategory.TIMEOUT

    cause = exc.__cause__ or exc.__context__
    if cause is not None and cause is not exc and not isinstance(exc, (ssl_module.SSLError, OSError)):
        nested = categorize_exception(cause)
        if nested is not NetworkErrorCategory.UNKNOWN_ERROR:
            return nested

    if isinstance(exc, (ssl_module.SSLError, ssl_module.CertificateError)):
        return NetworkErrorCategory.SSL_ERROR

    if isinstance(exc, (socket.gaierror, socket.herror)):
        return NetworkErrorCategory.DNS_ERROR

    if isinstance(exc, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError, httpx.ProxyError)):
        return NetworkErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return NetworkErrorCategory.CONNECTION_ERROR

    return NetworkErrorCategory.UNKNOWN_ERROR


class ApiError(Exception):
    """
    Closed error taxonomy returned by the typed client.

    Exactly one kind per failed call. `cause` is set for NETWORK_ERROR and
    DECODING_ERROR, `status_code` for SERVER_ERROR.
    """

    def __init__(
        self,
        kind: ApiErrorKind,
        *,
        cause: BaseException | None = None,
        status_code: int | None = None,
    ):
        self.kind = kind
        self.cause = cause
        self.status_code = status_code
        super().__init__(self.description)

    @classmethod
    def network_error(cls, cause: BaseException) -> ApiError:
        return cls(ApiErrorKind.NETWORK_ERROR, cause=cause)

    @classmethod
    def invalid_response(cls) -> ApiError:
        return cls(ApiErrorKind.INVALID_RESPONSE)

    @classmethod
    def decoding_error(cls, cause: BaseException) -> ApiError:
        return cls(ApiErrorKind.DECODING_ERROR, cause=cause)

    @classmethod
    def unauthorized(cls) -> ApiError:
        return cls(ApiErrorKind.UNAUTHORIZED)

    @classmethod
    def not_found(cls) -> ApiError:
        return cls(ApiErrorKind.NOT_FOUND)

    @classmethod
    def server_error(cls, status_code: int) -> ApiError:
        return cls(ApiErrorKind.SERVER_ERROR, status_code=status_code)

    @classmethod
    def unknown(cls) -> ApiError:
        return cls(ApiErrorKind.UNKNOWN)

    @property
    def description(self) -> str:
        """User-facing description for diagnostic display."""
        if self.kind is ApiErrorKind.NETWORK_ERROR:
            return f"Network error: {_cause_text(self.cause)}"
        if self.kind is ApiErrorKind.DECODING_ERROR:
            return f"Decoding error: {_cause_text(self.cause)}"
        if self.kind is ApiErrorKind.SERVER_ERROR:
            return f"Server error with status code: {self.status_code}"
        return _FIXED_DESCRIPTIONS.get(self.kind, "An unknown error occurred.")

    @property
    def network_category(self) -> NetworkErrorCategory | None:
        if self.kind is not ApiErrorKind.NETWORK_ERROR:
            return None
        return categorize_exception(self.cause)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ApiError):
            return NotImplemented
        return (self.kind, self.cause, self.status_code) == (other.kind, other.cause, other.status_code)

    def __hash__(self) -> int:
        return hash((self.kind, self.status_code))

    def __repr__(self) -> str:
        parts = [self.kind.value]
        if self.status_code is not None:
            parts.append(f"status_code={self.status_code}")
        if self.cause is not None:
            parts.append(f"cause={self.cause!r}")
        return f"ApiError({', '.join(parts)})"


_FIXED_DESCRIPTIONS = {
    ApiErrorKind.INVALID_RESPONSE: "Invalid response from the server.",
    ApiErrorKind.UNAUTHORIZED: "Unauthorized access.",
    ApiErrorKind.NOT_FOUND: "Resource not found.",
    ApiErrorKind.UNKNOWN: "An unknown error occurred.",
}


def _cause_text(cause: BaseException | None) -> str:
    if cause is None:
        return "unknown cause"
    text = str(cause).strip()
    return text or type(cause).__name__


class ChannelError(Exception):
    """Raised by StreamChannel operations that cannot be performed."""


__all__ = [
    "ApiError",
    "ApiErrorKind",
    "ChannelError",
    "NetworkErrorCategory",
    "categorize_exception",
]
