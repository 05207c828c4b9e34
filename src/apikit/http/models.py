# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request/outcome data models shared by builders, transports and the classifier."""

from __future__ import annotations

from dataclasses import dataclass, field

from .endpoints import HttpMethod

Headers = dict[str, str]


@dataclass(frozen=True)
class HttpRequest:
    """Fully formed request derived from an Endpoint and a base address."""

    url: str
    method: HttpMethod = HttpMethod.GET
    headers: Headers = field(default_factory=dict)
    body: bytes | None = None


@dataclass
class TransportOutcome:
    """
    Raw result of submitting one HttpRequest.

    Either `error` is set (transport-level failure, no HTTP response) or
    `status_code`/`content` describe the response as received.
    """

    status_code: int | None = None
    content: bytes | None = None
    headers: Headers = field(default_factory=dict)
    url: str | None = None
    error: BaseException | None = None
    elapsed: float | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, status_code: int, content: bytes | None, **kwargs) -> TransportOutcome:
        return cls(status_code=status_code, content=content, **kwargs)

    @classmethod
    def failure(cls, error: BaseException, **kwargs) -> TransportOutcome:
        return cls(error=error, **kwargs)


__all__ = ["Headers", "HttpRequest", "TransportOutcome"]
