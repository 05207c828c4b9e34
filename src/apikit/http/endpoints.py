# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Endpoint descriptors: immutable values describing one API call."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from .headers import DEFAULT_HEADERS, merge_headers

QueryItems = tuple[tuple[str, str | None], ...]


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class EndpointKind(str, Enum):
    GET_USER = "get_user"
    CREATE_USER = "create_user"
    UPDATE_USER = "update_user"
    DELETE_USER = "delete_user"
    CUSTOM = "custom"


def encode_body(body: Any) -> bytes | None:
    """
    Coerce a caller-supplied body into bytes.

    bytes-like values pass through, str is UTF-8 encoded and anything else is
    serialized as compact JSON.
    """
    if body is None:
        return None
    if isinstance(body, (bytes, bytearray, memoryview)):
        return bytes(body)
    if isinstance(body, str):
        return body.encode("utf-8")
    return json.dumps(body, separators=(",", ":")).encode("utf-8")


def _freeze_query(query: Mapping[str, Any] | Iterable[tuple[str, Any]] | None) -> QueryItems:
    if not query:
        return ()
    pairs = query.items() if isinstance(query, Mapping) else query
    return tuple((str(key), None if value is None else str(value)) for key, value in pairs)


@dataclass(frozen=True)
class Endpoint:
    """
    Description of one API operation, independent of transport.

    Build instances through the factory classmethods. `headers` always carries
    the JSON content type unless the caller overrides it. `base_url`, when set,
    replaces the client's configured base address for this endpoint only.
    """

    kind: EndpointKind
    path: str
    method: HttpMethod = HttpMethod.GET
    query: QueryItems = ()
    body: bytes | None = None
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType(dict(DEFAULT_HEADERS)))
    base_url: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", HttpMethod(self.method))
        object.__setattr__(self, "query", _freeze_query(self.query))
        object.__setattr__(self, "headers", MappingProxyType(merge_headers(DEFAULT_HEADERS, self.headers)))

    def __hash__(self) -> int:
        return hash((self.kind, self.path, self.method, self.query, self.body, frozenset(self.headers.items()), self.base_url))

    @classmethod
    def get_user(cls, user_id: int | str) -> Endpoint:
        return cls(kind=EndpointKind.GET_USER, path=f"/users/{user_id}", method=HttpMethod.GET)

    @classmethod
    def create_user(cls, body: Any) -> Endpoint:
        return cls(kind=EndpointKind.CREATE_USER, path="/users", method=HttpMethod.POST, body=encode_body(body))

    @classmethod
    def update_user(cls, user_id: int | str, body: Any) -> Endpoint:
        return cls(kind=EndpointKind.UPDATE_USER, path=f"/users/{user_id}", method=HttpMethod.PUT, body=encode_body(body))

    @classmethod
    def delete_user(cls, user_id: int | str) -> Endpoint:
        return cls(kind=EndpointKind.DELETE_USER, path=f"/users/{user_id}", method=HttpMethod.DELETE)

    @classmethod
    def custom(
        cls,
        path: str,
        method: HttpMethod | str = HttpMethod.GET,
        query: Mapping[str, Any] | Iterable[tuple[str, Any]] | None = None,
        body: Any = None,
        *,
        headers: Mapping[str, str] | None = None,
        base_url: str | None = None,
    ) -> Endpoint:
        """Fully caller-specified endpoint; query pairs keep their order."""
        return cls(
            kind=EndpointKind.CUSTOM,
            path=path,
            method=method if isinstance(method, HttpMethod) else HttpMethod(method.upper()),
            query=_freeze_query(query),
            body=encode_body(body),
            headers=headers or {},
            base_url=base_url,
        )


__all__ = ["Endpoint", "EndpointKind", "HttpMethod", "QueryItems", "encode_body"]
