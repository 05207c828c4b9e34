# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Turn Endpoint descriptors into HttpRequest values."""

from __future__ import annotations

import logging
from urllib.parse import quote, urlsplit

import httpx

from .endpoints import Endpoint, QueryItems
from .models import HttpRequest

logger = logging.getLogger(__name__)

_PATH_SAFE = "/:@!$&'()*+,;=-._~%"
_QUERY_SAFE = "-._~!$'()*,;:@/?"


def join_url(base_url: str, path: str) -> str:
    """Append `path` to `base_url` with exactly one separating slash."""
    base = str(base_url or "")
    segment = quote(str(path or ""), safe=_PATH_SAFE)
    if not segment:
        return base
    return base.rstrip("/") + "/" + segment.lstrip("/")


def encode_query(query: QueryItems) -> str:
    """Encode query pairs in the order given; a None value yields a bare key."""
    parts = []
    for key, value in query:
        encoded_key = quote(key, safe=_QUERY_SAFE)
        if value is None:
            parts.append(encoded_key)
        else:
            parts.append(f"{encoded_key}={quote(value, safe=_QUERY_SAFE)}")
    return "&".join(parts)


def is_valid_url(url: str) -> bool:
    """True for absolute http(s) URLs with a host that httpx can parse."""
    try:
        parts = urlsplit(url)
        if parts.scheme.lower() not in {"http", "https"} or not parts.hostname:
            return False
        httpx.URL(url)
    except (ValueError, httpx.InvalidURL):
        return False
    return True


def build_request(endpoint: Endpoint, base_url: str | None = None) -> HttpRequest | None:
    """
    Build the HttpRequest for `endpoint`, or return None when no valid URL results.

    The endpoint's own base_url takes precedence over the one passed in.
    """
    base = endpoint.base_url or base_url or ""
    url = join_url(base, endpoint.path)
    if endpoint.query:
        url = f"{url}?{encode_query(endpoint.query)}"

    if not is_valid_url(url):
        logger.debug("Could not build a valid URL for %s %r (base=%r)", endpoint.kind.value, endpoint.path, base)
        return None

    return HttpRequest(
        url=url,
        method=endpoint.method,
        headers=dict(endpoint.headers),
        body=endpoint.body,
    )


__all__ = ["build_request", "encode_query", "is_valid_url", "join_url"]
