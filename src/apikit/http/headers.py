# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header utilities.

HTTP header field names are case-insensitive (RFC 9110). Endpoints keep the
caller's casing, so merging and lookups compare names case-insensitively.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

DEFAULT_HEADERS: Mapping[str, str] = {"Content-Type": "application/json"}


def _header_items(headers: Any) -> Iterable[tuple[object, object]]:
    """Yield pairs from a dict, httpx.Headers or an iterable of pairs."""
    if not headers:
        return ()
    items = getattr(headers, "items", None)
    if callable(items):
        return list(items())
    return list(headers)


def header_value(headers: Mapping[object, object] | None, name: str, default: str = "") -> str:
    """Return a header value using case-insensitive key matching."""
    if not headers or not name:
        return default
    lower = name.lower()
    for key, value in _header_items(headers):
        if key is not None and str(key).lower() == lower:
            return default if value is None else str(value).strip()
    return default


def merge_headers(*layers: Mapping[str, str] | None) -> dict[str, str]:
    """
    Merge header mappings left to right.

    A later layer replaces an earlier header of the same name regardless of
    casing; the later layer's casing is kept.
    """
    merged: dict[str, str] = {}
    names: dict[str, str] = {}
    for layer in layers:
        for key, value in _header_items(layer):
            if key is None:
                continue
            name = str(key).strip()
            if not name:
                continue
            previous = names.get(name.lower())
            if previous is not None:
                merged.pop(previous, None)
            names[name.lower()] = name
            merged[name] = "" if value is None else str(value)
    return merged


__all__ = ["DEFAULT_HEADERS", "header_value", "merge_headers"]
