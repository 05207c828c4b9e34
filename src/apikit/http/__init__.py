# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP pipeline exports."""

from .adapters import StubTransport
from .builder import build_request, encode_query, is_valid_url, join_url
from .classifier import classify, classify_outcome
from .endpoints import Endpoint, EndpointKind, HttpMethod, encode_body
from .headers import DEFAULT_HEADERS, header_value, merge_headers
from .httpx_transport import HttpxTransport
from .models import Headers, HttpRequest, TransportOutcome
from .transport import Transport, create_default_transport

__all__ = [
    "DEFAULT_HEADERS",
    "Endpoint",
    "EndpointKind",
    "Headers",
    "HttpMethod",
    "HttpRequest",
    "HttpxTransport",
    "StubTransport",
    "Transport",
    "TransportOutcome",
    "build_request",
    "classify",
    "classify_outcome",
    "create_default_transport",
    "encode_body",
    "encode_query",
    "header_value",
    "is_valid_url",
    "join_url",
    "merge_headers",
]
