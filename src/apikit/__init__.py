# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
apikit package entrypoint.

A typed asynchronous HTTP pipeline (endpoint descriptors, request building,
transport, response classification and decoding) plus a WebSocket streaming
channel with an observer contract. Network I/O sits behind injectable
transport and connector interfaces.
"""

from .client import ApiClient
from .config import ApiSettings, load_settings
from .decoding import Decoder, JsonDecoder, RawDecoder, TextDecoder, as_decoder, decode_json_file
from .errors import ApiError, ApiErrorKind, ChannelError, NetworkErrorCategory
from .http import (
    Endpoint,
    EndpointKind,
    HttpMethod,
    HttpRequest,
    HttpxTransport,
    StubTransport,
    Transport,
    TransportOutcome,
    build_request,
    classify,
    create_default_transport,
)
from .log import setup_logging
from .result import ApiResult
from .runtime import ApiKit
from .streaming import ChannelEvent, ChannelEventKind, ChannelEvents, ChannelObserver, ChannelState, StreamChannel
from .version import __version__

__all__ = [
    "ApiClient",
    "ApiError",
    "ApiErrorKind",
    "ApiKit",
    "ApiResult",
    "ApiSettings",
    "ChannelError",
    "ChannelEvent",
    "ChannelEventKind",
    "ChannelEvents",
    "ChannelObserver",
    "ChannelState",
    "Decoder",
    "Endpoint",
    "EndpointKind",
    "HttpMethod",
    "HttpRequest",
    "HttpxTransport",
    "JsonDecoder",
    "NetworkErrorCategory",
    "RawDecoder",
    "StreamChannel",
    "StubTransport",
    "TextDecoder",
    "Transport",
    "TransportOutcome",
    "as_decoder",
    "build_request",
    "classify",
    "create_default_transport",
    "decode_json_file",
    "load_settings",
    "setup_logging",
    "__version__",
]
