# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Streaming channel exports."""

from .channel import ChannelObserver, ChannelState, SendCompletion, StreamChannel
from .connectors import AiohttpConnector, WebSocket, WebSocketConnector
from .events import ChannelEvent, ChannelEventKind, ChannelEvents

__all__ = [
    "AiohttpConnector",
    "ChannelEvent",
    "ChannelEventKind",
    "ChannelEvents",
    "ChannelObserver",
    "ChannelState",
    "SendCompletion",
    "StreamChannel",
    "WebSocket",
    "WebSocketConnector",
]
