# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level facade wiring one transport into a client and streaming channels."""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from .client import ApiClient, DiagnosticHook
from .config import ApiSettings, load_settings
from .decoding import Decoder
from .http.endpoints import Endpoint
from .http.transport import Transport, create_default_transport
from .result import ApiResult
from .streaming import ChannelObserver, StreamChannel, WebSocketConnector

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ApiKit:
    """
    Convenience wrapper that owns a shared transport.

    The client and every channel opened through this object are explicit
    instances; nothing is process-global, so tests can inject doubles for the
    transport or the WebSocket connector.
    """

    def __init__(
        self,
        transport: Transport | None = None,
        *,
        settings: ApiSettings | None = None,
        base_url: str | None = None,
        diagnostic_hook: DiagnosticHook | None = None,
    ):
        self.settings = settings or load_settings()
        self.transport = transport or create_default_transport(self.settings)
        self.client = ApiClient(
            self.transport,
            settings=self.settings,
            base_url=base_url,
            diagnostic_hook=diagnostic_hook,
        )
        self._channels: list[StreamChannel] = []

    async def request(self, endpoint: Endpoint, decoder: Decoder[T] | type[T] | Any) -> ApiResult[T]:
        return await self.client.request(endpoint, decoder)

    async def request_data(self, endpoint: Endpoint) -> ApiResult[bytes]:
        return await self.client.request_data(endpoint)

    def channel(
        self,
        observer: ChannelObserver | None = None,
        *,
        connector: WebSocketConnector | None = None,
    ) -> StreamChannel:
        """Create a channel that is closed together with this facade."""
        channel = StreamChannel(observer, connector=connector, settings=self.settings)
        self._channels.append(channel)
        return channel

    async def aclose(self) -> None:
        channels, self._channels = self._channels, []
        for channel in channels:
            try:
                await channel.aclose()
            except Exception:  # noqa: BLE001
                logger.exception("Closing channel %s failed", channel.url)
        await self.client.aclose()

    async def __aenter__(self) -> "ApiKit":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.aclose()
