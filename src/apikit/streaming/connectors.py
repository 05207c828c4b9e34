# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""WebSocket connector abstraction and the aiohttp-backed default."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import aiohttp

from ..config import ApiSettings, load_settings

logger = logging.getLogger(__name__)


class WebSocket(Protocol):
    """The subset of aiohttp.ClientWebSocketResponse a StreamChannel uses."""

    async def receive(self) -> Any: ...

    async def send_str(self, data: str) -> None: ...

    async def close(self, *, code: int = ..., message: bytes = ...) -> bool: ...


class WebSocketConnector(Protocol):
    """Performs the opening handshake and owns whatever session backs the socket."""

    async def connect(self, url: str) -> WebSocket: ...

    async def aclose(self) -> None: ...


class AiohttpConnector(WebSocketConnector):
    """Open WebSockets through a lazily created aiohttp.ClientSession."""

    def __init__(
        self,
        settings: ApiSettings | None = None,
        session: aiohttp.ClientSession | None = None,
        headers: dict[str, str] | None = None,
    ):
        self.settings = settings or load_settings()
        self.headers = {"User-Agent": self.settings.user_agent, **(headers or {})}
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(headers=self.headers)
            self._owns_session = True
        return self._session

    async def connect(self, url: str) -> WebSocket:
        session = await self._get_session()
        logger.debug("Opening WebSocket to %s", url)
        return await session.ws_connect(
            url,
            heartbeat=self.settings.ws_heartbeat,
            ssl=self.settings.verify_ssl,
        )

    async def aclose(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
            logger.debug("Closed WebSocket connector session")


__all__ = ["AiohttpConnector", "WebSocket", "WebSocketConnector"]
