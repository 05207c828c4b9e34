# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Duplex streaming channel over a WebSocket.

Lifecycle: DISCONNECTED -> CONNECTING -> OPEN -> DISCONNECTED, with FAILED
entered when the socket breaks while open. A single receive task delivers
inbound messages in arrival order; every observer notification is serialized
and runs on the channel's event loop.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from enum import Enum
from typing import Any, Protocol

from aiohttp import WSCloseCode, WSMsgType

from ..config import ApiSettings, load_settings
from ..errors import ChannelError
from .connectors import AiohttpConnector, WebSocket, WebSocketConnector

logger = logging.getLogger(__name__)

SendCompletion = Callable[[BaseException | None], Any]

_CLOSE_TYPES = frozenset({WSMsgType.CLOSE, WSMsgType.CLOSING, WSMsgType.CLOSED})


class ChannelState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    OPEN = "open"
    FAILED = "failed"


class ChannelObserver(Protocol):
    """Event sink for a StreamChannel. Methods may be plain or async."""

    def on_connect(self) -> Any: ...

    def on_disconnect(self, cause: BaseException | None) -> Any: ...

    def on_message(self, text: str) -> Any: ...


class StreamChannel:
    """WebSocket wrapper with connect/send/disconnect and observer notifications."""

    def __init__(
        self,
        observer: ChannelObserver | None = None,
        *,
        connector: WebSocketConnector | None = None,
        settings: ApiSettings | None = None,
    ):
        self.settings = settings or load_settings()
        self.observer = observer
        self._connector = connector or AiohttpConnector(self.settings)
        self._state = ChannelState.DISCONNECTED
        self._socket: WebSocket | None = None
        self._receive_task: asyncio.Task[None] | None = None
        self._generation = 0
        self._notify_lock = asyncio.Lock()
        self._notifying_task: asyncio.Task[Any] | None = None
        self.url: str | None = None

    @property
    def state(self) -> ChannelState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is ChannelState.OPEN

    def _set_state(self, state: ChannelState) -> None:
        if state is not self._state:
            logger.debug("Channel %s: %s -> %s", self.url, self._state.value, state.value)
        self._state = state

    def _is_current(self, socket: WebSocket, generation: int) -> bool:
        return self._state is ChannelState.OPEN and self._socket is socket and self._generation == generation

    async def connect(self, url: str) -> bool:
        """
        Open the channel. Returns True once OPEN.

        A failed handshake leaves the channel DISCONNECTED and reports the cause
        through `on_disconnect`. A disconnect() issued while the handshake is in
        flight wins: the new socket is closed and `on_connect` is not sent.
        """
        if self._state in (ChannelState.CONNECTING, ChannelState.OPEN):
            raise ChannelError(f"Channel is already {self._state.value}")

        self._generation += 1
        generation = self._generation
        self.url = url
        self._set_state(ChannelState.CONNECTING)

        try:
            socket = await self._connector.connect(url)
        except asyncio.CancelledError:
            if self._generation == generation and self._state is ChannelState.CONNECTING:
                self._set_state(ChannelState.DISCONNECTED)
            raise
        except Exception as exc:  # noqa: BLE001
            if self._generation != generation or self._state is not ChannelState.CONNECTING:
                return False
            logger.debug("Handshake with %s failed: %s", url, exc)
            self._set_state(ChannelState.DISCONNECTED)
            await self._notify("on_disconnect", exc)
            return False

        if self._generation != generation or self._state is not ChannelState.CONNECTING:
            await self._close_socket(socket)
            return False

        self._socket = socket
        self._set_state(ChannelState.OPEN)
        await self._notify("on_connect")
        if not self._is_current(socket, generation):
            return False
        self._receive_task = asyncio.create_task(self._receive_loop(socket, generation))
        return True

    async def send(self, message: str, completion: SendCompletion | None = None) -> None:
        """
        Send a text frame while OPEN.

        Without `completion`, failures raise ChannelError. With `completion`,
        the callback receives None or the error and nothing is raised. A failed
        send does not close the channel.
        """
        socket = self._socket
        error: ChannelError | None = None
        if self._state is not ChannelState.OPEN or socket is None:
            error = ChannelError(f"Cannot send while {self._state.value}")
        else:
            try:
                await socket.send_str(message)
            except Exception as exc:  # noqa: BLE001
                logger.debug("Send on %s failed: %s", self.url, exc)
                error = ChannelError(f"Send failed: {exc}")
                error.__cause__ = exc

        if completion is not None:
            await self._call(completion, error)
            return
        if error is not None:
            raise error

    async def disconnect(self) -> None:
        """Close the channel; a no-op when already DISCONNECTED."""
        previous = self._state
        if previous is ChannelState.DISCONNECTED:
            return

        self._generation += 1
        socket, self._socket = self._socket, None
        task, self._receive_task = self._receive_task, None
        self._set_state(ChannelState.DISCONNECTED)

        if task is not None and task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        if socket is not None:
            await self._close_socket(socket)
        if previous in (ChannelState.OPEN, ChannelState.CONNECTING):
            await self._notify("on_disconnect", None)

    async def aclose(self) -> None:
        """Disconnect and release the connector's session."""
        await self.disconnect()
        await self._connector.aclose()

    async def __aenter__(self) -> "StreamChannel":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.aclose()

    async def _receive_loop(self, socket: WebSocket, generation: int) -> None:
        while self._is_current(socket, generation):
            try:
                message = await socket.receive()
            except asyncio.CancelledError:
                raise
            except Exception as exc:  # noqa: BLE001
                await self._fail(socket, generation, exc)
                return

            if not self._is_current(socket, generation):
                return

            kind = message.type
            if kind is WSMsgType.TEXT:
                await self._notify("on_message", message.data)
            elif kind is WSMsgType.BINARY:
                try:
                    text = bytes(message.data).decode("utf-8")
                except UnicodeDecodeError:
                    logger.debug("Dropping non UTF-8 binary frame (%d bytes) from %s", len(message.data), self.url)
                    continue
                await self._notify("on_message", text)
            elif kind in _CLOSE_TYPES:
                await self._finish(socket, generation, ChannelState.DISCONNECTED, None)
                return
            elif kind is WSMsgType.ERROR:
                cause = message.data if isinstance(message.data, BaseException) else ChannelError(str(message.data))
                await self._fail(socket, generation, cause)
                return

    async def _fail(self, socket: WebSocket, generation: int, cause: BaseException) -> None:
        logger.debug("Channel %s failed: %s", self.url, cause)
        await self._finish(socket, generation, ChannelState.FAILED, cause)

    async def _finish(
        self,
        socket: WebSocket,
        generation: int,
        state: ChannelState,
        cause: BaseException | None,
    ) -> None:
        if not self._is_current(socket, generation):
            return
        self._socket = None
        self._receive_task = None
        self._set_state(state)
        await self._close_socket(socket)
        await self._notify("on_disconnect", cause)

    async def _close_socket(self, socket: WebSocket) -> None:
        try:
            await socket.close(code=WSCloseCode.GOING_AWAY)
        except Exception as exc:  # noqa: BLE001
            logger.debug("Closing socket for %s failed: %s", self.url, exc)

    async def _notify(self, name: str, *args: Any) -> None:
        if self.observer is None:
            return
        handler = getattr(self.observer, name, None)
        if handler is None:
            return

        current = asyncio.current_task()
        if current is not None and current is self._notifying_task:
            # nested notification from inside an observer callback
            await self._call(handler, *args)
            return

        async with self._notify_lock:
            self._notifying_task = current
            try:
                await self._call(handler, *args)
            finally:
                self._notifying_task = None

    async def _call(self, handler: Callable[..., Any], *args: Any) -> None:
        try:
            result = handler(*args)
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception:  # noqa: BLE001
            logger.exception("Channel callback %s failed", getattr(handler, "__name__", handler))


__all__ = ["ChannelObserver", "ChannelState", "SendCompletion", "StreamChannel"]
