# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Queue-backed channel observer that can be consumed with `async for`."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum


class ChannelEventKind(str, Enum):
    CONNECT = "connect"
    DISCONNECT = "disconnect"
    MESSAGE = "message"


@dataclass(frozen=True)
class ChannelEvent:
    kind: ChannelEventKind
    text: str | None = None
    cause: BaseException | None = None


class ChannelEvents:
    """
    Observer that records notifications in arrival order.

    Iteration never ends on its own; consumers break out (for example after a
    DISCONNECT event). Iterating again continues from the next queued event.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[ChannelEvent] = asyncio.Queue()

    def on_connect(self) -> None:
        self._queue.put_nowait(ChannelEvent(ChannelEventKind.CONNECT))

    def on_disconnect(self, cause: BaseException | None) -> None:
        self._queue.put_nowait(ChannelEvent(ChannelEventKind.DISCONNECT, cause=cause))

    def on_message(self, text: str) -> None:
        self._queue.put_nowait(ChannelEvent(ChannelEventKind.MESSAGE, text=text))

    async def get(self) -> ChannelEvent:
        return await self._queue.get()

    def pending(self) -> int:
        return self._queue.qsize()

    def __aiter__(self) -> "ChannelEvents":
        return self

    async def __anext__(self) -> ChannelEvent:
        return await self._queue.get()


__all__ = ["ChannelEvent", "ChannelEventKind", "ChannelEvents"]
