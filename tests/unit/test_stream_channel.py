# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import asyncio

import pytest
from aiohttp import WSCloseCode, WSMsgType

from apikit.config import ApiSettings
from apikit.errors import ChannelError
from apikit.streaming import ChannelEventKind, ChannelEvents, ChannelState, StreamChannel
from ws_fakes import FakeConnector, FakeSocket

URL = "ws://example.test/socket"


def make_channel(observer, connector):
    return StreamChannel(observer, connector=connector, settings=ApiSettings())


async def next_event(events: ChannelEvents, kind: ChannelEventKind):
    while True:
        event = await asyncio.wait_for(events.get(), timeout=1)
        if event.kind is kind:
            return event


def test_connect_notifies_and_delivers_messages_in_order():
    async def scenario():
        socket = FakeSocket()
        events = ChannelEvents()
        channel = make_channel(events, FakeConnector(socket))

        assert await channel.connect(URL) is True
        assert channel.state is ChannelState.OPEN
        for text in ("A", "B", "C"):
            socket.push(WSMsgType.TEXT, text)

        seen = [await asyncio.wait_for(events.get(), timeout=1) for _ in range(4)]
        await asyncio.sleep(0)
        leftover = events.pending()
        await channel.disconnect()
        return seen, leftover, channel, socket

    seen, leftover, channel, socket = asyncio.run(scenario())
    assert seen[0].kind is ChannelEventKind.CONNECT
    assert [e.text for e in seen[1:]] == ["A", "B", "C"]
    assert leftover == 0
    assert channel.state is ChannelState.DISCONNECTED
    assert socket.close_codes == [WSCloseCode.GOING_AWAY]


def test_binary_frames_decoded_or_dropped():
    async def scenario():
        socket = FakeSocket()
        events = ChannelEvents()
        channel = make_channel(events, FakeConnector(socket))
        await channel.connect(URL)
        socket.push(WSMsgType.BINARY, "héllo".encode("utf-8"))
        socket.push(WSMsgType.BINARY, b"\xff\xfe\xfd")
        socket.push(WSMsgType.PING, b"")
        socket.push(WSMsgType.TEXT, "after")
        first = await next_event(events, ChannelEventKind.MESSAGE)
        second = await next_event(events, ChannelEventKind.MESSAGE)
        await channel.disconnect()
        return first, second

    first, second = asyncio.run(scenario())
    assert first.text == "héllo"
    assert second.text == "after"


def test_disconnect_during_handshake_suppresses_connect():
    async def scenario():
        socket = FakeSocket()
        gate = asyncio.Event()
        events = ChannelEvents()
        channel = make_channel(events, FakeConnector(socket, gate=gate))

        pending = asyncio.create_task(channel.connect(URL))
        await asyncio.sleep(0)
        assert channel.state is ChannelState.CONNECTING

        await channel.disconnect()
        gate.set()
        opened = await pending
        kinds = []
        while events.pending():
            kinds.append((await events.get()).kind)
        return opened, kinds, channel, socket

    opened, kinds, channel, socket = asyncio.run(scenario())
    assert opened is False
    assert kinds == [ChannelEventKind.DISCONNECT]
    assert channel.state is ChannelState.DISCONNECTED
    assert socket.close_codes == [WSCloseCode.GOING_AWAY]


def test_handshake_failure_reports_cause():
    async def scenario():
        events = ChannelEvents()
        refused = ConnectionRefusedError("refused")
        channel = make_channel(events, FakeConnector(error=refused))
        opened = await channel.connect(URL)
        event = await events.get()
        return opened, event, refused, channel

    opened, event, refused, channel = asyncio.run(scenario())
    assert opened is False
    assert event.kind is ChannelEventKind.DISCONNECT
    assert event.cause is refused
    assert channel.state is ChannelState.DISCONNECTED


def test_remote_close_disconnects_cleanly():
    async def scenario():
        socket = FakeSocket()
        events = ChannelEvents()
        channel = make_channel(events, FakeConnector(socket))
        await channel.connect(URL)
        socket.push(WSMsgType.CLOSE, 1000)
        event = await next_event(events, ChannelEventKind.DISCONNECT)
        return event, channel

    event, channel = asyncio.run(scenario())
    assert event.cause is None
    assert channel.state is ChannelState.DISCONNECTED


@pytest.mark.parametrize("failure", ["frame", "exception"])
def test_socket_error_moves_to_failed(failure):
    async def scenario():
        socket = FakeSocket()
        events = ChannelEvents()
        channel = make_channel(events, FakeConnector(socket))
        await channel.connect(URL)
        boom = ConnectionResetError("reset by peer")
        if failure == "frame":
            socket.push(WSMsgType.ERROR, boom)
        else:
            socket.inbox.put_nowait(boom)
        event = await next_event(events, ChannelEventKind.DISCONNECT)
        state_after_failure = channel.state
        await channel.disconnect()
        return event, boom, state_after_failure, channel, events

    event, boom, state_after_failure, channel, events = asyncio.run(scenario())
    assert event.cause is boom
    assert state_after_failure is ChannelState.FAILED
    assert channel.state is ChannelState.DISCONNECTED
    assert events.pending() == 0


def test_reconnect_after_failure_uses_new_socket():
    async def scenario():
        first = FakeSocket()
        connector = FakeConnector(first)
        events = ChannelEvents()
        channel = make_channel(events, connector)
        await channel.connect(URL)
        first.push(WSMsgType.ERROR, RuntimeError("lost"))
        await next_event(events, ChannelEventKind.DISCONNECT)

        second = FakeSocket()
        connector.socket = second
        assert await channel.connect(URL)
        second.push(WSMsgType.TEXT, "again")
        event = await next_event(events, ChannelEventKind.MESSAGE)
        await channel.aclose()
        return event, connector

    event, connector = asyncio.run(scenario())
    assert event.text == "again"
    assert connector.urls == [URL, URL]
    assert connector.closed is True


def test_send_requires_open_channel():
    async def scenario():
        channel = make_channel(None, FakeConnector(FakeSocket()))
        with pytest.raises(ChannelError):
            await channel.send("early")
        results = []
        await channel.send("early", completion=results.append)
        return results

    results = asyncio.run(scenario())
    assert isinstance(results[0], ChannelError)


def test_send_failure_does_not_close_channel():
    async def scenario():
        socket = FakeSocket()
        channel = make_channel(None, FakeConnector(socket))
        await channel.connect(URL)

        await channel.send("one")
        outcomes = []
        await channel.send("two", completion=outcomes.append)

        socket.send_error = ConnectionResetError("write failed")
        with pytest.raises(ChannelError) as info:
            await channel.send("three")
        state = channel.state

        socket.send_error = None
        await channel.send("four")
        await channel.disconnect()
        return socket, outcomes, info.value, state

    socket, outcomes, error, state = asyncio.run(scenario())
    assert socket.sent == ["one", "two", "four"]
    assert outcomes == [None]
    assert isinstance(error.__cause__, ConnectionResetError)
    assert state is ChannelState.OPEN


def test_disconnect_is_idempotent():
    async def scenario():
        events = ChannelEvents()
        channel = make_channel(events, FakeConnector(FakeSocket()))
        await channel.disconnect()
        await channel.connect(URL)
        await channel.disconnect()
        await channel.disconnect()
        kinds = []
        while events.pending():
            kinds.append((await events.get()).kind)
        return kinds

    assert asyncio.run(scenario()) == [ChannelEventKind.CONNECT, ChannelEventKind.DISCONNECT]


def test_connect_twice_is_rejected():
    async def scenario():
        channel = make_channel(None, FakeConnector(FakeSocket()))
        await channel.connect(URL)
        with pytest.raises(ChannelError):
            await channel.connect(URL)
        await channel.disconnect()

    asyncio.run(scenario())


def test_observer_can_disconnect_from_message_callback():
    class Recorder:
        def __init__(self, channel_ref):
            self.channel_ref = channel_ref
            self.calls = []

        def on_connect(self):
            self.calls.append("connect")

        async def on_message(self, text):
            self.calls.append(f"message:{text}")
            await self.channel_ref[0].disconnect()

        def on_disconnect(self, cause):
            self.calls.append(f"disconnect:{cause}")

    async def scenario():
        socket = FakeSocket()
        holder = []
        recorder = Recorder(holder)
        channel = make_channel(recorder, FakeConnector(socket))
        holder.append(channel)
        await channel.connect(URL)
        socket.push(WSMsgType.TEXT, "bye")
        socket.push(WSMsgType.TEXT, "never")
        for _ in range(50):
            if channel.state is ChannelState.DISCONNECTED:
                break
            await asyncio.sleep(0)
        await asyncio.sleep(0)
        return recorder.calls, channel

    calls, channel = asyncio.run(scenario())
    assert calls == ["connect", "message:bye", "disconnect:None"]
    assert channel.state is ChannelState.DISCONNECTED


def test_observer_exceptions_do_not_stop_receive_loop():
    class Flaky:
        def __init__(self):
            self.messages = []

        def on_message(self, text):
            self.messages.append(text)
            if text == "bad":
                raise RuntimeError("observer bug")

    async def scenario():
        socket = FakeSocket()
        observer = Flaky()
        channel = make_channel(observer, FakeConnector(socket))
        await channel.connect(URL)
        socket.push(WSMsgType.TEXT, "bad")
        socket.push(WSMsgType.TEXT, "good")
        for _ in range(50):
            if len(observer.messages) == 2:
                break
            await asyncio.sleep(0)
        await channel.disconnect()
        return observer.messages

    assert asyncio.run(scenario()) == ["bad", "good"]


class SlowObserver:
    def __init__(self, hold: str | None = None):
        self.hold = hold
        self.held = asyncio.Event()
        self.log: list[str] = []
        self.messages: list[str] = []
        self.active = 0
        self.max_active = 0

    def on_connect(self):
        self.log.append("connect")

    async def on_message(self, text: str):
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        self.log.append(f"start:{text}")
        try:
            if text == self.hold:
                self.held.set()
                await asyncio.sleep(10)
            await asyncio.sleep(0.01)
            self.messages.append(text)
        finally:
            self.active -= 1
            self.log.append(f"end:{text}")

    def on_disconnect(self, cause):
        self.log.append(f"disconnect:{self.active}")


def test_async_message_handlers_never_overlap():
    async def scenario():
        socket = FakeSocket()
        observer = SlowObserver()
        channel = make_channel(observer, FakeConnector(socket))
        await channel.connect(URL)
        for text in ("A", "B", "C"):
            socket.push(WSMsgType.TEXT, text)
        for _ in range(100):
            if len(observer.messages) == 3:
                break
            await asyncio.sleep(0.01)
        await channel.disconnect()
        return observer

    observer = asyncio.run(scenario())
    assert observer.messages == ["A", "B", "C"]
    assert observer.max_active == 1
    assert observer.log == [
        "connect",
        "start:A",
        "end:A",
        "start:B",
        "end:B",
        "start:C",
        "end:C",
        "disconnect:0",
    ]


def test_disconnect_waits_for_suspended_message_handler():
    async def scenario():
        socket = FakeSocket()
        observer = SlowObserver(hold="B")
        channel = make_channel(observer, FakeConnector(socket))
        await channel.connect(URL)
        socket.push(WSMsgType.TEXT, "A")
        socket.push(WSMsgType.TEXT, "B")
        await asyncio.wait_for(observer.held.wait(), timeout=1)
        await channel.disconnect()
        return observer, channel

    observer, channel = asyncio.run(scenario())
    assert channel.state is ChannelState.DISCONNECTED
    assert observer.messages == ["A"]
    assert observer.max_active == 1
    assert observer.log[-3:] == ["start:B", "end:B", "disconnect:0"]
