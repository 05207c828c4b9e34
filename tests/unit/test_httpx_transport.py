# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import asyncio

import httpx

from apikit.config import ApiSettings
from apikit.http import HttpMethod, HttpRequest, HttpxTransport, create_default_transport


def test_send_returns_status_body_and_headers():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["request"] = request
        return httpx.Response(202, headers={"X-Id": "9"}, content=b"accepted")

    transport = HttpxTransport(
        ApiSettings(user_agent="UA/1.0"),
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    request = HttpRequest(
        url="https://api.example.com/jobs",
        method=HttpMethod.PUT,
        headers={"Content-Type": "application/json"},
        body=b"{}",
    )

    outcome = asyncio.run(transport.send(request))

    assert outcome.ok
    assert outcome.status_code == 202
    assert outcome.content == b"accepted"
    assert outcome.headers["x-id"] == "9"
    assert outcome.url == "https://api.example.com/jobs"
    assert outcome.elapsed is not None and outcome.elapsed >= 0
    sent = captured["request"]
    assert sent.method == "PUT"
    assert sent.headers["user-agent"] == "UA/1.0"
    assert sent.content == b"{}"


def test_caller_user_agent_is_kept():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["ua"] = request.headers["user-agent"]
        return httpx.Response(200)

    transport = HttpxTransport(ApiSettings(), client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    asyncio.run(transport.send(HttpRequest(url="https://h/x", headers={"user-agent": "Mine/2"})))
    assert seen["ua"] == "Mine/2"


def test_failures_become_outcomes():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    transport = HttpxTransport(ApiSettings(), client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    outcome = asyncio.run(transport.send(HttpRequest(url="https://h/slow")))
    assert not outcome.ok
    assert outcome.status_code is None
    assert isinstance(outcome.error, httpx.ReadTimeout)
    assert outcome.url == "https://h/slow"


def test_aclose_closes_underlying_client():
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    transport = HttpxTransport(ApiSettings(), client=client)
    asyncio.run(transport.aclose())
    assert client.is_closed


def test_default_transport_uses_settings(monkeypatch):
    created = {}

    class FakeAsyncClient:
        def __init__(self, **kwargs):
            created.update(kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", FakeAsyncClient)
    settings = ApiSettings(timeout=3.0, allow_redirects=False, verify_ssl=False)
    transport = create_default_transport(settings)

    assert isinstance(transport, HttpxTransport)
    assert transport.settings is settings
    assert created["timeout"] == 3.0
    assert created["follow_redirects"] is False
    assert created["verify"] is False
    assert created["limits"].max_connections is None
