# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed Transport implementation."""

from __future__ import annotations

import logging
import time

import httpx

from ..config import ApiSettings, load_settings
from .headers import header_value
from .models import HttpRequest, TransportOutcome
from .transport import Transport

logger = logging.getLogger(__name__)


class HttpxTransport(Transport):
    """Asynchronous httpx client wrapper owning one shared connection pool."""

    def __init__(self, settings: ApiSettings | None = None, client: httpx.AsyncClient | None = None):
        self.settings = settings or load_settings()
        self._client = client or httpx.AsyncClient(
            follow_redirects=self.settings.allow_redirects,
            timeout=self.settings.timeout,
            verify=self.settings.verify_ssl,
            limits=httpx.Limits(max_connections=None, max_keepalive_connections=None),
        )

    async def send(self, request: HttpRequest) -> TransportOutcome:
        headers = dict(request.headers or {})
        if not header_value(headers, "User-Agent"):
            headers["User-Agent"] = self.settings.user_agent

        started = time.monotonic()
        try:
            response = await self._client.request(
                request.method.value,
                request.url,
                headers=headers,
                content=request.body,
            )
        except Exception as exc:  # noqa: BLE001
            logger.debug("%s %s failed: %s: %s", request.method.value, request.url, type(exc).__name__, exc)
            return TransportOutcome.failure(exc, url=request.url, elapsed=time.monotonic() - started)

        logger.debug("%s %s -> %s", request.method.value, request.url, response.status_code)
        return TransportOutcome.success(
            response.status_code,
            response.content,
            headers=dict(response.headers),
            url=str(response.url),
            elapsed=time.monotonic() - started,
        )

    async def aclose(self) -> None:
        await self._client.aclose()
