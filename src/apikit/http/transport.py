# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transport abstraction and factory."""

from typing import Protocol

from ..config import ApiSettings, load_settings
from .models import HttpRequest, TransportOutcome


class Transport(Protocol):
    """Minimal protocol for submitting built requests."""

    async def send(self, request: HttpRequest) -> TransportOutcome: ...

    async def aclose(self) -> None:  # pragma: no cover - optional for adapters
        ...


def create_default_transport(settings: ApiSettings | None = None) -> Transport:
    """Factory for the default httpx-backed transport."""
    from .httpx_transport import HttpxTransport

    return HttpxTransport(settings or load_settings())
