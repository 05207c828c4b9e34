# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transport test doubles."""

from __future__ import annotations

from .endpoints import HttpMethod
from .models import HttpRequest, TransportOutcome
from .transport import Transport


class StubTransport(Transport):
    """Deterministic, programmable Transport for tests."""

    def __init__(self, outcomes: dict[tuple[str, str], TransportOutcome] | None = None):
        self._outcomes = outcomes or {}
        self.requests: list[HttpRequest] = []
        self.closed = False

    def add(self, url: str, outcome: TransportOutcome, method: HttpMethod | str = HttpMethod.GET) -> None:
        verb = method if isinstance(method, HttpMethod) else HttpMethod(method.upper())
        self._outcomes[(verb.value, url)] = outcome

    async def send(self, request: HttpRequest) -> TransportOutcome:
        self.requests.append(request)
        outcome = self._outcomes.get((request.method.value, request.url))
        if outcome is not None:
            return outcome
        return TransportOutcome.failure(LookupError(f"No stubbed outcome for {request.method.value} {request.url}"))

    async def aclose(self) -> None:
        self.closed = True
