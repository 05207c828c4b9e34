# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Typed API client: build, send, classify and decode."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from .config import ApiSettings, load_settings
from .decoding import Decoder, as_decoder
from .errors import ApiError
from .http.builder import build_request
from .http.classifier import classify_outcome
from .http.endpoints import Endpoint
from .http.models import TransportOutcome
from .http.transport import Transport, create_default_transport
from .result import ApiResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

DiagnosticHook = Callable[[str, Mapping[str, Any]], None]


class ApiClient:
    """
    Issue endpoint requests and decode the responses into caller-chosen types.

    Each call is independent; the transport (and its connection pool) is the
    only state shared between concurrent calls.
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
        self.base_url = base_url or self.settings.base_url
        self.diagnostic_hook = diagnostic_hook

    async def request(self, endpoint: Endpoint, decoder: Decoder[T] | type[T] | Any) -> ApiResult[T]:
        """Perform `endpoint` and decode a successful body with `decoder`."""
        data = await self.request_data(endpoint)
        if not data.ok:
            return ApiResult.failure(data.error)  # type: ignore[arg-type]

        try:
            value = as_decoder(decoder).decode(data.value)  # type: ignore[arg-type]
        except Exception as exc:  # noqa: BLE001
            logger.debug("Decoding %s response failed: %s", endpoint.kind.value, exc)
            error = ApiError.decoding_error(exc)
            self._emit("request.decode_failed", endpoint=endpoint, error=error)
            return ApiResult.failure(error)
        return ApiResult.success(value)

    async def request_data(self, endpoint: Endpoint) -> ApiResult[bytes]:
        """Perform `endpoint` and return the classified raw body."""
        request = build_request(endpoint, self.base_url)
        if request is None:
            error = ApiError.invalid_response()
            self._emit("request.build_failed", endpoint=endpoint, error=error)
            return ApiResult.failure(error)

        self._emit("request.start", endpoint=endpoint, method=request.method.value, url=request.url)
        try:
            outcome = await self.transport.send(request)
        except Exception as exc:  # noqa: BLE001
            logger.debug("Transport raised for %s %s: %s", request.method.value, request.url, exc)
            outcome = TransportOutcome.failure(exc, url=request.url)
        result = classify_outcome(outcome)
        self._emit(
            "request.finish",
            endpoint=endpoint,
            method=request.method.value,
            url=request.url,
            status_code=outcome.status_code,
            elapsed=outcome.elapsed,
            error=result.error,
        )
        if result.error is not None:
            logger.debug("%s %s classified as %s", request.method.value, request.url, result.error.kind.value)
        return result

    def _emit(self, event: str, **fields: Any) -> None:
        if self.diagnostic_hook is None:
            return
        try:
            self.diagnostic_hook(event, fields)
        except Exception:  # noqa: BLE001
            logger.exception("Diagnostic hook failed for %s", event)

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.aclose()


__all__ = ["ApiClient", "DiagnosticHook"]
