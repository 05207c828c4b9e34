# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Map raw transport outcomes onto the ApiError taxonomy."""

from __future__ import annotations

from ..errors import ApiError
from ..result import ApiResult
from .models import TransportOutcome


def _resolve_status(status_code: object) -> int | None:
    if isinstance(status_code, bool) or not isinstance(status_code, int):
        return None
    if status_code < 100 or status_code > 999:
        return None
    return status_code


def classify(
    content: bytes | None,
    status_code: int | None,
    error: BaseException | None = None,
) -> ApiResult[bytes]:
    """
    Classify one transport result.

    Rules are evaluated in order: transport failure, missing status, 2xx,
    401, 404, 5xx, anything else.
    """
    if error is not None:
        return ApiResult.failure(ApiError.network_error(error))

    status = _resolve_status(status_code)
    if status is None:
        return ApiResult.failure(ApiError.invalid_response())

    if 200 <= status <= 299:
        if content is None:
            return ApiResult.failure(ApiError.invalid_response())
        return ApiResult.success(content)
    if status == 401:
        return ApiResult.failure(ApiError.unauthorized())
    if status == 404:
        return ApiResult.failure(ApiError.not_found())
    if 500 <= status <= 599:
        return ApiResult.failure(ApiError.server_error(status))
    return ApiResult.failure(ApiError.unknown())


def classify_outcome(outcome: TransportOutcome) -> ApiResult[bytes]:
    return classify(outcome.content, outcome.status_code, outcome.error)


__all__ = ["classify", "classify_outcome"]
