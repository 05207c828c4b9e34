# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Discriminated success/failure result returned by the typed client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from .errors import ApiError

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class ApiResult(Generic[T]):
    """Exactly one of `value` (success) or `error` (failure) is meaningful."""

    value: T | None = None
    error: ApiError | None = None

    @classmethod
    def success(cls, value: T) -> ApiResult[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: ApiError) -> ApiResult[T]:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value or raise the contained ApiError."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]

    def map(self, func: Callable[[T], U]) -> ApiResult[U]:
        if self.error is not None:
            return ApiResult(error=self.error)
        return ApiResult(value=func(self.value))  # type: ignore[arg-type]


__all__ = ["ApiResult"]
