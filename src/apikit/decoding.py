# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Decode-from-bytes capabilities for the typed client.

A decoder is anything exposing `decode(data: bytes) -> T`. Plain types and
annotations (dataclasses, pydantic models, `list[int]`, `dict[str, Any]`, ...)
are wrapped in a JsonDecoder backed by a pydantic TypeAdapter.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from pydantic import TypeAdapter

from .errors import ApiError

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


@runtime_checkable
class Decoder(Protocol[T_co]):
    def decode(self, data: bytes) -> T_co: ...


@lru_cache(maxsize=256)
def _adapter_for(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


class JsonDecoder(Generic[T]):
    """Validate a JSON document against `target`."""

    def __init__(self, target: type[T] | Any):
        self.target = target
        self._adapter: TypeAdapter[T]
        try:
            hash(target)
        except TypeError:
            # unhashable annotations skip the cache
            self._adapter = TypeAdapter(target)
        else:
            self._adapter = _adapter_for(target)

    def decode(self, data: bytes) -> T:
        return self._adapter.validate_json(data)

    def __repr__(self) -> str:
        return f"JsonDecoder({self.target!r})"


class RawDecoder:
    """Return the body unchanged."""

    def decode(self, data: bytes) -> bytes:
        return bytes(data)


class TextDecoder:
    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def decode(self, data: bytes) -> str:
        return bytes(data).decode(self.encoding)


def as_decoder(target: Decoder[T] | type[T] | Any) -> Decoder[T]:
    """Return `target` if it already decodes, else a JsonDecoder for it."""
    if not isinstance(target, type) and isinstance(target, Decoder):
        return target
    if target is bytes:
        return RawDecoder()  # type: ignore[return-value]
    if target is str:
        return TextDecoder()  # type: ignore[return-value]
    return JsonDecoder(target)


def decode_json_file(path: str | Path, target: type[T] | Any) -> T:
    """
    Load a JSON file and validate it against `target`.

    Raises ApiError (DECODING_ERROR) when the file cannot be read or does not
    match the target type.
    """
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise ApiError.decoding_error(exc) from exc
    try:
        return as_decoder(target).decode(data)
    except Exception as exc:  # noqa: BLE001
        raise ApiError.decoding_error(exc) from exc


__all__ = ["Decoder", "JsonDecoder", "RawDecoder", "TextDecoder", "as_decoder", "decode_json_file"]
