# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for apikit."""

import os
from dataclasses import dataclass

from .version import __version__

DEFAULT_BASE_URL = "https://api.example.com"
DEFAULT_USER_AGENT = f"apikit/{__version__}"


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _optional_float_env(name: str, default: float | None) -> float | None:
    try:
        value = os.getenv(name)
        if value is None:
            return default
        parsed = float(value)
        return parsed if parsed > 0 else None
    except ValueError:
        return default


@dataclass
class ApiSettings:
    """Transport and channel defaults."""

    base_url: str = DEFAULT_BASE_URL
    timeout: float = 5.0
    user_agent: str = DEFAULT_USER_AGENT
    allow_redirects: bool = True
    verify_ssl: bool = True
    ws_heartbeat: float | None = None

    @classmethod
    def from_env(cls) -> "ApiSettings":
        """Create settings from environment variables (evaluated at call time)."""
        base_url = os.getenv("APIKIT_BASE_URL", "").strip() or cls.base_url
        timeout = _float_env("APIKIT_HTTP_TIMEOUT", cls.timeout)
        if timeout <= 0:
            timeout = cls.timeout
        return cls(
            base_url=base_url,
            timeout=timeout,
            user_agent=os.getenv("APIKIT_USER_AGENT", cls.user_agent),
            allow_redirects=_bool_env("APIKIT_HTTP_REDIRECTS", cls.allow_redirects),
            verify_ssl=_bool_env("APIKIT_HTTP_VERIFY_SSL", cls.verify_ssl),
            ws_heartbeat=_optional_float_env("APIKIT_WS_HEARTBEAT", cls.ws_heartbeat),
        )


def load_settings() -> ApiSettings:
    """Load settings from environment with sensible defaults."""
    return ApiSettings.from_env()
