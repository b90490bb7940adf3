"""
Runtime settings, read from environment variables.

The CLI loads a `.env` file first (python-dotenv), so anything here can live
there too. Bad numeric values never stop a run; they fall back to defaults.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

log = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 30
DEFAULT_MAX_RESULTS = 500
DEFAULT_DATA_PATH = Path("./data.json")
DEFAULT_HTTP_TIMEOUT = 20.0
DEFAULT_HTTP_ATTEMPTS = 1


def _positive_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        log.warning(f"{name}={raw!r} is not an integer; using {default}")
        return default
    if value <= 0:
        log.warning(f"{name}={value} must be positive; using {default}")
        return default
    return value


def _positive_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        log.warning(f"{name}={raw!r} is not a number; using {default}")
        return default
    if value <= 0:
        log.warning(f"{name}={value} must be positive; using {default}")
        return default
    return value


@dataclass(frozen=True)
class Settings:
    usajobs_api_key: str = ""
    usajobs_user_agent: str = ""
    window_days: int = DEFAULT_WINDOW_DAYS
    max_results: int = DEFAULT_MAX_RESULTS
    data_path: Path = DEFAULT_DATA_PATH
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    http_attempts: int = DEFAULT_HTTP_ATTEMPTS

    @property
    def has_usajobs_credentials(self) -> bool:
        return bool(self.usajobs_api_key and self.usajobs_user_agent)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from `env` (defaults to os.environ).

        USAJOBS_API_KEY / USAJOBS_USER_AGENT must both be set for the
        postings lens; a missing one just leaves that lens disabled.
        """
        if env is None:
            env = os.environ
        data_path = (env.get("PULSE_DATA_PATH") or "").strip()
        return cls(
            usajobs_api_key=(env.get("USAJOBS_API_KEY") or "").strip(),
            usajobs_user_agent=(env.get("USAJOBS_USER_AGENT") or "").strip(),
            window_days=_positive_int(env, "PULSE_WINDOW_DAYS", DEFAULT_WINDOW_DAYS),
            max_results=_positive_int(env, "PULSE_MAX_RESULTS", DEFAULT_MAX_RESULTS),
            data_path=Path(data_path) if data_path else DEFAULT_DATA_PATH,
            http_timeout=_positive_float(env, "PULSE_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),
            http_attempts=_positive_int(env, "PULSE_HTTP_ATTEMPTS", DEFAULT_HTTP_ATTEMPTS),
        )
