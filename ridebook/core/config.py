"""Runtime settings for the RideBook client, read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from .constants import (
    DEFAULT_API_URL,
    DEFAULT_TIMEOUT,
    PASSENGER_POLL_INTERVAL_MS,
    RIDER_POLL_INTERVAL_MS,
)

# Package-level .env first, then the working directory; real env vars win.
_ENV_CANDIDATES = [
    Path(__file__).resolve().parents[1] / ".env",
    Path.cwd() / ".env",
]


def load_env_files() -> None:
    for env_path in _ENV_CANDIDATES:
        if env_path.exists():
            load_dotenv(env_path, override=False)


def _default_cookie_file() -> Path:
    return Path.home() / ".ridebook" / "cookies.txt"


def _int_setting(env: Mapping[str, str], key: str, default: int) -> int:
    raw = (env.get(key) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _float_setting(env: Mapping[str, str], key: str, default: float) -> float:
    raw = (env.get(key) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


@dataclass(frozen=True)
class ClientSettings:
    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    passenger_poll_ms: int = PASSENGER_POLL_INTERVAL_MS
    rider_poll_ms: int = RIDER_POLL_INTERVAL_MS
    cookie_file: Optional[Path] = None

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "ClientSettings":
        if env is None:
            load_env_files()
            env = os.environ
        api_url = (env.get("RIDEBOOK_API_URL") or "").strip() or DEFAULT_API_URL
        cookie_raw = (env.get("RIDEBOOK_COOKIE_FILE") or "").strip()
        return cls(
            api_url=api_url.rstrip("/"),
            timeout=_float_setting(env, "RIDEBOOK_TIMEOUT", DEFAULT_TIMEOUT),
            passenger_poll_ms=_int_setting(
                env, "RIDEBOOK_PASSENGER_POLL_MS", PASSENGER_POLL_INTERVAL_MS
            ),
            rider_poll_ms=_int_setting(
                env, "RIDEBOOK_RIDER_POLL_MS", RIDER_POLL_INTERVAL_MS
            ),
            cookie_file=Path(cookie_raw).expanduser()
            if cookie_raw
            else _default_cookie_file(),
        )
