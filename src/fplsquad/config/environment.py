"""Environment-driven settings for the I/O adapters."""

from __future__ import annotations

import logging
import os
from pathlib import Path


logger = logging.getLogger(__name__)

BASE_URL_ENV = "FPLSQUAD_BASE_URL"
HTTP_TIMEOUT_ENV = "FPLSQUAD_HTTP_TIMEOUT"
HTTP_RETRIES_ENV = "FPLSQUAD_HTTP_RETRIES"
HISTORY_DIR_ENV = "FPLSQUAD_HISTORY_DIR"

DEFAULT_BASE_URL = "https://fantasy.premierleague.com/api"
DEFAULT_HTTP_TIMEOUT = 20.0
DEFAULT_HTTP_RETRIES = 2


def env_float(name: str, default: float, *, clamp_min: float | None = None, clamp_max: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float for %s: %s; using default %.2f", name, raw, default)
        return default
    if clamp_min is not None:
        value = max(clamp_min, value)
    if clamp_max is not None:
        value = min(clamp_max, value)
    return value


def env_int(name: str, default: int, *, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %d", name, raw, default)
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


def env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def base_url() -> str:
    return env_str(BASE_URL_ENV, DEFAULT_BASE_URL).rstrip("/")


def http_timeout() -> float:
    return env_float(HTTP_TIMEOUT_ENV, DEFAULT_HTTP_TIMEOUT, clamp_min=1.0)


def http_retries() -> int:
    return env_int(HTTP_RETRIES_ENV, DEFAULT_HTTP_RETRIES, min_value=0)


def history_dir() -> Path | None:
    raw = os.getenv(HISTORY_DIR_ENV)
    if not raw:
        return None
    return Path(raw).expanduser()
