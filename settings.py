from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


DEFAULT_SOURCE_URL = "https://otbbh4v81j.execute-api.us-east-1.amazonaws.com/items"
DEFAULT_POLL_INTERVAL_MS = 30000

_SOURCE_URL_ENV = "WATER_SOURCE_URL"
_POLL_INTERVAL_ENV = "POLL_INTERVAL_MS"
_FETCH_TIMEOUT_ENV = "FETCH_TIMEOUT_MS"
_STRICT_ENV = "STRICT_VALIDATION"
_HISTORY_ORDER_ENV = "HISTORY_ORDER"
_SELECTION_FALLBACK_ENV = "SELECTION_FALLBACK"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_HISTORY_ORDERS = {"timestamp", "source"}
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    source_url: str
    poll_interval_ms: int
    fetch_timeout_ms: int
    strict_validation: bool
    history_order: str
    selection_fallback: bool
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    if candidate in _TRUE_VALUES:
        return True
    if candidate in _FALSE_VALUES:
        return False
    return default


def _read_history_order(default: str) -> str:
    candidate = _read_str_env(_HISTORY_ORDER_ENV, default).lower()
    return candidate if candidate in _HISTORY_ORDERS else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    poll_interval_ms = _read_positive_int(_POLL_INTERVAL_ENV, DEFAULT_POLL_INTERVAL_MS)
    return Settings(
        source_url=_read_str_env(_SOURCE_URL_ENV, DEFAULT_SOURCE_URL),
        poll_interval_ms=poll_interval_ms,
        fetch_timeout_ms=_read_positive_int(_FETCH_TIMEOUT_ENV, poll_interval_ms),
        strict_validation=_read_bool(_STRICT_ENV, False),
        history_order=_read_history_order("timestamp"),
        selection_fallback=_read_bool(_SELECTION_FALLBACK_ENV, True),
        log_level=_read_log_level("INFO"),
    )
