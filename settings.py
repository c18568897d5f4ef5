from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_DATABASE_PATH_ENV = "DATABASE_PATH"
_UPDATE_INTERVAL_ENV = "UPDATE_INTERVAL_SECONDS"
_SIMULATOR_ENABLED_ENV = "SIMULATOR_ENABLED"
_SEED_ON_STARTUP_ENV = "SEED_ON_STARTUP"
_HISTORY_DEFAULT_ENV = "HISTORY_DEFAULT_LIMIT"
_HISTORY_MAX_ENV = "HISTORY_MAX_LIMIT"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    database_path: str
    update_interval_seconds: float
    simulator_enabled: bool
    seed_on_startup: bool
    history_default_limit: int
    history_max_limit: int
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


def read_positive_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    if candidate in _TRUTHY:
        return True
    if candidate in _FALSY:
        return False
    return default


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
    default_limit = _read_positive_int(_HISTORY_DEFAULT_ENV, 100)
    max_limit = _read_positive_int(_HISTORY_MAX_ENV, 1000)
    return Settings(
        database_path=_read_str_env(_DATABASE_PATH_ENV, "./tmp/sensors.sqlite"),
        update_interval_seconds=read_positive_float(_UPDATE_INTERVAL_ENV, 30.0),
        simulator_enabled=_read_bool(_SIMULATOR_ENABLED_ENV, True),
        seed_on_startup=_read_bool(_SEED_ON_STARTUP_ENV, False),
        history_default_limit=min(default_limit, max_limit),
        history_max_limit=max_limit,
        log_level=_read_log_level("INFO"),
    )
