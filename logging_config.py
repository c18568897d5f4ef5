from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Iterable, Sequence

from settings import get_settings

_DEFAULT_EXTRA_KEYS = (
    "sensor_id",
    "element_id",
    "reading_count",
    "sensor_count",
    "failed_count",
    "duplicate_count",
    "limit",
    "reason",
    "interval_seconds",
    "database_path",
)

# APScheduler logs every job execution at INFO; one line per tick is ours to emit.
_QUIET_LOGGERS = {
    "apscheduler.executors.default": "WARNING",
    "apscheduler.scheduler": "WARNING",
    "sqlalchemy.engine": "WARNING",
}

_configured = False


class ContextualFormatter(logging.Formatter):
    """Append ``key=value`` pairs for whitelisted ``extra=`` attributes."""

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: str = "%",
        extra_keys: Iterable[str] | None = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt, style=style)
        self._extra_keys: Sequence[str] = tuple(extra_keys or _DEFAULT_EXTRA_KEYS)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context_parts = [
            f"{key}={getattr(record, key)}"
            for key in self._extra_keys
            if getattr(record, key, None) is not None
        ]
        if context_parts:
            return f"{message} | {' '.join(context_parts)}"
        return message


def configure_logging(level: str | int | None = None) -> None:
    """Configure process-wide logging for the API, the simulator and the CLI."""
    global _configured
    if _configured:
        return

    settings = get_settings()
    log_level = level if level is not None else settings.log_level

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "contextual": {
                    "()": "logging_config.ContextualFormatter",
                    "fmt": "%(asctime)sZ | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                    "style": "%",
                    "extra_keys": list(_DEFAULT_EXTRA_KEYS),
                }
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "level": log_level,
                    "formatter": "contextual",
                }
            },
            "loggers": {
                name: {"level": quiet_level} for name, quiet_level in _QUIET_LOGGERS.items()
            },
            "root": {"handlers": ["default"], "level": log_level},
        }
    )

    _configured = True
