"""Connection settings for the CLI, resolved from flags first and env second."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from settings import read_positive_float

DEFAULT_BASE_URL = "http://localhost:8000"
# Matches the dashboard's polling period for ``latest --follow``.
DEFAULT_FOLLOW_INTERVAL = 30.0
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class CLIConfig:
    base_url: str = DEFAULT_BASE_URL
    follow_interval: float = DEFAULT_FOLLOW_INTERVAL
    timeout: float = DEFAULT_TIMEOUT

    @property
    def api_root(self) -> str:
        return f"{self.base_url}/api"


def load_config(
    base_url: Optional[str] = None,
    follow_interval: Optional[float] = None,
    timeout: Optional[float] = None,
) -> CLIConfig:
    url = (base_url or os.getenv("API_BASE_URL") or DEFAULT_BASE_URL).rstrip("/")
    return CLIConfig(
        base_url=url,
        follow_interval=follow_interval
        if follow_interval is not None
        else read_positive_float("CLI_FOLLOW_INTERVAL", DEFAULT_FOLLOW_INTERVAL),
        timeout=timeout if timeout is not None else read_positive_float("CLI_HTTP_TIMEOUT", DEFAULT_TIMEOUT),
    )
