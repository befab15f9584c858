"""Environment configuration for versionnumber.

All settings come from VERSIONNUMBER_* environment variables. ``Config.from_env``
takes a fresh snapshot so tests can monkeypatch the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import tzinfo
from pathlib import Path
from typing import Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from versionnumber.exceptions import ConfigurationError

ENV_PREFIX = "VERSIONNUMBER"

DEFAULT_DATA_DIR = "data"
DEFAULT_MCP_PORT = 8040
DEFAULT_WEB_PORT = 8042


def _port(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(f"{ENV_PREFIX}_{name}")
    if raw is None or not raw.strip():
        return default
    try:
        port = int(raw)
    except ValueError:
        raise ConfigurationError(
            "CONFIGURATION_ERROR",
            f"{ENV_PREFIX}_{name} must be an integer",
            {"value": raw},
        )
    if not 0 < port < 65536:
        raise ConfigurationError(
            "CONFIGURATION_ERROR",
            f"{ENV_PREFIX}_{name} must be between 1 and 65535",
            {"value": raw},
        )
    return port


@dataclass(frozen=True)
class Config:
    data_dir: Path
    timezone: Optional[str]
    log_level: str
    mcp_host: str
    mcp_port: int
    web_host: str
    web_port: int

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Config":
        env = os.environ if env is None else env
        timezone = env.get(f"{ENV_PREFIX}_TIMEZONE") or None
        if timezone is not None:
            try:
                ZoneInfo(timezone)
            except (ZoneInfoNotFoundError, ValueError):
                raise ConfigurationError(
                    "CONFIGURATION_ERROR",
                    f"Unknown timezone in {ENV_PREFIX}_TIMEZONE",
                    {"value": timezone},
                )
        return cls(
            data_dir=Path(env.get(f"{ENV_PREFIX}_DATA_DIR") or DEFAULT_DATA_DIR),
            timezone=timezone,
            log_level=(env.get(f"{ENV_PREFIX}_LOG_LEVEL") or "INFO").upper(),
            mcp_host=env.get(f"{ENV_PREFIX}_MCP_HOST") or "0.0.0.0",
            mcp_port=_port(env, "MCP_PORT", DEFAULT_MCP_PORT),
            web_host=env.get(f"{ENV_PREFIX}_WEB_HOST") or "0.0.0.0",
            web_port=_port(env, "WEB_PORT", DEFAULT_WEB_PORT),
        )

    def tz(self) -> Optional[tzinfo]:
        """Timezone used for new build timestamps (None means local time)."""
        return ZoneInfo(self.timezone) if self.timezone else None
