"""Server configuration read from the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_SERVER_NAME = "toolroute-mcp"


@dataclass
class ServerConfig:
    """Runtime settings for the MCP server process."""

    name: str = DEFAULT_SERVER_NAME
    log_level: str = "INFO"
    log_format: str | None = None
    routes: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ServerConfig:
        """Build a config from environment variables.

        Reads ``TOOLROUTE_SERVER_NAME``, ``LOGGING_LEVEL``,
        ``TOOLROUTE_LOG_FORMAT`` and ``TOOLROUTE_ROUTES`` (a
        ``module:attribute`` reference to the router to serve); unset or
        blank values keep the defaults.
        """
        env = os.environ if environ is None else environ
        return cls(
            name=env.get("TOOLROUTE_SERVER_NAME", "").strip() or DEFAULT_SERVER_NAME,
            log_level=env.get("LOGGING_LEVEL", "").strip().upper() or "INFO",
            log_format=env.get("TOOLROUTE_LOG_FORMAT") or None,
            routes=env.get("TOOLROUTE_ROUTES", "").strip() or None,
        )
