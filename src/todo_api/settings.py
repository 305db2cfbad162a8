from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - DATABASE_URL: SQLAlchemy URL of the database. Default 'sqlite:///./data/todos.db'
    - HOST: interface the listener binds to. Default '127.0.0.1'
    - PORT: port the listener binds to. Default 8000
    - LOG_LEVEL: logging level name for the app and uvicorn. Default 'info'
    - SHUTDOWN_TIMEOUT: seconds to wait for in-flight requests on shutdown. Default 5
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    """

    database_url: str
    host: str
    port: int
    log_level: str
    shutdown_timeout: float
    cors_allow_origins: List[str]


DEFAULT_DATABASE_URL = "sqlite:///./data/todos.db"
DEFAULT_PORT = 8000
DEFAULT_SHUTDOWN_TIMEOUT = 5.0
LOG_LEVELS = {"critical", "error", "warning", "info", "debug"}


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value.strip() == "":
        return default
    return value.strip()


def _parse_port(value: str, default: int = DEFAULT_PORT) -> int:
    try:
        port = int(value)
    except ValueError:
        return default
    return port if 0 <= port <= 65535 else default


def _parse_timeout(value: str, default: float = DEFAULT_SHUTDOWN_TIMEOUT) -> float:
    try:
        timeout = float(value)
    except ValueError:
        return default
    return timeout if timeout > 0 else default


def _parse_log_level(value: str) -> str:
    level = value.lower()
    return level if level in LOG_LEVELS else "info"


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    return Settings(
        database_url=_get_env("DATABASE_URL", DEFAULT_DATABASE_URL),
        host=_get_env("HOST", "127.0.0.1"),
        port=_parse_port(_get_env("PORT", str(DEFAULT_PORT))),
        log_level=_parse_log_level(_get_env("LOG_LEVEL", "info")),
        shutdown_timeout=_parse_timeout(_get_env("SHUTDOWN_TIMEOUT", str(DEFAULT_SHUTDOWN_TIMEOUT))),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
    )
