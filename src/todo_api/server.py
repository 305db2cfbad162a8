"""
Process entry point: load configuration, connect to the database, make sure
the table exists, then serve until SIGINT/SIGTERM.

Usage:
    todo-api
    python -m todo_api
"""
from __future__ import annotations

import logging
import sys

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI

from .db import Database
from .errors import DatabaseConnectionError, StartupError
from .lifecycle import Lifecycle
from .main import create_app
from .schema import ensure_schema
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


def configure_logging(level: str = "info") -> None:
    """Send todo_api.* logs to the same sink as uvicorn's error log."""
    app_logger = logging.getLogger("todo_api")
    app_logger.setLevel(level.upper())
    app_logger.propagate = False

    uvicorn_error_logger = logging.getLogger("uvicorn.error")
    if uvicorn_error_logger.handlers:
        app_logger.handlers = list(uvicorn_error_logger.handlers)
        return

    if not app_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s:     %(name)s - %(message)s"))
        app_logger.addHandler(handler)


def build_server(app: FastAPI, settings: Settings) -> uvicorn.Server:
    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
        timeout_graceful_shutdown=settings.shutdown_timeout,
    )
    return uvicorn.Server(config)


# PUBLIC_INTERFACE
def run(settings: Settings) -> int:
    """
    Start the service and block until it stops. Returns the exit code.

    Startup order: connect, ensure schema, build app, bind listener.
    Raises StartupError if any of these fails.
    """
    try:
        db = Database.connect(settings.database_url)
    except DatabaseConnectionError as exc:
        raise StartupError(f"cannot connect to database: {exc}") from exc

    try:
        ensure_schema(db)
        app = create_app(db, settings)
        server = build_server(app, settings)
    except Exception:
        db.close()
        raise

    logger.info("Listening on %s:%s", settings.host, settings.port)
    lifecycle = Lifecycle(server, shutdown_timeout=settings.shutdown_timeout, on_stopped=[db.close])
    return lifecycle.run()


def main() -> None:
    load_dotenv()
    settings = get_settings()
    configure_logging(settings.log_level)
    try:
        code = run(settings)
    except StartupError as exc:
        logger.critical("Startup failed: %s", exc)
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
