from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Any, Dict, Generator, List, Mapping, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine, make_url
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.pool import StaticPool

from .errors import DatabaseConnectionError, NotFoundError, QueryError

logger = logging.getLogger(__name__)

Row = Dict[str, Any]
Params = Optional[Mapping[str, Any]]


def _engine_options(url: str) -> Dict[str, Any]:
    """
    Build create_engine() keyword arguments for the given URL.

    SQLite connections are shared across the request threadpool, so the
    same-thread check is disabled. A file database gets its parent
    directory created; an in-memory database is pinned to one connection
    so every thread sees the same data.
    """
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return {"pool_pre_ping": True}

    options: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    database = parsed.database
    if not database or database == ":memory:":
        options["poolclass"] = StaticPool
    elif not database.startswith("file:"):
        os.makedirs(os.path.dirname(database) or ".", exist_ok=True)
    return options


# PUBLIC_INTERFACE
class Database:
    """
    Owns the process-wide SQLAlchemy engine (a connection pool) and exposes
    parameterized statement execution. Safe to share between threads.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @classmethod
    def connect(cls, url: str) -> "Database":
        """Create the engine for ``url`` and verify the database answers."""
        try:
            engine = create_engine(url, **_engine_options(url))
        except (SQLAlchemyError, ValueError, ImportError) as exc:
            raise DatabaseConnectionError(f"invalid database url: {exc}") from exc
        db = cls(engine)
        try:
            db.ping()
        except DatabaseConnectionError:
            engine.dispose()
            raise
        logger.info("Connected to the %s database", db.dialect)
        return db

    @property
    def dialect(self) -> str:
        return self._engine.dialect.name

    @contextmanager
    def _connection(self) -> Generator[Connection, None, None]:
        try:
            conn = self._engine.connect()
        except SQLAlchemyError as exc:
            raise DatabaseConnectionError(f"cannot connect to database: {exc}") from exc
        try:
            with conn.begin():
                yield conn
        except DBAPIError as exc:
            if exc.connection_invalidated:
                raise DatabaseConnectionError(f"database connection lost: {exc.orig}") from exc
            raise QueryError(str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            raise QueryError(str(exc)) from exc
        except OverflowError as exc:
            # sqlite3 rejects out-of-range integers while binding parameters
            raise QueryError(str(exc)) from exc
        finally:
            conn.close()

    def ping(self) -> None:
        try:
            with self._connection() as conn:
                conn.execute(text("SELECT 1"))
        except QueryError as exc:
            raise DatabaseConnectionError(f"ping failed: {exc}") from exc

    def execute(self, sql: str, params: Params = None) -> int:
        """Run a statement and return the number of rows it affected."""
        with self._connection() as conn:
            result = conn.execute(text(sql), dict(params or {}))
            return result.rowcount

    def query_one(self, sql: str, params: Params = None) -> Row:
        """Return the first row of the result. Raises NotFoundError if there is none."""
        with self._connection() as conn:
            row = conn.execute(text(sql), dict(params or {})).mappings().first()
        if row is None:
            raise NotFoundError("no matching row")
        return dict(row)

    def query_all(self, sql: str, params: Params = None) -> List[Row]:
        with self._connection() as conn:
            rows = conn.execute(text(sql), dict(params or {})).mappings().all()
        return [dict(r) for r in rows]

    def close(self) -> None:
        """Release every pooled connection."""
        self._engine.dispose()
        logger.info("Database connection pool closed")
