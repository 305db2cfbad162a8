from __future__ import annotations

import logging
from typing import Dict

from .db import Database
from .errors import DatabaseError, StartupError

logger = logging.getLogger(__name__)

# Generated integer primary key, per dialect.
_ID_COLUMN: Dict[str, str] = {
    "postgresql": "id SERIAL PRIMARY KEY",
    "sqlite": "id INTEGER PRIMARY KEY AUTOINCREMENT",
}

_CREATE_TODOS = """
CREATE TABLE IF NOT EXISTS todos (
    {id_column},
    title TEXT NOT NULL,
    status TEXT NOT NULL
)
"""


# PUBLIC_INTERFACE
def ensure_schema(db: Database) -> None:
    """
    Create the todos table if it does not exist yet.

    Safe to call on every startup. Any failure is a StartupError: the
    service cannot run without its table.
    """
    id_column = _ID_COLUMN.get(db.dialect)
    if id_column is None:
        raise StartupError(f"unsupported database dialect: {db.dialect}")
    try:
        db.execute(_CREATE_TODOS.format(id_column=id_column))
    except DatabaseError as exc:
        raise StartupError(f"cannot create todos table: {exc}") from exc
    logger.info("Table 'todos' is ready")
