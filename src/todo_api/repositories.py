from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping

from .db import Database
from .errors import NotFoundError
from .models import TodoEntity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Cols:
    table: str = "todos"
    id: str = "id"
    title: str = "title"
    status: str = "status"


_COLS = _Cols()

_SELECT = f"SELECT {_COLS.id}, {_COLS.title}, {_COLS.status} FROM {_COLS.table}"


def _not_found(todo_id: int) -> NotFoundError:
    logger.debug("Todo %s not found", todo_id)
    return NotFoundError("Todo not found")


# PUBLIC_INTERFACE
class TodoRepository:
    """
    Maps todo operations onto single parameterized SQL statements.

    Every method touches at most one row, so no explicit transaction
    spans more than one statement.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    def _row_to_entity(self, row: Mapping[str, Any]) -> TodoEntity:
        return {
            "id": int(row[_COLS.id]),
            "title": str(row[_COLS.title]),
            "status": str(row[_COLS.status]),
        }

    def list_all(self) -> List[TodoEntity]:
        """Return every todo in primary key order."""
        rows = self._db.query_all(f"{_SELECT} ORDER BY {_COLS.id}")
        return [self._row_to_entity(r) for r in rows]

    def get(self, todo_id: int) -> TodoEntity:
        try:
            row = self._db.query_one(f"{_SELECT} WHERE {_COLS.id} = :id", {"id": todo_id})
        except NotFoundError:
            raise _not_found(todo_id) from None
        return self._row_to_entity(row)

    def create(self, title: str, status: str) -> TodoEntity:
        row = self._db.query_one(
            f"INSERT INTO {_COLS.table} ({_COLS.title}, {_COLS.status}) "
            f"VALUES (:title, :status) RETURNING {_COLS.id}",
            {"title": title, "status": status},
        )
        todo_id = int(row[_COLS.id])
        logger.debug("Created todo %s", todo_id)
        return {"id": todo_id, "title": title, "status": status}

    def update(self, todo_id: int, title: str, status: str) -> TodoEntity:
        """Replace both mutable fields of a todo."""
        affected = self._db.execute(
            f"UPDATE {_COLS.table} SET {_COLS.title} = :title, {_COLS.status} = :status "
            f"WHERE {_COLS.id} = :id",
            {"id": todo_id, "title": title, "status": status},
        )
        if affected == 0:
            raise _not_found(todo_id)
        return {"id": todo_id, "title": title, "status": status}

    def update_status(self, todo_id: int, status: str) -> None:
        self._update_field(todo_id, _COLS.status, status)

    def update_title(self, todo_id: int, title: str) -> None:
        self._update_field(todo_id, _COLS.title, title)

    def _update_field(self, todo_id: int, column: str, value: str) -> None:
        # column is always one of the _COLS names, never client input
        affected = self._db.execute(
            f"UPDATE {_COLS.table} SET {column} = :value WHERE {_COLS.id} = :id",
            {"id": todo_id, "value": value},
        )
        if affected == 0:
            raise _not_found(todo_id)

    def delete(self, todo_id: int) -> None:
        affected = self._db.execute(
            f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = :id", {"id": todo_id}
        )
        if affected == 0:
            raise _not_found(todo_id)
        logger.debug("Deleted todo %s", todo_id)
