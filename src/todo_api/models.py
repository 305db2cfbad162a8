from __future__ import annotations

from typing import TypedDict


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    A Todo item as stored in the ``todos`` table.

    Fields:
    - id: Unique integer identifier, assigned by the database
    - title: Short title (1..200 chars, trimmed on input via schemas)
    - status: Free-text status such as "pending" or "done"
    """

    id: int
    title: str
    status: str
