from __future__ import annotations


class TodoApiError(Exception):
    """Base class for errors raised by the todo service."""


# PUBLIC_INTERFACE
class NotFoundError(TodoApiError):
    """No row matched or was affected by a statement addressed by id."""


# PUBLIC_INTERFACE
class DatabaseError(TodoApiError):
    """A database operation failed. Reported to clients as HTTP 500."""


class DatabaseConnectionError(DatabaseError):
    """The database is unreachable or the connection was lost."""


class QueryError(DatabaseError):
    """A statement was rejected or failed while executing."""


# PUBLIC_INTERFACE
class StartupError(TodoApiError):
    """
    A startup precondition failed (connect, ensure schema, bind listener).
    The process cannot serve traffic and exits.
    """
