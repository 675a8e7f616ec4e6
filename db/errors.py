"""
db/errors.py
------------
Exceptions raised by the database layer.
Each one keeps the driver's message and error code; the original
driver exception is chained as ``__cause__``.
"""

from typing import Any, Optional, Sequence


class DatabaseError(Exception):
    """Base class for all database layer failures."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class DatabaseConnectionError(DatabaseError):
    """The connection could not be established."""


class QueryError(DatabaseError):
    """A statement or transaction command failed."""

    def __init__(
        self,
        message: str,
        sql: Optional[str] = None,
        params: Optional[Sequence[Any]] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message, code)
        self.sql = sql
        self.params = list(params) if params is not None else []
