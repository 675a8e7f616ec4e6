"""
In-memory stand-ins for psycopg2 connections and cursors.

A FakeConnection answers every statement through a ``responder`` callable
``(sql, params) -> (rows, rowcount)``; ``rows`` is None for statements that
return no result set.
"""

import psycopg2
from psycopg2 import extensions

from models.database_settings import DatabaseSettings


def make_settings(**overrides) -> DatabaseSettings:
    values = {
        "host": "db.test",
        "port": 5433,
        "name": "shop_test",
        "user": "shop",
        "password": "secret",
        "charset": "UTF8",
    }
    values.update(overrides)
    return DatabaseSettings(**values)


def no_result(sql, params):
    return None, 0


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.rowcount = -1
        self.description = None
        self._rows = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, sql, params=None):
        if self.conn.closed:
            raise psycopg2.InterfaceError("connection already closed")
        if sql == "SELECT 1":
            if self.conn.ping_error is not None:
                raise self.conn.ping_error
            self.conn.executed.append((sql, params))
            self.description, self._rows, self.rowcount = [("?column?",)], [{"?column?": 1}], 1
            return
        if params is not None:
            # psycopg2 merges arguments client-side with %-formatting
            sql % tuple(repr(p) for p in params)
        self.conn.executed.append((sql, params))
        rows, rowcount = self.conn.responder(sql, params)
        if rows is None:
            self.description = None
            self._rows = []
        else:
            self.description = [("column",)]
            self._rows = list(rows)
        self.rowcount = rowcount

    def fetchone(self):
        if self.description is None:
            raise psycopg2.ProgrammingError("no results to fetch")
        return self._rows.pop(0) if self._rows else None

    def fetchall(self):
        if self.description is None:
            raise psycopg2.ProgrammingError("no results to fetch")
        rows, self._rows = self._rows, []
        return rows

    def close(self):
        pass


class FakeConnection:
    def __init__(self, responder=no_result):
        self.responder = responder
        self.executed = []
        self.autocommit = False
        self.closed = 0
        self.ping_error = None
        self.status = extensions.TRANSACTION_STATUS_IDLE
        self.commits = 0
        self.rollbacks = 0

    def cursor(self):
        if self.closed:
            raise psycopg2.InterfaceError("connection already closed")
        return FakeCursor(self)

    def get_transaction_status(self):
        return self.status

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        self.closed = 1

    @property
    def broken(self):
        return self.ping_error is not None

    @broken.setter
    def broken(self, value):
        self.ping_error = psycopg2.OperationalError("server closed the connection unexpectedly") if value else None

    def statements(self):
        """Executed SQL, liveness checks excluded."""
        return [sql for sql, _ in self.executed if sql != "SELECT 1"]


class ProductStoreConnection(FakeConnection):
    """Fake session over a one-table store that honours autocommit/commit/rollback."""

    def __init__(self):
        super().__init__(self._respond)
        self.committed = []
        self.pending = []

    def _respond(self, sql, params):
        if sql.startswith("INSERT INTO products"):
            row = {"id": len(self.committed) + len(self.pending) + 1, "name": params[0]}
            (self.committed if self.autocommit else self.pending).append(row)
            return [{"id": row["id"]}], 1
        if sql.startswith("SELECT id, name FROM products WHERE id = %s"):
            return [row for row in self.committed + self.pending if row["id"] == params[0]], 1
        if sql.startswith('SELECT COUNT(*) AS count FROM "products"'):
            return [{"count": len(self.committed) + len(self.pending)}], 1
        return None, 0

    def commit(self):
        super().commit()
        self.committed.extend(self.pending)
        self.pending = []

    def rollback(self):
        super().rollback()
        self.pending = []
