"""
db/connection.py
----------------
Manages the single PostgreSQL connection of the process.

The `Database` object owns one psycopg2 connection, opened lazily (or at
construction) and re-opened once when a liveness probe finds it dead.
On top of it sit the query helpers used by the rest of the backend:
execute / insert / update / delete / fetch_one / fetch_all, transaction
control, and two best-effort schema helpers (table_exists, get_row_count).

Placeholders follow psycopg2 (``%s``); values are always passed to the
driver as bound parameters, never formatted into the SQL by this module.
"""

import threading
from contextlib import contextmanager
from typing import Any, Iterator, Optional, Sequence

import psycopg2
from psycopg2 import extensions, extras

from db.errors import DatabaseConnectionError, QueryError
from models.database_settings import DatabaseSettings
from utils.logger import get_logger

logger = get_logger(__name__)

_PROBE_SQL = "SELECT 1"
_TABLE_EXISTS_SQL = (
    "SELECT table_name FROM information_schema.tables "
    "WHERE table_schema = current_schema() AND table_name LIKE %s"
)


def _driver_message(error: psycopg2.Error) -> str:
    return str(error).strip()


def _quote_ident(name: str) -> str:
    """Quote a table name as a PostgreSQL identifier."""
    return '"' + name.replace('"', '""') + '"'


class Database:
    """
    Process-wide database connection manager.

    Use `Database.get_instance()` everywhere in request code. The startup
    routine and tests may build their own instance with explicit settings.
    """

    _instance: Optional["Database"] = None
    _instance_lock = threading.Lock()

    def __init__(self, settings: Optional[DatabaseSettings] = None, connect: bool = True):
        """
        Args:
            settings: Connection settings; read from config when omitted.
            connect: Open the connection right away instead of on first use.
        """
        self.settings = settings or DatabaseSettings.from_config()
        self._connection = None
        self._in_transaction = False
        self._lock = threading.RLock()
        if connect:
            self.connect()

    @classmethod
    def get_instance(cls) -> "Database":
        """Return the process-wide instance, creating and connecting it on first call."""
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    # ── Connection lifecycle ──────────────────────────────

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    def connect(self):
        """
        Open a new connection, replacing the current handle.

        Returns:
            The new psycopg2 connection.

        Raises:
            DatabaseConnectionError: If the server is unreachable or rejects the login.
        """
        with self._lock:
            logger.info("Attempting database connection", extra={"context": {
                "host": self.settings.host,
                "database": self.settings.name,
                "user": self.settings.user,
            }})
            self._connection = None
            self._in_transaction = False
            try:
                conn = psycopg2.connect(
                    cursor_factory=extras.RealDictCursor,
                    **self.settings.connect_kwargs(),
                )
                conn.autocommit = True
            except psycopg2.Error as e:
                message = _driver_message(e)
                logger.error("Database connection failed", extra={"context": {
                    "error": message,
                    "code": e.pgcode,
                }})
                raise DatabaseConnectionError(
                    f"Database connection failed: {message}", code=e.pgcode
                ) from e

            self._connection = conn
            logger.info("Database connection established successfully")
            return conn

    def get_connection(self):
        """
        Return a live connection.

        Connects when there is no handle yet. Otherwise probes the handle
        and reconnects once if the probe fails.

        Raises:
            DatabaseConnectionError: If (re)connecting fails.
        """
        with self._lock:
            if self._connection is None:
                return self.connect()

            # An aborted transaction rejects every statement but the session is alive.
            if self._connection.get_transaction_status() == extensions.TRANSACTION_STATUS_INERROR:
                return self._connection

            try:
                with self._connection.cursor() as cur:
                    cur.execute(_PROBE_SQL)
            except psycopg2.Error as e:
                logger.warning("Database connection lost, reconnecting", extra={"context": {
                    "error": _driver_message(e),
                }})
                return self.connect()
            return self._connection

    def close(self) -> None:
        """Close the current connection, if any."""
        with self._lock:
            if self._connection is None:
                return
            self._connection.close()
            self._connection = None
            self._in_transaction = False
            logger.info("Database connection closed.")

    # ── Statement helpers ─────────────────────────────────

    def _loggable_params(self, params: list) -> list:
        if self.settings.log_params:
            return params
        return ["***"] * len(params)

    def execute(self, sql: str, params: Optional[Sequence[Any]] = None):
        """
        Prepare and run a statement with positional parameters.

        Args:
            sql: SQL text with ``%s`` placeholders.
            params: Values bound to the placeholders, in order.

        Returns:
            The executed cursor (rowcount, fetch*).

        Raises:
            DatabaseConnectionError: If no connection can be obtained.
            QueryError: If the driver rejects the statement.
        """
        params = list(params) if params else []
        logger.debug("Executing SQL query", extra={"context": {
            "sql": sql,
            "params": self._loggable_params(params),
        }})

        with self._lock:
            conn = self.get_connection()
            try:
                cursor = conn.cursor()
                cursor.execute(sql, params or None)
            except (psycopg2.Error, TypeError, IndexError, ValueError) as e:
                raise self._query_error(e, sql, params) from e

        logger.debug("SQL query executed successfully", extra={"context": {
            "affected_rows": cursor.rowcount,
        }})
        return cursor

    def _query_error(self, error: Exception, sql: str, params: list) -> QueryError:
        message = str(error).strip()
        code = getattr(error, "pgcode", None)
        logger.error("SQL execution error", extra={"context": {
            "sql": sql,
            "params": self._loggable_params(params),
            "error": message,
            "code": code,
        }})
        return QueryError(
            f"Database query failed: {message}", sql=sql, params=params, code=code
        )

    def _fetch(self, sql: str, params: Optional[Sequence[Any]], many: bool):
        with self._lock:
            cursor = self.execute(sql, params)
            try:
                return cursor.fetchall() if many else cursor.fetchone()
            except psycopg2.Error as e:
                raise self._query_error(e, sql, list(params or [])) from e

    def insert(self, sql: str, params: Optional[Sequence[Any]] = None) -> Any:
        """
        Run an INSERT and return the generated identifier.

        With a ``RETURNING`` clause the first returned column is used;
        otherwise the session's ``lastval()``.
        """
        with self._lock:
            cursor = self.execute(sql, params)
            if cursor.description:
                try:
                    row = cursor.fetchone()
                except psycopg2.Error as e:
                    raise self._query_error(e, sql, list(params or [])) from e
                last_id = next(iter(row.values())) if row else None
            else:
                last_id = self._fetch("SELECT lastval() AS id", None, many=False)["id"]

        logger.info("Record inserted successfully", extra={"context": {
            "last_insert_id": last_id,
            "sql": sql,
        }})
        return last_id

    def update(self, sql: str, params: Optional[Sequence[Any]] = None) -> int:
        """Run an UPDATE and return the number of affected rows."""
        affected = self.execute(sql, params).rowcount
        logger.info("Records updated successfully", extra={"context": {
            "affected_rows": affected,
            "sql": sql,
        }})
        return affected

    def delete(self, sql: str, params: Optional[Sequence[Any]] = None) -> int:
        """Run a DELETE and return the number of affected rows."""
        affected = self.execute(sql, params).rowcount
        logger.info("Records deleted successfully", extra={"context": {
            "affected_rows": affected,
            "sql": sql,
        }})
        return affected

    def fetch_one(self, sql: str, params: Optional[Sequence[Any]] = None) -> Optional[dict]:
        """
        Fetch the first row of a query.

        Returns:
            The row as a dict keyed by column name, or None if nothing matched.
        """
        row = self._fetch(sql, params, many=False)
        result = dict(row) if row is not None else None
        logger.debug("Fetched single row", extra={"context": {
            "found": result is not None,
            "sql": sql,
        }})
        return result

    def fetch_all(self, sql: str, params: Optional[Sequence[Any]] = None) -> list[dict]:
        """Fetch every row of a query as a list of dicts keyed by column name."""
        rows = [dict(r) for r in self._fetch(sql, params, many=True)]
        logger.debug("Fetched multiple rows", extra={"context": {
            "count": len(rows),
            "sql": sql,
        }})
        return rows

    # ── Transactions ──────────────────────────────────────

    def begin_transaction(self) -> bool:
        """Start a transaction. Nested transactions are not supported."""
        logger.info("Starting database transaction")
        with self._lock:
            if self._in_transaction:
                raise QueryError("There is already an active transaction")
            conn = self.get_connection()
            try:
                conn.autocommit = False
            except psycopg2.Error as e:
                raise self._query_error(e, "BEGIN", []) from e
            self._in_transaction = True
        return True

    def commit(self) -> bool:
        """Commit the active transaction."""
        logger.info("Committing database transaction")
        with self._lock:
            conn = self._active_transaction_connection()
            try:
                conn.commit()
            except psycopg2.Error as e:
                raise self._query_error(e, "COMMIT", []) from e
            finally:
                self._end_transaction(conn)
        return True

    def rollback(self) -> bool:
        """Roll back the active transaction."""
        logger.warning("Rolling back database transaction")
        with self._lock:
            conn = self._active_transaction_connection()
            try:
                conn.rollback()
            except psycopg2.Error as e:
                raise self._query_error(e, "ROLLBACK", []) from e
            finally:
                self._end_transaction(conn)
        return True

    def _active_transaction_connection(self):
        if not self._in_transaction or self._connection is None:
            raise QueryError("There is no active transaction")
        return self._connection

    def _end_transaction(self, conn) -> None:
        self._in_transaction = False
        if not conn.closed:
            conn.autocommit = True

    @contextmanager
    def transaction(self) -> Iterator["Database"]:
        """
        Run a block inside a transaction.

        Commits when the block finishes, rolls back and re-raises on error.
        """
        self.begin_transaction()
        try:
            yield self
        except BaseException:
            # A reconnect inside the block has already dropped the transaction.
            if self._in_transaction:
                self.rollback()
            raise
        self.commit()

    # ── Schema helpers (best effort) ──────────────────────

    def table_exists(self, table_name: str, safe: bool = True) -> bool:
        """
        Check whether a table (LIKE pattern) exists in the current schema.

        Args:
            table_name: Table name or LIKE pattern.
            safe: Return False instead of raising on any failure.
        """
        try:
            exists = self.fetch_one(_TABLE_EXISTS_SQL, [table_name]) is not None
        except Exception as e:
            logger.error("Error checking table existence", extra={"context": {
                "table": table_name,
                "error": str(e),
            }})
            if not safe:
                raise
            return False

        logger.debug("Table existence check", extra={"context": {
            "table": table_name,
            "exists": exists,
        }})
        return exists

    def get_row_count(
        self,
        table_name: str,
        where: str = "",
        params: Optional[Sequence[Any]] = None,
        safe: bool = True,
    ) -> int:
        """
        Count rows in a table.

        Args:
            table_name: Table to count.
            where: Optional WHERE clause, inserted verbatim. Must be trusted;
                only the values in ``params`` are bound.
            params: Values for the placeholders in ``where``.
            safe: Return 0 instead of raising on any failure.
        """
        try:
            sql = f"SELECT COUNT(*) AS count FROM {_quote_ident(table_name)}"
            if where:
                sql += f" WHERE {where}"
            row = self.fetch_one(sql, params)
            count = int(row["count"]) if row else 0
        except Exception as e:
            logger.error("Error getting row count", extra={"context": {
                "table": table_name,
                "error": str(e),
            }})
            if not safe:
                raise
            return 0

        logger.debug("Table row count retrieved", extra={"context": {
            "table": table_name,
            "count": count,
            "where": where,
        }})
        return count

    # ── Singleton guards ──────────────────────────────────

    def __copy__(self):
        raise TypeError("Cannot copy the Database singleton")

    def __deepcopy__(self, memo):
        raise TypeError("Cannot copy the Database singleton")

    def __reduce_ex__(self, protocol):
        raise TypeError("Cannot serialize the Database singleton")

    def __setstate__(self, state):
        raise TypeError("Cannot unserialize the Database singleton")
