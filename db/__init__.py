"""
db/ - Database Layer
====================
Owns the process-wide PostgreSQL connection, the query helpers built on it,
and schema initialization. This layer is the lowest in the architecture and
depends only on config and the logger.
"""

from db.connection import Database
from db.errors import DatabaseConnectionError, DatabaseError, QueryError

__all__ = ["Database", "DatabaseError", "DatabaseConnectionError", "QueryError"]
