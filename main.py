"""
main.py
-------
Startup routine for the KishansKraft backend data layer.

Responsibilities:
    - Open the process-wide database connection.
    - Create the store schema if needed.
    - Report row counts of the core tables.
"""

from config import APP_NAME, APP_VERSION
from db.connection import Database
from db.errors import DatabaseError
from db.init_db import CORE_TABLES, create_tables
from utils.logger import get_logger

logger = get_logger(__name__)


def report_table_counts(db: Database) -> dict[str, int]:
    """Log and return the row count of every core table."""
    counts = {table: db.get_row_count(table) for table in CORE_TABLES}
    logger.info("Core table row counts", extra={"context": counts})
    return counts


def main() -> int:
    """Initialize the database and return a process exit code."""
    logger.info(f"Starting {APP_NAME} {APP_VERSION}...")
    db = None
    try:
        db = Database.get_instance()
        create_tables(db)
        report_table_counts(db)
    except DatabaseError as e:
        logger.critical("Application initialization failed", extra={"context": {
            "error": e.message,
            "code": e.code,
        }})
        return 1
    finally:
        if db is not None:
            db.close()

    logger.info(f"{APP_NAME} database is ready.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
