"""
db/init_db.py
-------------
Creates the store schema (tables) if they do not already exist.
Run this module directly to initialize a fresh database:
    python -m db.init_db
"""

from typing import Optional

from db.connection import Database
from db.errors import DatabaseError
from utils.logger import get_logger

logger = get_logger(__name__)

CORE_TABLES = ("users", "categories", "products", "cart_items", "orders", "order_items")

SCHEMA_STATEMENTS = (
    # Customers, identified by mobile number (OTP login)
    """
    CREATE TABLE IF NOT EXISTS users (
        id              SERIAL PRIMARY KEY,
        name            VARCHAR(100) NOT NULL,
        mobile          VARCHAR(15) UNIQUE NOT NULL,
        email           VARCHAR(150),
        password_hash   VARCHAR(255),
        address         TEXT,
        is_active       BOOLEAN DEFAULT TRUE,
        created_at      TIMESTAMPTZ DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS categories (
        id              SERIAL PRIMARY KEY,
        name            VARCHAR(100) NOT NULL,
        description     TEXT,
        is_active       BOOLEAN DEFAULT TRUE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS products (
        id              SERIAL PRIMARY KEY,
        category_id     INT REFERENCES categories(id) ON DELETE SET NULL,
        name            VARCHAR(200) NOT NULL,
        description     TEXT,
        price           NUMERIC(10,2) NOT NULL,
        stock_quantity  INT NOT NULL DEFAULT 0,
        image_url       VARCHAR(255),
        featured        BOOLEAN DEFAULT FALSE,
        is_active       BOOLEAN DEFAULT TRUE,
        created_at      TIMESTAMPTZ DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS cart_items (
        id              SERIAL PRIMARY KEY,
        user_id         INT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        product_id      INT NOT NULL REFERENCES products(id) ON DELETE CASCADE,
        quantity        INT NOT NULL CHECK (quantity > 0),
        added_at        TIMESTAMPTZ DEFAULT NOW(),
        UNIQUE(user_id, product_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS orders (
        id              SERIAL PRIMARY KEY,
        user_id         INT NOT NULL REFERENCES users(id),
        status          VARCHAR(20) NOT NULL DEFAULT 'pending'
                        CHECK (status IN ('pending', 'confirmed', 'shipped', 'delivered', 'cancelled')),
        payment_method  VARCHAR(20) NOT NULL DEFAULT 'cod',
        subtotal        NUMERIC(10,2) NOT NULL,
        shipping        NUMERIC(10,2) NOT NULL DEFAULT 0,
        total           NUMERIC(10,2) NOT NULL,
        shipping_address TEXT NOT NULL,
        created_at      TIMESTAMPTZ DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS order_items (
        id              SERIAL PRIMARY KEY,
        order_id        INT NOT NULL REFERENCES orders(id) ON DELETE CASCADE,
        product_id      INT NOT NULL REFERENCES products(id),
        quantity        INT NOT NULL CHECK (quantity > 0),
        unit_price      NUMERIC(10,2) NOT NULL
    )
    """,
    # Indexes for faster queries
    "CREATE INDEX IF NOT EXISTS idx_products_category ON products(category_id) WHERE is_active = TRUE",
    "CREATE INDEX IF NOT EXISTS idx_orders_user ON orders(user_id, created_at)",
)


def create_tables(db: Optional[Database] = None) -> list[str]:
    """
    Execute the schema statements in one transaction.
    Safe to call multiple times (uses IF NOT EXISTS).

    Args:
        db: Database to use; the process-wide instance by default.

    Returns:
        The core tables found after initialization.
    """
    db = db or Database.get_instance()
    db.begin_transaction()
    try:
        for statement in SCHEMA_STATEMENTS:
            db.execute(statement)
        db.commit()
    except DatabaseError as e:
        db.rollback()
        logger.error(f"Failed to initialize schema: {e}")
        raise

    present = [table for table in CORE_TABLES if db.table_exists(table)]
    missing = sorted(set(CORE_TABLES) - set(present))
    if missing:
        logger.warning("Schema initialized with missing tables", extra={"context": {"missing": missing}})
    else:
        logger.info("Database schema initialized successfully.")
    return present


if __name__ == "__main__":
    create_tables()
    print("✅ Database schema created successfully.")
