"""
models/database_settings.py
---------------------------
Connection settings for the database layer.
"""

from dataclasses import dataclass, field

import config


@dataclass
class DatabaseSettings:
    """
    Everything needed to open a database session.

    Attributes:
        host: Database server hostname.
        port: Database server port.
        name: Database name.
        user: Login role.
        password: Login password (never shown in repr).
        charset: Session character set, applied on connect.
        log_params: Whether bound parameter values appear in query logs.
    """
    host: str
    name: str
    user: str
    password: str = field(default="", repr=False)
    port: int = 5432
    charset: str = "UTF8"
    log_params: bool = False

    @classmethod
    def from_config(cls) -> "DatabaseSettings":
        """Build settings from the environment-backed config module."""
        return cls(
            host=config.DB_HOST,
            port=config.DB_PORT,
            name=config.DB_NAME,
            user=config.DB_USER,
            password=config.DB_PASS,
            charset=config.DB_CHARSET,
            log_params=config.LOG_QUERY_PARAMS,
        )

    def connect_kwargs(self) -> dict:
        """Keyword arguments for ``psycopg2.connect``."""
        return {
            "host": self.host,
            "port": self.port,
            "dbname": self.name,
            "user": self.user,
            "password": self.password,
            "client_encoding": self.charset,
        }
