"""
utils/logger.py
---------------
Centralized logging configuration.
All modules should use `get_logger(__name__)` to obtain a logger instance.

Structured context is passed through the standard ``extra`` mapping:

    logger.info("Record inserted", extra={"context": {"last_insert_id": 7}})

and rendered by the formatter as a trailing ``| Context: {...}`` JSON blob.
"""

import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from config import LOG_DIR, LOG_LEVEL, LOG_MAX_FILE_SIZE, LOG_MAX_FILES

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_LOG_FILE_NAME = "app.log"
_initialized = False


class ContextFormatter(logging.Formatter):
    """Formatter that appends the record's ``context`` mapping as JSON."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = getattr(record, "context", None)
        if context:
            line += " | Context: " + json.dumps(context, default=str, ensure_ascii=False)
        return line


def _init_logging() -> None:
    """Configure the root logger once."""
    global _initialized
    if _initialized:
        return
    formatter = ContextFormatter(_LOG_FORMAT, _DATE_FORMAT)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root = logging.getLogger()
    root.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    root.addHandler(handler)

    if LOG_DIR:
        os.makedirs(LOG_DIR, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(LOG_DIR, _LOG_FILE_NAME),
            maxBytes=LOG_MAX_FILE_SIZE,
            backupCount=LOG_MAX_FILES,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
    _initialized = True


def get_logger(name: str) -> logging.Logger:
    """
    Get a named logger instance.

    Args:
        name: Usually ``__name__`` of the calling module.

    Returns:
        A configured logging.Logger.
    """
    _init_logging()
    return logging.getLogger(name)
