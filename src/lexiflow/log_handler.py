import logging
from typing import Optional

from .database import get_db_connection


class SQLiteHandler(logging.Handler):
    """
    A logging handler that writes records to the SQLite logs table.
    """

    def __init__(self, path: Optional[str] = None, level: int = logging.NOTSET):
        super().__init__(level)
        self.path = path

    def emit(self, record):
        try:
            with get_db_connection(self.path) as conn:
                conn.execute(
                    "INSERT INTO logs (logger, level, message) VALUES (?, ?, ?)",
                    (record.name, record.levelname, self.format(record)),
                )
        except Exception:
            self.handleError(record)
