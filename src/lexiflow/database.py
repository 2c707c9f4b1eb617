import os
import sqlite3
from contextlib import contextmanager
from typing import Iterator, Optional

from .config import settings


def db_path() -> str:
    return os.path.join(settings.DB_DIR, settings.DB_FILE)


@contextmanager
def get_db_connection(path: Optional[str] = None) -> Iterator[sqlite3.Connection]:
    """Opens the log database, committing on success."""
    conn = sqlite3.connect(path or db_path())
    conn.row_factory = sqlite3.Row
    try:
        with conn:
            yield conn
    finally:
        conn.close()


def init_db(path: Optional[str] = None) -> None:
    """Creates the database directory and the logs table."""
    path = path or db_path()
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with get_db_connection(path) as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp DATETIME DEFAULT CURRENT_TIMESTAMP,
                logger TEXT,
                level TEXT,
                message TEXT
            );
            """
        )
