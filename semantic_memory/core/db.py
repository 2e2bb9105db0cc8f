"""
SQLite storage engine shared by the memory and biography stores.
One connection per process, opened by init() and released by close().
"""

import sqlite3
import threading
from contextlib import contextmanager
from typing import Any, Generator, List, Optional, Sequence

from .config import ensure_db_directory
from .errors import StorageError
from ..util.logging import logger

SCHEMA = '''
    CREATE TABLE IF NOT EXISTS memories (
        id TEXT PRIMARY KEY,
        text TEXT NOT NULL,
        embedding TEXT NOT NULL,
        metadata TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );

    CREATE TABLE IF NOT EXISTS user_bio (
        id INTEGER PRIMARY KEY CHECK (id = 1),
        nombre TEXT,
        ocupacion TEXT,
        ubicacion TEXT,
        tecnologias TEXT,
        herramientas TEXT,
        idiomas TEXT,
        timezone TEXT,
        mascotas TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );

    CREATE INDEX IF NOT EXISTS idx_created_at ON memories(created_at);
    CREATE INDEX IF NOT EXISTS idx_updated_at ON memories(updated_at);
'''

REQUIRED_TABLES = ("memories", "user_bio")


class Database:
    """Process-wide SQLite handle with serialized write transactions."""

    def __init__(self, path: str):
        self.path = path
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def init(self) -> "Database":
        """Open the connection and create tables if they don't exist."""
        if self._conn is not None:
            return self
        try:
            ensure_db_directory(self.path)
            conn = sqlite3.connect(self.path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.executescript(SCHEMA)
            conn.commit()
        except (sqlite3.Error, OSError) as e:
            raise StorageError(f"Cannot open database at {self.path}: {e}") from e
        self._conn = conn
        logger.info(f"Database opened at {self.path}")
        return self

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
                logger.info("Database closed")

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageError("Database is not initialized")
        return self._conn

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """Run a write transaction; commits on success, rolls back on error.

        Writers are serialized by a process-wide lock so check-then-write
        sequences stay atomic under concurrent callers.
        """
        with self._lock:
            conn = self._connection()
            try:
                with conn:
                    yield conn
            except sqlite3.Error as e:
                raise StorageError(f"Database write failed: {e}") from e

    def fetch_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[sqlite3.Row]:
        with self._lock:
            try:
                return self._connection().execute(sql, params).fetchone()
            except sqlite3.Error as e:
                raise StorageError(f"Database read failed: {e}") from e

    def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> List[sqlite3.Row]:
        with self._lock:
            try:
                return self._connection().execute(sql, params).fetchall()
            except sqlite3.Error as e:
                raise StorageError(f"Database read failed: {e}") from e

    def health_check(self) -> bool:
        """Check database health."""
        try:
            rows = self.fetch_all("SELECT name FROM sqlite_master WHERE type='table'")
        except StorageError:
            return False
        table_names = {row["name"] for row in rows}
        return all(table in table_names for table in REQUIRED_TABLES)

    def __enter__(self) -> "Database":
        return self.init()

    def __exit__(self, *exc_info) -> None:
        self.close()
