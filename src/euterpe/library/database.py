"""Database connection manager for the SQLite catalog."""

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Optional, Sequence

logger = logging.getLogger(__name__)

MEMORY_DATABASE = ":memory:"


def _casefold(value: Optional[str]) -> Optional[str]:
    return value.casefold() if value is not None else None


class DatabaseConnection:
    """
    Manages the catalog's SQLite connection.

    Features:
    - Single connection shared by all threads of an engine instance
    - One re-entrant lock serializing every statement and transaction, so
      concurrent writers never interleave inside a transaction
    - Foreign key enforcement, WAL mode for on-disk databases
    - ``casefold(text)`` SQL function for Unicode case-insensitive matching
    """

    def __init__(self, db_path: Path | str):
        """
        Initialize database connection manager.

        Args:
            db_path: Path to SQLite database file, or ``":memory:"``
        """
        self.db_path = db_path if str(db_path) == MEMORY_DATABASE else Path(db_path)
        self._connection: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()

    @property
    def is_memory(self) -> bool:
        return str(self.db_path) == MEMORY_DATABASE

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def connect(self) -> sqlite3.Connection:
        """
        Establish database connection with proper configuration.

        Returns:
            SQLite connection object

        Raises:
            sqlite3.Error: If connection fails
        """
        with self._lock:
            if self._connection is not None:
                return self._connection

            if not self.is_memory:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)

            logger.info(f"Connecting to database: {self.db_path}")
            # isolation_level=None: transactions are opened explicitly in transaction()
            self._connection = sqlite3.connect(
                str(self.db_path),
                check_same_thread=False,
                timeout=5.0,
                isolation_level=None,
            )
            self._connection.row_factory = sqlite3.Row
            self._connection.create_function("casefold", 1, _casefold, deterministic=True)

            self._apply_pragmas()

            logger.info("Database connection established")
            return self._connection

    def _apply_pragmas(self):
        """Apply SQLite PRAGMAs for integrity and concurrency."""
        cursor = self._connection.cursor()

        if not self.is_memory:
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            logger.debug("Set journal_mode=WAL, synchronous=NORMAL")

        cursor.execute("PRAGMA busy_timeout=5000")
        cursor.execute("PRAGMA temp_store=MEMORY")

        # Every track must reference an existing album and artist
        cursor.execute("PRAGMA foreign_keys=ON")
        logger.debug("Set foreign_keys=ON")

        cursor.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Cursor]:
        """
        Context manager for explicit transactions.

        Holds the connection lock for the whole transaction.

        Usage:
            with db.transaction() as cursor:
                cursor.execute(...)
                cursor.execute(...)
            # Commits on success, rolls back on exception
        """
        with self._lock:
            connection = self.connect()
            cursor = connection.cursor()
            try:
                cursor.execute("BEGIN IMMEDIATE")
                yield cursor
                connection.commit()
            except BaseException:
                connection.rollback()
                raise
            finally:
                cursor.close()

    def query(self, sql: str, parameters: Sequence[Any] = ()) -> List[sqlite3.Row]:
        """
        Run a read statement and return all rows.

        Rows are fetched while the lock is held, so the result is consistent
        with respect to concurrent transactions.
        """
        with self._lock:
            cursor = self.connect().execute(sql, parameters)
            try:
                return cursor.fetchall()
            finally:
                cursor.close()

    def query_one(self, sql: str, parameters: Sequence[Any] = ()) -> Optional[sqlite3.Row]:
        rows = self.query(sql, parameters)
        return rows[0] if rows else None

    def executescript(self, sql: str) -> None:
        """Execute a multi-statement script (migrations)."""
        with self._lock:
            self.connect().executescript(sql)

    def close(self):
        """Close database connection."""
        with self._lock:
            if self._connection is None:
                return

            if not self.is_memory:
                try:
                    self._connection.execute("PRAGMA wal_checkpoint(TRUNCATE)").close()
                    logger.debug("WAL checkpoint completed")
                except sqlite3.Error as e:
                    logger.warning(f"Failed to checkpoint WAL: {e}")

            self._connection.close()
            self._connection = None
            logger.info("Database connection closed")

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
