"""
Database Connection - SQLite connection management

Provides one connection per thread and a re-entrant transaction scope so
that multi-table writes (rating, cascading deletes) commit as a single unit.
"""

import sqlite3
import threading
import logging
from pathlib import Path
from contextlib import contextmanager


logger = logging.getLogger(__name__)


class DatabaseConnection:
    """
    Thread-local SQLite connection with a write lock.

    Provides:
    - Thread-local connections
    - Re-entrant transactions: only the outermost scope commits or rolls back
    - WAL journal for file databases
    - Row factory for name-based column access
    """

    def __init__(self, db_path: Path):
        """
        Initialize connection manager.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        self._local = threading.local()
        self._write_lock = threading.RLock()

    def get_connection(self) -> sqlite3.Connection:
        """
        Get thread-local database connection.

        Returns:
            SQLite connection for current thread
        """
        if getattr(self._local, 'connection', None) is None:
            conn = sqlite3.connect(
                str(self.db_path),
                check_same_thread=False,
                timeout=30.0
            )
            conn.execute("PRAGMA journal_mode = WAL")
            conn.row_factory = sqlite3.Row

            self._local.connection = conn
            self._local.depth = 0

        return self._local.connection

    @contextmanager
    def transaction(self):
        """
        Context manager for a write transaction.

        Usage:
            with connection.transaction() as conn:
                conn.execute(...)

        Commits when the outermost scope exits cleanly, rolls back and
        re-raises on exception. Nested scopes join the outer transaction.
        """
        conn = self.get_connection()
        with self._write_lock:
            self._local.depth += 1
            outermost = self._local.depth == 1
            try:
                yield conn
                if outermost:
                    conn.commit()
            except Exception:
                if outermost:
                    conn.rollback()
                    logger.warning("Transaction rolled back", exc_info=True)
                raise
            finally:
                self._local.depth -= 1

    @contextmanager
    def read_only(self):
        """
        Context manager for read-only operations (no write lock needed).

        Usage:
            with connection.read_only() as conn:
                conn.execute("SELECT ...")
        """
        yield self.get_connection()

    def close(self):
        """Close database connection for current thread."""
        conn = getattr(self._local, 'connection', None)
        if conn is not None:
            try:
                conn.close()
            except sqlite3.Error as e:
                logger.warning(f"Error closing database connection: {e}")
            finally:
                self._local.connection = None


__all__ = ['DatabaseConnection']
