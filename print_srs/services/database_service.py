"""
DatabaseService - SQLite storage facade

Pattern: Facade over the modular database package in services/database/
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from ..config import Config
from .database import (
    CascadeDeleter,
    DatabaseConnection,
    RecordStore,
    SchemaManager,
)
from .record_cache import RecordCache


logger = logging.getLogger(__name__)


class DatabaseService:
    """
    Storage facade for Print SRS.

    Wires the connection, schema, keyed record store, cascade deleter and the
    shared read-through cache.

    Usage:
        db = DatabaseService(Path('print_srs.db'))
        db.store.put('groups', group)
        db.cache.reload()
        db.cascade.delete_prints([print_id])
    """

    def __init__(self, db_path: Optional[Path] = None):
        """
        Initialize database service.

        Args:
            db_path: Path to database file (defaults to Config.get_database_path())
        """
        self.db_path = db_path or Config.get_database_path()

        self._connection = DatabaseConnection(self.db_path)

        self._schema = SchemaManager(self._connection)
        self._schema.init_database()

        self.store = RecordStore(self._connection)
        self.cascade = CascadeDeleter(self._connection, self.store)
        self.cache = RecordCache(self.store)
        self.cache.reload()

        logger.info(f"Database ready at {self.db_path} (schema v{self._schema.get_version()})")

    @contextmanager
    def transaction(self):
        """Open one atomic store transaction."""
        with self.store.transaction() as tx:
            yield tx

    def close(self):
        """Close database connection for current thread."""
        self._connection.close()


# Singleton instance (lazy initialization)
_database_service_instance: Optional[DatabaseService] = None


def get_database_service() -> DatabaseService:
    """
    Get global DatabaseService singleton instance.

    Returns:
        Global DatabaseService instance
    """
    global _database_service_instance
    if _database_service_instance is None:
        _database_service_instance = DatabaseService()
    return _database_service_instance


__all__ = ['DatabaseService', 'get_database_service']
