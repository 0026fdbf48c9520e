"""
Database Schema - Schema initialization and version tracking

One table per record kind. Cascades are not delegated to SQLite foreign
keys; they are executed explicitly by CascadeDeleter so that the dependency
graph lives in one place.
"""

import sqlite3
from typing import Dict, List

from .connection import DatabaseConnection


# Current schema version
SCHEMA_VERSION = 1

# Feature descriptions for each version
VERSION_FEATURES: Dict[int, List[str]] = {
    1: ["Prints, pages, question groups, masks", "SRS state, skips, review log"],
}


class SchemaManager:
    """
    Database schema management.

    Handles:
    - Initial schema creation
    - Version tracking
    """

    def __init__(self, connection: DatabaseConnection):
        """
        Initialize schema manager.

        Args:
            connection: Database connection manager
        """
        self._conn = connection

    def init_database(self):
        """Initialize database schema."""
        with self._conn.transaction() as conn:
            cursor = conn.cursor()

            cursor.execute('''
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY,
                    applied_date TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            ''')

            cursor.execute('SELECT MAX(version) FROM schema_version')
            result = cursor.fetchone()
            current_version = result[0] if result[0] is not None else 0

            if current_version == 0:
                self._create_schema(cursor)
                cursor.execute(
                    'INSERT OR REPLACE INTO schema_version (version) VALUES (?)',
                    (SCHEMA_VERSION,)
                )

    def get_version(self) -> int:
        """Get the applied schema version (0 if uninitialized)."""
        conn = self._conn.get_connection()
        try:
            row = conn.execute('SELECT MAX(version) FROM schema_version').fetchone()
        except sqlite3.OperationalError:
            return 0
        return row[0] or 0

    def _create_schema(self, cursor: sqlite3.Cursor):
        """Create database schema."""

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS prints (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                subject TEXT,
                subject_other TEXT,
                created_at TEXT
            )
        ''')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS pages (
                id TEXT PRIMARY KEY,
                print_id TEXT NOT NULL,
                width INTEGER NOT NULL,
                height INTEGER NOT NULL,
                image BLOB,
                page_index INTEGER DEFAULT 0,
                created_at TEXT
            )
        ''')
        cursor.execute('CREATE INDEX IF NOT EXISTS idx_pages_print ON pages(print_id)')

        # Question groups
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS groups (
                id TEXT PRIMARY KEY,
                print_id TEXT NOT NULL,
                label TEXT,
                order_index INTEGER NOT NULL,
                is_active INTEGER DEFAULT 1,
                page_index INTEGER DEFAULT 0,
                created_at TEXT
            )
        ''')
        cursor.execute('CREATE INDEX IF NOT EXISTS idx_groups_print ON groups(print_id)')

        # Answer masks (normalized geometry)
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS masks (
                id TEXT PRIMARY KEY,
                group_id TEXT NOT NULL,
                print_id TEXT NOT NULL,
                x REAL NOT NULL,
                y REAL NOT NULL,
                w REAL NOT NULL,
                h REAL NOT NULL,
                page_index INTEGER DEFAULT 0,
                created_at TEXT
            )
        ''')
        cursor.execute('CREATE INDEX IF NOT EXISTS idx_masks_group ON masks(group_id)')
        cursor.execute('CREATE INDEX IF NOT EXISTS idx_masks_print ON masks(print_id)')

        # Scheduling state, one row per group
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS srs (
                group_id TEXT PRIMARY KEY,
                difficulty REAL NOT NULL,
                stability REAL NOT NULL,
                last_reviewed_at TEXT,
                next_due_at TEXT,
                review_count INTEGER DEFAULT 0,
                lapse_count INTEGER DEFAULT 0,
                updated_at TEXT
            )
        ''')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS reviews (
                id TEXT PRIMARY KEY,
                group_id TEXT NOT NULL,
                reviewed_at TEXT NOT NULL,
                rating TEXT NOT NULL
            )
        ''')
        cursor.execute('CREATE INDEX IF NOT EXISTS idx_reviews_group ON reviews(group_id)')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS skips (
                group_id TEXT PRIMARY KEY,
                skip_until TEXT NOT NULL
            )
        ''')


__all__ = ['SchemaManager', 'SCHEMA_VERSION', 'VERSION_FEATURES']
