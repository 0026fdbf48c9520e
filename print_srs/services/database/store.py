"""
Record Store - Generic keyed store over the per-kind tables

Every kind supports get_all / get / put / delete. Writes made through a
StoreTransaction share one SQLite transaction.
"""

import logging
import sqlite3
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, List, Optional

from .connection import DatabaseConnection
from .helpers import RECORD_KINDS, column_names, key_field, record_to_row, row_to_record


logger = logging.getLogger(__name__)


def _check_kind(kind: str):
    if kind not in RECORD_KINDS:
        raise KeyError(f"Unknown record kind: {kind}")


class StoreTransaction:
    """
    Batch of writes bound to one open transaction.

    Obtained from RecordStore.transaction(); not meant to outlive it.
    """

    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn

    def put(self, kind: str, record: Any):
        """
        Insert or update a record.

        Uses an upsert rather than INSERT OR REPLACE so an updated row keeps
        its rowid, and therefore its position in get_all() order.
        """
        _check_kind(kind)
        row = record_to_row(record)
        columns = column_names(kind)
        key = key_field(kind)
        placeholders = ', '.join('?' for _ in columns)
        updates = ', '.join(f'{c} = excluded.{c}' for c in columns if c != key)
        self._conn.execute(
            f'INSERT INTO {kind} ({", ".join(columns)}) VALUES ({placeholders}) '
            f'ON CONFLICT({key}) DO UPDATE SET {updates}',
            tuple(row[c] for c in columns)
        )

    def delete(self, kind: str, key: str) -> bool:
        """Delete a record by key. Returns True if a row was removed."""
        _check_kind(kind)
        cursor = self._conn.execute(f'DELETE FROM {kind} WHERE {key_field(kind)} = ?', (key,))
        return cursor.rowcount > 0

    def delete_where(self, kind: str, column: str, values: Iterable[str]) -> int:
        """Delete every record whose column is in values. Returns the row count."""
        _check_kind(kind)
        if column not in column_names(kind):
            raise KeyError(f"Unknown column {column} for {kind}")
        values = list(values)
        if not values:
            return 0
        placeholders = ', '.join('?' for _ in values)
        cursor = self._conn.execute(
            f'DELETE FROM {kind} WHERE {column} IN ({placeholders})',
            tuple(values)
        )
        return cursor.rowcount


class RecordStore:
    """
    Keyed store for all record kinds.

    Kinds: prints, pages, groups, masks, srs, reviews, skips.

    Usage:
        store = RecordStore(connection)
        store.put('groups', group)
        groups = store.get_all('groups')
        with store.transaction() as tx:
            tx.put('srs', state)
            tx.delete('skips', group_id)
    """

    def __init__(self, connection: DatabaseConnection):
        """
        Initialize record store.

        Args:
            connection: Database connection manager
        """
        self._conn = connection

    @contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        """Open one atomic write scope; commits on clean exit."""
        with self._conn.transaction() as conn:
            yield StoreTransaction(conn)

    def get_all(self, kind: str) -> List[Any]:
        """
        Get every record of a kind in insertion order.

        Args:
            kind: Record kind

        Returns:
            List of dataclass instances
        """
        _check_kind(kind)
        with self._conn.read_only() as conn:
            rows = conn.execute(f'SELECT * FROM {kind} ORDER BY rowid ASC').fetchall()
        return [row_to_record(kind, row) for row in rows]

    def get(self, kind: str, key: str) -> Optional[Any]:
        """Get one record by key, or None."""
        _check_kind(kind)
        with self._conn.read_only() as conn:
            row = conn.execute(
                f'SELECT * FROM {kind} WHERE {key_field(kind)} = ?', (key,)
            ).fetchone()
        return row_to_record(kind, row)

    def put(self, kind: str, record: Any):
        """Insert or replace one record in its own transaction."""
        with self.transaction() as tx:
            tx.put(kind, record)

    def delete(self, kind: str, key: str) -> bool:
        """Delete one record by key in its own transaction."""
        with self.transaction() as tx:
            return tx.delete(kind, key)

    def count(self, kind: str) -> int:
        """Number of records of a kind."""
        _check_kind(kind)
        with self._conn.read_only() as conn:
            return conn.execute(f'SELECT COUNT(*) FROM {kind}').fetchone()[0]


__all__ = ['RecordStore', 'StoreTransaction']
