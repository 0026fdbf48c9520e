"""
Cascade Deleter - Transactional deletes over the ownership graph

Print -> pages, groups, masks
Group -> masks, srs, skips, reviews
"""

import logging
from typing import Dict, Iterable, List, Tuple

from .connection import DatabaseConnection
from .store import RecordStore, StoreTransaction


logger = logging.getLogger(__name__)


# owner kind -> [(dependent kind, column referencing the owner key)]
CASCADE_GRAPH: Dict[str, List[Tuple[str, str]]] = {
    'prints': [
        ('pages', 'print_id'),
        ('groups', 'print_id'),
        ('masks', 'print_id'),
    ],
    'groups': [
        ('masks', 'group_id'),
        ('srs', 'group_id'),
        ('skips', 'group_id'),
        ('reviews', 'group_id'),
    ],
}


class CascadeDeleter:
    """
    Deletes owners and everything they own in one transaction.

    Groups owned by a deleted print cascade further into their own
    dependents before the groups themselves are removed.
    """

    def __init__(self, connection: DatabaseConnection, store: RecordStore):
        """
        Initialize cascade deleter.

        Args:
            connection: Database connection manager
            store: Record store sharing the connection
        """
        self._conn = connection
        self._store = store

    def delete_prints(self, print_ids: Iterable[str]) -> Dict[str, int]:
        """
        Delete prints with their pages, groups, masks and group-owned records

        Args:
            print_ids: Prints to delete

        Returns:
            Dict of kind -> number of rows removed
        """
        print_ids = list(print_ids)
        counts: Dict[str, int] = {}
        if not print_ids:
            return counts

        with self._store.transaction() as tx:
            group_ids = self._child_keys('groups', 'print_id', print_ids)
            self._delete_group_dependents(tx, group_ids, counts)
            for kind, column in CASCADE_GRAPH['prints']:
                counts[kind] = counts.get(kind, 0) + tx.delete_where(kind, column, print_ids)
            counts['prints'] = tx.delete_where('prints', 'id', print_ids)

        logger.info(f"Deleted prints {print_ids}: {counts}")
        return counts

    def delete_groups(self, group_ids: Iterable[str]) -> Dict[str, int]:
        """
        Delete groups with their masks, SRS state, skips and reviews

        Args:
            group_ids: Groups to delete

        Returns:
            Dict of kind -> number of rows removed
        """
        group_ids = list(group_ids)
        counts: Dict[str, int] = {}
        if not group_ids:
            return counts

        with self._store.transaction() as tx:
            self._delete_group_dependents(tx, group_ids, counts)
            counts['groups'] = tx.delete_where('groups', 'id', group_ids)

        logger.info(f"Deleted groups {group_ids}: {counts}")
        return counts

    def _delete_group_dependents(self, tx: StoreTransaction, group_ids: List[str], counts: Dict[str, int]):
        for kind, column in CASCADE_GRAPH['groups']:
            counts[kind] = counts.get(kind, 0) + tx.delete_where(kind, column, group_ids)

    def _child_keys(self, kind: str, column: str, owner_ids: List[str]) -> List[str]:
        conn = self._conn.get_connection()
        placeholders = ', '.join('?' for _ in owner_ids)
        rows = conn.execute(
            f'SELECT id FROM {kind} WHERE {column} IN ({placeholders})',
            tuple(owner_ids)
        ).fetchall()
        return [row[0] for row in rows]


__all__ = ['CascadeDeleter', 'CASCADE_GRAPH']
