"""
Database Helpers - Record kinds and row (de)serialization

Maps each record kind (table) to its dataclass and key field, and converts
between dataclass instances and SQLite column values.
"""

from dataclasses import asdict, fields
from datetime import datetime
from typing import Any, Dict, Optional, Tuple, Type

from ...models.records import (
    Group,
    Mask,
    Page,
    Print,
    Rating,
    ReviewLogEntry,
    SkipRecord,
    SRSState,
)


# kind -> (record class, key field)
RECORD_KINDS: Dict[str, Tuple[Type, str]] = {
    'prints': (Print, 'id'),
    'pages': (Page, 'id'),
    'groups': (Group, 'id'),
    'masks': (Mask, 'id'),
    'srs': (SRSState, 'group_id'),
    'reviews': (ReviewLogEntry, 'id'),
    'skips': (SkipRecord, 'group_id'),
}

DATETIME_FIELDS = frozenset({
    'created_at',
    'updated_at',
    'last_reviewed_at',
    'next_due_at',
    'skip_until',
    'reviewed_at',
})
BOOL_FIELDS = frozenset({'is_active'})
RATING_FIELDS = frozenset({'rating'})


def key_field(kind: str) -> str:
    """Primary key field name of a kind."""
    return RECORD_KINDS[kind][1]


def column_names(kind: str) -> Tuple[str, ...]:
    """Column names of a kind, in dataclass field order."""
    cls, _ = RECORD_KINDS[kind]
    return tuple(f.name for f in fields(cls))


def _to_column(name: str, value: Any) -> Any:
    if value is None:
        return None
    if name in DATETIME_FIELDS:
        return value.isoformat()
    if name in BOOL_FIELDS:
        return 1 if value else 0
    if name in RATING_FIELDS:
        return Rating(value).value
    return value


def _from_column(name: str, value: Any) -> Any:
    if value is None:
        return None
    if name in DATETIME_FIELDS:
        return datetime.fromisoformat(value)
    if name in BOOL_FIELDS:
        return bool(value)
    if name in RATING_FIELDS:
        return Rating(value)
    if isinstance(value, memoryview):
        return bytes(value)
    return value


def record_to_row(record: Any) -> Dict[str, Any]:
    """
    Serialize a record into column values.

    Args:
        record: Any stored dataclass instance

    Returns:
        Dict of column name -> SQLite value
    """
    return {name: _to_column(name, value) for name, value in asdict(record).items()}


def row_to_record(kind: str, row) -> Optional[Any]:
    """
    Deserialize a SQLite row into a record of the given kind.

    Args:
        kind: Record kind (table name)
        row: sqlite3.Row or None

    Returns:
        Dataclass instance or None
    """
    if row is None:
        return None
    cls, _ = RECORD_KINDS[kind]
    data = dict(row)
    values = {f.name: _from_column(f.name, data.get(f.name)) for f in fields(cls) if f.name in data}
    return cls(**values)


__all__ = [
    'RECORD_KINDS',
    'key_field',
    'column_names',
    'record_to_row',
    'row_to_record',
]
