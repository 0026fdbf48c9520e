"""
Database Module - SQLite-backed record storage

This module provides:
- connection: Thread-local connection and re-entrant transactions
- schema: Table creation and version tracking
- helpers: Record kinds and row (de)serialization
- store: Generic keyed store (get_all / get / put / delete)
- cascade: Transactional deletes over the ownership graph
"""

from .connection import DatabaseConnection
from .schema import SchemaManager, SCHEMA_VERSION, VERSION_FEATURES
from .helpers import RECORD_KINDS, key_field, record_to_row, row_to_record
from .store import RecordStore, StoreTransaction
from .cascade import CascadeDeleter, CASCADE_GRAPH

__all__ = [
    # Connection
    'DatabaseConnection',
    # Schema
    'SchemaManager',
    'SCHEMA_VERSION',
    'VERSION_FEATURES',
    # Helpers
    'RECORD_KINDS',
    'key_field',
    'record_to_row',
    'row_to_record',
    # Store
    'RecordStore',
    'StoreTransaction',
    'CascadeDeleter',
    'CASCADE_GRAPH',
]
