"""Core business logic for Print SRS"""

from .scheduler import (
    SrsConstants,
    DueItem,
    init_srs_state,
    update_srs,
    interval_days,
    start_of_next_day,
    is_skipped,
    compute_due,
)
from .page_importer import PageImporter, ImageDecodeError

__all__ = [
    'SrsConstants',
    'DueItem',
    'init_srs_state',
    'update_srs',
    'interval_days',
    'start_of_next_day',
    'is_skipped',
    'compute_due',
    'PageImporter',
    'ImageDecodeError',
]
