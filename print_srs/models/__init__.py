"""Data model for Print SRS"""

from .records import (
    new_id,
    clamp,
    Rating,
    NormRect,
    Print,
    Page,
    Group,
    Mask,
    SRSState,
    SkipRecord,
    ReviewLogEntry,
)

__all__ = [
    'new_id',
    'clamp',
    'Rating',
    'NormRect',
    'Print',
    'Page',
    'Group',
    'Mask',
    'SRSState',
    'SkipRecord',
    'ReviewLogEntry',
]
