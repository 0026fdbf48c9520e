"""
Records - Typed entities persisted by the record store

Defines the worksheet data model:
- Print / Page: an imported worksheet photo
- Group: a question unit ordered among its siblings
- Mask: a normalized answer rectangle belonging to a group
- SRSState / SkipRecord / ReviewLogEntry: per-group scheduling data
"""

import uuid as uuid_lib
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Optional

from ..config import Config


def new_id() -> str:
    """Generate a new record id."""
    return uuid_lib.uuid4().hex


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


class Rating(str, Enum):
    """Self-assessed recall quality for one review."""
    AGAIN = 'again'
    HARD = 'hard'
    GOOD = 'good'
    EASY = 'easy'


@dataclass(frozen=True)
class NormRect:
    """
    Page-relative rectangle in the 0-1 range.

    Attributes:
        x, y: Top-left corner as a fraction of page width/height
        w, h: Size as a fraction of page width/height
    """
    x: float
    y: float
    w: float
    h: float

    @classmethod
    def from_corners(cls, x1: float, y1: float, x2: float, y2: float) -> 'NormRect':
        """Build a rect from two opposite corners in any order."""
        return cls(min(x1, x2), min(y1, y2), abs(x2 - x1), abs(y2 - y1))

    def clamped(self, min_size: float = Config.MIN_MASK_SIZE) -> 'NormRect':
        """
        Clamp into the unit square.

        Size is clamped to [min_size, 1] first, then the origin is pulled into
        [0, 1-w] x [0, 1-h] so that x + w <= 1 and y + h <= 1 always hold.
        """
        w = clamp(self.w, min_size, 1.0)
        h = clamp(self.h, min_size, 1.0)
        x = clamp(self.x, 0.0, 1.0 - w)
        y = clamp(self.y, 0.0, 1.0 - h)
        return NormRect(x, y, w, h)

    def moved_to(self, x: float, y: float) -> 'NormRect':
        """Translate to a new origin and reclamp, keeping the size."""
        return NormRect(
            clamp(x, 0.0, 1.0 - self.w),
            clamp(y, 0.0, 1.0 - self.h),
            self.w,
            self.h,
        )

    def contains(self, nx: float, ny: float) -> bool:
        """Inclusive containment test."""
        return self.x <= nx <= self.x + self.w and self.y <= ny <= self.y + self.h


@dataclass
class Print:
    """An imported worksheet."""
    id: str
    title: str
    subject: str = Config.OTHER_SUBJECT
    subject_other: str = ''
    created_at: datetime = field(default_factory=datetime.now)

    def display_subject(self) -> str:
        """Subject name used for grouping and the due-list filter."""
        if (self.subject or Config.OTHER_SUBJECT) != Config.OTHER_SUBJECT:
            return self.subject
        return (self.subject_other or '').strip() or Config.OTHER_SUBJECT


@dataclass
class Page:
    """Raster image of a print. Never mutated after import."""
    id: str
    print_id: str
    width: int
    height: int
    image: bytes = b''
    page_index: int = 0
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class Group:
    """A question: one or more masks revealed and rated together."""
    id: str
    print_id: str
    label: str
    order_index: int
    is_active: bool = True
    page_index: int = 0
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class Mask:
    """An opaque answer region over a page."""
    id: str
    group_id: str
    print_id: str
    x: float
    y: float
    w: float
    h: float
    page_index: int = 0
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def rect(self) -> NormRect:
        return NormRect(self.x, self.y, self.w, self.h)

    def with_rect(self, rect: NormRect) -> 'Mask':
        """Copy with new geometry, clamped into the page."""
        r = rect.clamped()
        return replace(self, x=r.x, y=r.y, w=r.w, h=r.h)


@dataclass
class SRSState:
    """Scheduling state of a group. Keyed by group id."""
    group_id: str
    difficulty: float = 5.0
    stability: float = 1.0
    last_reviewed_at: Optional[datetime] = None
    next_due_at: Optional[datetime] = None
    review_count: int = 0
    lapse_count: int = 0
    updated_at: datetime = field(default_factory=datetime.now)


@dataclass
class SkipRecord:
    """Defers a group's due status until skip_until."""
    group_id: str
    skip_until: datetime


@dataclass(frozen=True)
class ReviewLogEntry:
    """Append-only history of ratings."""
    id: str
    group_id: str
    reviewed_at: datetime
    rating: Rating


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
