"""
ReviewSession - Walk a queue of groups, reveal answers and rate them

Two session modes:
- DUE: the queue is the scheduler's due set and is recomputed after every
  rating, so rated groups drop out and newly-due ones appear.
- PRACTICE: a fixed queue chosen in the PracticePicker, walked in order.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional, Set

from ..events.event_bus import EventBus, get_event_bus
from ..models.records import Group, Mask, Page, Rating
from .database_service import DatabaseService, get_database_service
from .record_cache import MissingPageError
from .review_scheduler import ReviewScheduler


logger = logging.getLogger(__name__)


class SessionMode(Enum):
    DUE = "due"
    PRACTICE = "practice"


class ReviewSession:
    """
    Review session controller

    Usage:
        session = ReviewSession(db_service)
        session.start_due({'Math'})
        session.tap_at(0.4, 0.3)
        session.rate(Rating.GOOD)
    """

    def __init__(
        self,
        db_service: Optional[DatabaseService] = None,
        scheduler: Optional[ReviewScheduler] = None,
        event_bus: Optional[EventBus] = None
    ):
        self._db = db_service or get_database_service()
        self._events = event_bus or get_event_bus()
        self._scheduler = scheduler or ReviewScheduler(self._db, self._events)

        self.mode = SessionMode.DUE
        self.queue: List[str] = []
        self.cursor = 0
        self.revealed: Set[str] = set()
        self.done_count = 0
        self.is_done = True
        self._subjects: Optional[Set[str]] = None
        self._current_group_id: Optional[str] = None
        self._page: Optional[Page] = None

    # ==================== Properties ====================

    @property
    def scheduler(self) -> ReviewScheduler:
        return self._scheduler

    @property
    def current_group_id(self) -> Optional[str]:
        return self._current_group_id

    @property
    def current_group(self) -> Optional[Group]:
        return self._db.cache.get_group(self._current_group_id)

    @property
    def page(self) -> Optional[Page]:
        return self._page

    @property
    def remaining(self) -> int:
        """Groups left including the current one."""
        if self.is_done:
            return 0
        return len(self.queue) - self.cursor

    def current_masks(self) -> List[Mask]:
        """Masks of the current group in z order."""
        if self._current_group_id is None:
            return []
        return self._db.cache.masks_for_group(self._current_group_id)

    def page_masks(self) -> List[Mask]:
        """Every mask on the current page (other groups are drawn as context)."""
        group = self.current_group
        if group is None:
            return []
        return self._db.cache.masks_for_print(group.print_id)

    # ==================== Starting ====================

    def start_due(self, subjects: Optional[Iterable[str]] = None, now: Optional[datetime] = None) -> Optional[str]:
        """
        Start a session over the due set

        Args:
            subjects: Display subjects to include (None or empty means all)
            now: Evaluation time

        Returns:
            The first group id, or None if nothing is due
        """
        self.mode = SessionMode.DUE
        self._subjects = set(subjects) if subjects else None
        self.done_count = 0
        self.queue = [item.group.id for item in self._scheduler.compute_due(self._subjects, now)]
        logger.info(f"Starting due session with {len(self.queue)} group(s)")
        return self._begin()

    def start_practice(self, group_ids: Iterable[str]) -> Optional[str]:
        """
        Start a practice session over chosen groups, in group order

        Returns:
            The first group id, or None if the selection is empty
        """
        self.mode = SessionMode.PRACTICE
        self._subjects = None
        self.done_count = 0
        groups = [g for g in (self._db.cache.get_group(gid) for gid in group_ids) if g is not None]
        groups.sort(key=lambda g: g.order_index)
        self.queue = [g.id for g in groups]
        logger.info(f"Starting practice session with {len(self.queue)} group(s)")
        return self._begin()

    def _begin(self) -> Optional[str]:
        self.cursor = 0
        if not self.queue:
            self._finish()
            return None
        self.is_done = False
        self._current_group_id = None
        self._open_or_drop(self.queue[0])
        return self._current_group_id

    # ==================== Navigation ====================

    def open_group(self, group_id: str) -> int:
        """
        Show a group with all of its masks hidden

        Args:
            group_id: Group to show

        Returns:
            Remaining count (queue length minus cursor)

        Raises:
            MissingPageError: If the group's page is absent
        """
        group = self._db.cache.get_group(group_id)
        if group is None:
            logger.warning(f"open_group: unknown group {group_id}")
            return self.remaining

        page = self._db.cache.require_page(group.print_id, group.page_index)
        self.revealed.clear()
        self.cursor = self.queue.index(group_id) if group_id in self.queue else 0
        self._page = page
        self._current_group_id = group_id
        self.is_done = False

        self._events.review_group_opened.emit(group_id, self.remaining)
        return self.remaining

    def next(self) -> bool:
        """Move to the next queued group without rating. False at the end."""
        if self.is_done or self.cursor + 1 >= len(self.queue):
            return False
        self.open_group(self.queue[self.cursor + 1])
        return True

    def previous(self) -> bool:
        """Move to the previous queued group without rating. False at the start."""
        if self.is_done or self.cursor <= 0:
            return False
        self.open_group(self.queue[self.cursor - 1])
        return True

    # ==================== Revealing ====================

    def toggle_reveal(self, mask_id: str) -> bool:
        """
        Flip a mask of the current group between hidden and revealed

        Returns:
            True if the mask is now revealed
        """
        if mask_id not in {m.id for m in self.current_masks()}:
            return False
        if mask_id in self.revealed:
            self.revealed.discard(mask_id)
            revealed = False
        else:
            self.revealed.add(mask_id)
            revealed = True
        self._events.mask_reveal_toggled.emit(mask_id, revealed)
        return revealed

    def tap_at(self, nx: float, ny: float) -> Optional[str]:
        """
        Toggle the topmost current-group mask under a normalized point

        Returns:
            The toggled mask id, or None if the tap missed
        """
        for mask in reversed(self.current_masks()):
            if mask.rect.contains(nx, ny):
                self.toggle_reveal(mask.id)
                return mask.id
        return None

    def reveal_all(self):
        self.revealed = {m.id for m in self.current_masks()}

    # ==================== Rating ====================

    def rate(self, rating: Rating, now: Optional[datetime] = None) -> bool:
        """
        Rate the current group and move on

        Returns:
            False if there is no current group
        """
        if self.is_done or self._current_group_id is None:
            return False
        state = self._scheduler.rate(self._current_group_id, Rating(rating), now)
        if state is not None:
            self.done_count += 1
        self._advance(now)
        return True

    def skip_current(self, now: Optional[datetime] = None) -> bool:
        """Skip the current group until tomorrow and move on without counting it."""
        if self.is_done or self._current_group_id is None:
            return False
        self._scheduler.skip(self._current_group_id, now)
        self._advance(now)
        return True

    def _advance(self, now: Optional[datetime]):
        if self.mode == SessionMode.PRACTICE:
            if self.cursor + 1 < len(self.queue):
                self._open_or_drop(self.queue[self.cursor + 1])
            else:
                self._finish()
            return

        self.queue = [item.group.id for item in self._scheduler.compute_due(self._subjects, now)]
        if not self.queue:
            self._finish()
            return
        self.cursor = min(self.cursor, len(self.queue) - 1)
        self._open_or_drop(self.queue[self.cursor])

    def _open_or_drop(self, group_id: str):
        # The previous group is already rated; never leave it current
        try:
            self.open_group(group_id)
        except MissingPageError:
            self._current_group_id = None
            self._page = None
            self.revealed.clear()
            raise

    def _finish(self):
        self.is_done = True
        self._current_group_id = None
        self._page = None
        self.revealed.clear()
        logger.info(f"Review session finished, {self.done_count} rated")
        self._events.review_session_finished.emit(self.done_count)


class PracticePicker:
    """
    Choose groups of one print for a practice session by tapping their masks

    Usage:
        picker = PracticePicker(db_service)
        picker.load(print_id)
        picker.toggle_group_at(0.5, 0.2)
        session.start_practice(picker.build_queue())
    """

    def __init__(self, db_service: Optional[DatabaseService] = None):
        self._db = db_service or get_database_service()
        self._print_id: Optional[str] = None
        self._page: Optional[Page] = None
        self.selected: Set[str] = set()

    @property
    def print_id(self) -> Optional[str]:
        return self._print_id

    @property
    def page(self) -> Optional[Page]:
        return self._page

    def load(self, print_id: str) -> Page:
        """
        Open a print for picking

        Raises:
            MissingPageError: If the print has no page
        """
        self._page = self._db.cache.require_page(print_id)
        self._print_id = print_id
        self.selected.clear()
        return self._page

    def groups(self) -> List[Group]:
        if self._print_id is None:
            return []
        return self._db.cache.groups_for_print(self._print_id)

    def masks(self) -> List[Mask]:
        if self._print_id is None:
            return []
        return self._db.cache.masks_for_print(self._print_id)

    def toggle_group(self, group_id: str) -> bool:
        """Flip a group's selection. Returns True if it is now selected."""
        if group_id in self.selected:
            self.selected.discard(group_id)
            return False
        self.selected.add(group_id)
        return True

    def toggle_group_at(self, nx: float, ny: float) -> Optional[str]:
        """
        Toggle the group owning the topmost mask under a normalized point

        Returns:
            The toggled group id, or None if the tap missed
        """
        for mask in reversed(self.masks()):
            if mask.rect.contains(nx, ny):
                self.toggle_group(mask.group_id)
                return mask.group_id
        return None

    def select_only(self, group_id: str):
        self.selected = {group_id}

    def select_all(self):
        self.selected = {g.id for g in self.groups()}

    def clear(self):
        self.selected.clear()

    def build_queue(self) -> List[str]:
        """Selected group ids in group order."""
        return [g.id for g in self.groups() if g.id in self.selected]


__all__ = ['ReviewSession', 'PracticePicker', 'SessionMode']
