"""
ReviewScheduler - Due-set, rating and skip operations against the store

Wraps the pure transition functions in core/scheduler.py with persistence.
Each rate/skip is a single store transaction followed by a cache reload.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Iterable, List, Optional

from ..core.scheduler import (
    DueItem,
    compute_due,
    init_srs_state,
    start_of_next_day,
    update_srs,
)
from ..events.event_bus import EventBus, get_event_bus
from ..models.records import Group, Rating, ReviewLogEntry, SkipRecord, SRSState, new_id
from .database_service import DatabaseService, get_database_service


logger = logging.getLogger(__name__)


class ReviewScheduler:
    """
    Scheduler service

    Usage:
        scheduler = ReviewScheduler(db_service)
        for item in scheduler.compute_due({'Math'}):
            ...
        scheduler.rate(group_id, Rating.GOOD)
    """

    def __init__(self, db_service: Optional[DatabaseService] = None, event_bus: Optional[EventBus] = None):
        self._db = db_service or get_database_service()
        self._events = event_bus or get_event_bus()

    def _subject_filter(self, subjects: Optional[Iterable[str]]):
        wanted = set(subjects or ())
        if not wanted:
            return None
        cache = self._db.cache

        def accept(group: Group) -> bool:
            record = cache.get_print(group.print_id)
            return record is not None and record.display_subject() in wanted

        return accept

    def compute_due(self, subjects: Optional[Iterable[str]] = None, now: Optional[datetime] = None) -> List[DueItem]:
        """
        Ordered due set

        Args:
            subjects: Display subjects to keep (None or empty keeps all)
            now: Evaluation time

        Returns:
            Soonest-due first list of DueItem
        """
        cache = self._db.cache
        return compute_due(
            cache.groups,
            cache.srs_by_group(),
            cache.skips_by_group(),
            now=now,
            group_filter=self._subject_filter(subjects),
        )

    def due_for_print(self, print_id: str, now: Optional[datetime] = None) -> List[DueItem]:
        """Due set restricted to one print."""
        cache = self._db.cache
        return compute_due(
            cache.groups,
            cache.srs_by_group(),
            cache.skips_by_group(),
            now=now,
            group_filter=lambda g: g.print_id == print_id,
        )

    def rate(self, group_id: str, rating: Rating, now: Optional[datetime] = None) -> Optional[SRSState]:
        """
        Apply a rating

        Writes the new SRS state, appends a review log entry, clears any skip
        and re-activates the group in one transaction. A group without a
        stored state is rated from a fresh default state.

        Args:
            group_id: Group being rated
            rating: User rating
            now: Review time

        Returns:
            The new SRSState, or None if the group no longer exists
        """
        rating = Rating(rating)
        now = now or datetime.now()
        cache = self._db.cache

        group = cache.get_group(group_id)
        if group is None:
            logger.warning(f"rate: unknown group {group_id}")
            return None

        prev = cache.srs_for(group_id) or init_srs_state(group_id, now)
        state = update_srs(prev, rating, now)
        entry = ReviewLogEntry(id=new_id(), group_id=group_id, reviewed_at=now, rating=rating)
        with self._db.transaction() as tx:
            tx.put('srs', state)
            tx.put('reviews', entry)
            tx.delete('skips', group_id)
            tx.put('groups', replace(group, is_active=True))
        cache.reload()

        logger.debug(
            f"Rated {group.label} {rating.value}: D={state.difficulty:.2f} "
            f"S={state.stability:.2f} due {state.next_due_at:%Y-%m-%d}"
        )
        self._events.group_rated.emit(group_id, rating.value)
        return state

    def skip(self, group_id: str, now: Optional[datetime] = None) -> Optional[SkipRecord]:
        """
        Hide a group from the due set until the next local midnight

        Returns:
            The stored SkipRecord, or None if the group no longer exists
        """
        if self._db.cache.get_group(group_id) is None:
            logger.warning(f"skip: unknown group {group_id}")
            return None
        record = SkipRecord(group_id=group_id, skip_until=start_of_next_day(now))
        self._db.store.put('skips', record)
        self._db.cache.reload()
        self._events.group_skipped.emit(group_id)
        return record

    def set_active(self, group_id: str, active: bool) -> bool:
        """Include or exclude a group from scheduling."""
        group = self._db.cache.get_group(group_id)
        if group is None:
            return False
        self._db.store.put('groups', replace(group, is_active=active))
        self._db.cache.reload()
        self._events.groups_changed.emit(group.print_id)
        return True


__all__ = ['ReviewScheduler']
