"""
Scheduler - Spaced repetition state transitions and due-set rules

The model is a bespoke monotone heuristic, not a validated forgetting-curve
model (it is neither SM-2 nor FSRS). Each group carries a continuous
(difficulty, stability) pair; a rating moves both and picks the next interval.
The constants below are product behavior and are kept exactly as shipped.
"""

import math
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional

from ..models.records import Group, Rating, SkipRecord, SRSState, clamp


class SrsConstants:
    """Numeric constants of the rating transition."""

    DEFAULT_DIFFICULTY = 5.0
    DEFAULT_STABILITY = 1.0

    MIN_DIFFICULTY = 1.0
    MAX_DIFFICULTY = 10.0

    DIFFICULTY_DELTA = {
        Rating.AGAIN: +1.2,
        Rating.HARD: +0.6,
        Rating.GOOD: -0.1,
        Rating.EASY: -0.5,
    }

    # rating -> (stability multiplier, stability floor)
    STABILITY_GROWTH = {
        Rating.AGAIN: (0.35, 0.5),
        Rating.HARD: (1.25, 0.8),
        Rating.GOOD: (1.9, 1.0),
        Rating.EASY: (2.6, 2.0),
    }

    # rating -> (stability multiplier, minimum interval in days)
    INTERVAL_RULES = {
        Rating.HARD: (0.7, 2),
        Rating.GOOD: (1.0, 3),
        Rating.EASY: (1.4, 7),
    }
    AGAIN_INTERVAL_DAYS = 1


@dataclass
class DueItem:
    """A due group together with its scheduling state."""
    group: Group
    srs: SRSState


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def init_srs_state(group_id: str, now: Optional[datetime] = None) -> SRSState:
    """
    Create the default state for a new group.

    A brand-new group is immediately due.
    """
    now = now or datetime.now()
    return SRSState(
        group_id=group_id,
        difficulty=SrsConstants.DEFAULT_DIFFICULTY,
        stability=SrsConstants.DEFAULT_STABILITY,
        last_reviewed_at=None,
        next_due_at=now,
        review_count=0,
        lapse_count=0,
        updated_at=now,
    )


def difficulty_factor(difficulty: float) -> float:
    """Stability growth factor in (0.55, 1.0]; harder groups grow slower."""
    return 1.0 - (difficulty - 1.0) / 20.0


def interval_days(rating: Rating, stability: float) -> int:
    """
    Whole-day interval for a rating given the new stability.

    Args:
        rating: The rating just applied
        stability: Stability after the rating

    Returns:
        Days until the next review (1 for AGAIN, rating-specific floors otherwise)
    """
    if rating == Rating.AGAIN:
        return SrsConstants.AGAIN_INTERVAL_DAYS
    multiplier, minimum = SrsConstants.INTERVAL_RULES[rating]
    return max(minimum, round_half_up(stability * multiplier))


def update_srs(prev: SRSState, rating: Rating, now: Optional[datetime] = None) -> SRSState:
    """
    Apply a rating and return the new scheduling state.

    Args:
        prev: Current state (not modified)
        rating: User rating
        now: Review time (defaults to datetime.now())

    Returns:
        New SRSState with difficulty, stability, due time and counters updated
    """
    rating = Rating(rating)
    now = now or datetime.now()

    new_difficulty = clamp(
        prev.difficulty + SrsConstants.DIFFICULTY_DELTA[rating],
        SrsConstants.MIN_DIFFICULTY,
        SrsConstants.MAX_DIFFICULTY,
    )

    multiplier, floor = SrsConstants.STABILITY_GROWTH[rating]
    if rating == Rating.AGAIN:
        new_stability = max(floor, prev.stability * multiplier)
    else:
        new_stability = max(floor, prev.stability * (multiplier * difficulty_factor(new_difficulty)))

    days = interval_days(rating, new_stability)

    return replace(
        prev,
        difficulty=new_difficulty,
        stability=new_stability,
        last_reviewed_at=now,
        next_due_at=now + timedelta(days=days),
        review_count=prev.review_count + 1,
        lapse_count=prev.lapse_count + (1 if rating == Rating.AGAIN else 0),
        updated_at=now,
    )


def start_of_next_day(now: Optional[datetime] = None) -> datetime:
    """Local midnight that starts the next calendar day."""
    now = now or datetime.now()
    return datetime.combine(now.date() + timedelta(days=1), datetime.min.time())


def is_skipped(skip: Optional[SkipRecord], now: Optional[datetime] = None) -> bool:
    """True while a skip record is still in force."""
    if skip is None or skip.skip_until is None:
        return False
    return skip.skip_until > (now or datetime.now())


def compute_due(
    groups: Iterable[Group],
    srs_by_group: Dict[str, SRSState],
    skips_by_group: Dict[str, SkipRecord],
    now: Optional[datetime] = None,
    group_filter: Optional[Callable[[Group], bool]] = None,
) -> List[DueItem]:
    """
    Compute the ordered due set.

    A group is due when it is active, has a state whose next_due_at is set and
    not in the future, and it is not skipped. The optional filter restricts
    the set before sorting. Sorting is by next_due_at, stable with respect to
    the input order.

    Args:
        groups: Candidate groups in store order
        srs_by_group: Scheduling state keyed by group id
        skips_by_group: Skip records keyed by group id
        now: Evaluation time
        group_filter: Extra predicate (e.g. subject filter)

    Returns:
        Soonest-due first list of DueItem
    """
    now = now or datetime.now()
    due: List[DueItem] = []
    for group in groups:
        if not group.is_active:
            continue
        srs = srs_by_group.get(group.id)
        if srs is None or srs.next_due_at is None or srs.next_due_at > now:
            continue
        if is_skipped(skips_by_group.get(group.id), now):
            continue
        if group_filter is not None and not group_filter(group):
            continue
        due.append(DueItem(group, srs))

    due.sort(key=lambda item: item.srs.next_due_at)
    return due


__all__ = [
    'SrsConstants',
    'DueItem',
    'round_half_up',
    'init_srs_state',
    'difficulty_factor',
    'interval_days',
    'update_srs',
    'start_of_next_day',
    'is_skipped',
    'compute_due',
]
