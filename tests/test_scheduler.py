from datetime import datetime, timedelta

import pytest

from print_srs.core.scheduler import (
    compute_due,
    init_srs_state,
    interval_days,
    is_skipped,
    round_half_up,
    start_of_next_day,
    update_srs,
)
from print_srs.models.records import Group, Rating, SkipRecord

NOW = datetime(2026, 3, 14, 15, 30)


def _group(gid, active=True, print_id='p1'):
    return Group(id=gid, print_id=print_id, label=gid, order_index=0, is_active=active)


def test_new_state_is_due_immediately():
    state = init_srs_state('g1', NOW)
    assert state.difficulty == 5.0
    assert state.stability == 1.0
    assert state.next_due_at == NOW
    assert state.last_reviewed_at is None
    assert state.review_count == 0
    assert state.lapse_count == 0


def test_good_from_default_state():
    state = update_srs(init_srs_state('g1', NOW), Rating.GOOD, NOW)
    assert state.difficulty == pytest.approx(4.9)
    assert state.stability == pytest.approx(1.9 * (1 - 3.9 / 20))
    assert state.next_due_at == NOW + timedelta(days=3)
    assert state.last_reviewed_at == NOW
    assert state.review_count == 1
    assert state.lapse_count == 0


def test_again_counts_a_lapse_and_is_due_tomorrow():
    state = update_srs(init_srs_state('g1', NOW), Rating.AGAIN, NOW)
    assert state.difficulty == pytest.approx(6.2)
    assert state.stability == pytest.approx(0.5)
    assert state.next_due_at == NOW + timedelta(days=1)
    assert state.lapse_count == 1


def test_hard_and_easy_respect_interval_floors():
    hard = update_srs(init_srs_state('g1', NOW), Rating.HARD, NOW)
    assert hard.stability == pytest.approx(1.25 * (1 - 4.6 / 20))
    assert hard.next_due_at == NOW + timedelta(days=2)

    easy = update_srs(init_srs_state('g1', NOW), Rating.EASY, NOW)
    assert easy.stability == pytest.approx(2.6 * (1 - 3.5 / 20))
    assert easy.next_due_at == NOW + timedelta(days=7)


def test_difficulty_is_clamped():
    hard_case = init_srs_state('g1', NOW)
    hard_case.difficulty = 9.5
    assert update_srs(hard_case, Rating.AGAIN, NOW).difficulty == 10.0

    easy_case = init_srs_state('g2', NOW)
    easy_case.difficulty = 1.2
    assert update_srs(easy_case, Rating.EASY, NOW).difficulty == 1.0


DIFFICULTIES = [1.0, 1.3, 5.0, 9.7, 10.0]
STABILITIES = [0.5, 0.8, 1.0, 3.3, 12.0, 47.5, 250.0]


def _prior(difficulty, stability):
    state = init_srs_state('g1', NOW)
    state.difficulty = difficulty
    state.stability = stability
    return state


@pytest.mark.parametrize('rating', list(Rating))
@pytest.mark.parametrize('stability', STABILITIES)
@pytest.mark.parametrize('difficulty', DIFFICULTIES)
def test_update_stays_in_bounds(difficulty, stability, rating):
    state = update_srs(_prior(difficulty, stability), rating, NOW)
    assert 1.0 <= state.difficulty <= 10.0
    assert state.stability >= 0.5
    assert state.next_due_at >= NOW + timedelta(days=1)


@pytest.mark.parametrize('stability', STABILITIES)
@pytest.mark.parametrize('difficulty', DIFFICULTIES)
def test_intervals_grow_with_rating(difficulty, stability):
    days = [
        (update_srs(_prior(difficulty, stability), rating, NOW).next_due_at - NOW).days
        for rating in (Rating.AGAIN, Rating.HARD, Rating.GOOD, Rating.EASY)
    ]
    assert days == sorted(days)


def test_update_does_not_mutate_previous_state():
    prev = init_srs_state('g1', NOW)
    update_srs(prev, Rating.GOOD, NOW)
    assert prev.review_count == 0
    assert prev.difficulty == 5.0


def test_rating_accepts_string_values():
    assert update_srs(init_srs_state('g1', NOW), 'good', NOW).review_count == 1


def test_rounding_is_half_up():
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(1.49) == 1
    assert interval_days(Rating.GOOD, 10.5) == 11
    assert interval_days(Rating.EASY, 10.0) == 14
    assert interval_days(Rating.AGAIN, 50.0) == 1


def test_repeated_good_ratings_grow_the_interval():
    state = init_srs_state('g1', NOW)
    intervals = []
    when = NOW
    for _ in range(5):
        state = update_srs(state, Rating.GOOD, when)
        intervals.append((state.next_due_at - when).days)
        when = state.next_due_at
    assert intervals == sorted(intervals)
    assert intervals[-1] > intervals[0]


def test_start_of_next_day():
    assert start_of_next_day(datetime(2026, 3, 14, 23, 59)) == datetime(2026, 3, 15)
    assert start_of_next_day(datetime(2026, 12, 31, 0, 0)) == datetime(2027, 1, 1)


def test_skip_expires_at_its_boundary():
    skip = SkipRecord('g1', datetime(2026, 3, 15))
    assert is_skipped(skip, datetime(2026, 3, 14, 23, 0))
    assert not is_skipped(skip, datetime(2026, 3, 15))
    assert not is_skipped(None, NOW)


def test_compute_due_filters_and_sorts():
    groups = [_group('late'), _group('inactive', active=False), _group('future'),
              _group('skipped'), _group('early'), _group('no_state')]
    srs = {
        'late': init_srs_state('late', NOW - timedelta(hours=1)),
        'inactive': init_srs_state('inactive', NOW - timedelta(days=1)),
        'future': init_srs_state('future', NOW + timedelta(minutes=1)),
        'skipped': init_srs_state('skipped', NOW - timedelta(days=1)),
        'early': init_srs_state('early', NOW - timedelta(days=2)),
    }
    skips = {'skipped': SkipRecord('skipped', start_of_next_day(NOW))}

    due = compute_due(groups, srs, skips, NOW)
    assert [item.group.id for item in due] == ['early', 'late']


def test_compute_due_is_stable_for_equal_due_times():
    groups = [_group('b'), _group('a'), _group('c')]
    srs = {g.id: init_srs_state(g.id, NOW) for g in groups}
    due = compute_due(groups, srs, {}, NOW)
    assert [item.group.id for item in due] == ['b', 'a', 'c']


def test_compute_due_includes_expired_skips_and_applies_filter():
    groups = [_group('g1', print_id='p1'), _group('g2', print_id='p2')]
    srs = {g.id: init_srs_state(g.id, NOW - timedelta(days=1)) for g in groups}
    skips = {'g1': SkipRecord('g1', NOW - timedelta(minutes=1))}

    assert len(compute_due(groups, srs, skips, NOW)) == 2
    only_p2 = compute_due(groups, srs, skips, NOW, group_filter=lambda g: g.print_id == 'p2')
    assert [item.group.id for item in only_p2] == ['g2']
