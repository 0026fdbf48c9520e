from datetime import datetime, timedelta

import pytest

from print_srs.models.records import NormRect, Rating
from print_srs.services.mask_editor import MaskEditor
from print_srs.services.record_cache import MissingPageError
from print_srs.services.review_session import PracticePicker, ReviewSession, SessionMode

from .conftest import make_image_bytes


@pytest.fixture
def session(db_service, event_bus):
    return ReviewSession(db_service, event_bus=event_bus)


@pytest.fixture
def three_groups(editor):
    """Q1..Q3, each with one mask in a different row."""
    ids = []
    for i in range(3):
        group = editor.groups()[0] if i == 0 else editor.create_group()
        editor.select_group(group.id)
        editor.draw_mask(NormRect(0.1, 0.1 + i * 0.3, 0.5, 0.2))
        ids.append(group.id)
    return ids


def _soon():
    return datetime.now() + timedelta(minutes=1)


def test_empty_due_session_is_done(session, event_bus):
    finished = []
    event_bus.review_session_finished.connect(finished.append)

    assert session.start_due(now=_soon()) is None
    assert session.is_done
    assert session.remaining == 0
    assert finished == [0]


def test_due_session_rates_until_empty(session, three_groups):
    now = _soon()
    first = session.start_due(now=now)

    assert first == three_groups[0]
    assert session.mode == SessionMode.DUE
    assert session.remaining == 3

    for _ in range(3):
        assert session.rate(Rating.GOOD, now)

    assert session.is_done
    assert session.done_count == 3
    assert not session.rate(Rating.GOOD, now)


def test_due_queue_is_recomputed_after_rating(session, three_groups):
    now = _soon()
    session.start_due(now=now)
    session.next()
    assert session.current_group_id == three_groups[1]

    session.rate(Rating.GOOD, now)

    # Q2 left the queue; the cursor stays at index 1, now Q3
    assert session.queue == [three_groups[0], three_groups[2]]
    assert session.current_group_id == three_groups[2]
    assert session.remaining == 1


def test_cursor_is_clamped_when_last_item_is_rated(session, three_groups):
    now = _soon()
    session.start_due(now=now)
    session.open_group(three_groups[2])

    session.rate(Rating.EASY, now)

    assert session.cursor == 1
    assert session.current_group_id == three_groups[1]


def test_skip_current_is_not_counted(session, three_groups):
    now = _soon()
    session.start_due(now=now)

    assert session.skip_current(now)

    assert session.done_count == 0
    assert three_groups[0] not in session.queue
    assert session.current_group_id == three_groups[1]


def test_navigation_is_clamped(session, three_groups):
    session.start_due(now=_soon())
    assert not session.previous()
    assert session.next()
    assert session.next()
    assert not session.next()
    assert session.cursor == 2
    assert session.done_count == 0


def test_open_group_resets_reveals(session, three_groups, db_service):
    session.start_due(now=_soon())
    mask_id = session.current_masks()[0].id
    session.toggle_reveal(mask_id)
    assert session.revealed == {mask_id}

    session.next()
    assert session.revealed == set()


def test_tap_toggles_only_current_group_masks(session, three_groups):
    session.start_due(now=_soon())
    mask_id = session.current_masks()[0].id

    assert session.tap_at(0.3, 0.2) == mask_id
    assert mask_id in session.revealed
    assert session.tap_at(0.3, 0.2) == mask_id
    assert mask_id not in session.revealed

    # Q2's mask is on the page but not part of the current group
    assert session.tap_at(0.3, 0.5) is None
    assert not session.toggle_reveal('missing')


def test_practice_walks_queue_in_group_order(session, three_groups, db_service):
    assert session.start_practice([three_groups[2], three_groups[0]]) == three_groups[0]
    assert session.mode == SessionMode.PRACTICE

    session.rate(Rating.HARD)
    assert session.current_group_id == three_groups[2]
    session.rate(Rating.GOOD)

    assert session.is_done
    assert session.done_count == 2
    assert len(db_service.cache.reviews) == 2


def test_practice_ignores_stale_ids(session, three_groups):
    assert session.start_practice(['missing']) is None
    assert session.is_done


def test_missing_page_raises(session, three_groups, db_service, editor):
    db_service.store.delete('pages', editor.page.id)
    db_service.cache.reload()
    with pytest.raises(MissingPageError):
        session.start_due(now=_soon())


def test_missing_next_page_does_not_leave_rated_group_current(session, editor, db_service, event_bus, print_service):
    editor.draw_mask(NormRect(0.1, 0.1, 0.3, 0.2))
    first = editor.current_group_id
    second_print = print_service.import_print(make_image_bytes(), title='Decimals', subject='Math')
    MaskEditor(db_service, event_bus).load(second_print.id)
    db_service.store.delete('pages', db_service.cache.require_page(second_print.id).id)
    db_service.cache.reload()

    now = _soon()
    assert session.start_due(now=now) == first
    with pytest.raises(MissingPageError):
        session.rate(Rating.GOOD, now)

    assert session.current_group_id is None
    assert session.current_masks() == []
    assert not session.rate(Rating.AGAIN, now)
    assert [r.rating for r in db_service.cache.reviews_for(first)] == [Rating.GOOD]


def test_missing_page_on_previous_keeps_current_group(session, three_groups, db_service):
    now = _soon()
    session.start_due(now=now)
    session.next()
    db_service.store.delete('pages', session.page.id)
    db_service.cache.reload()

    with pytest.raises(MissingPageError):
        session.previous()

    assert session.current_group_id == three_groups[1]
    assert session.cursor == 1


def test_picker_toggles_groups_and_builds_ordered_queue(db_service, editor, three_groups):
    picker = PracticePicker(db_service)
    picker.load(editor.print_id)

    assert picker.toggle_group_at(0.3, 0.8) == three_groups[2]
    assert picker.toggle_group_at(0.3, 0.2) == three_groups[0]
    assert picker.toggle_group_at(0.95, 0.95) is None
    assert picker.build_queue() == [three_groups[0], three_groups[2]]

    assert picker.toggle_group_at(0.3, 0.8) == three_groups[2]
    assert picker.build_queue() == [three_groups[0]]

    picker.select_all()
    assert picker.build_queue() == three_groups
    picker.select_only(three_groups[1])
    assert picker.build_queue() == [three_groups[1]]
    picker.clear()
    assert picker.build_queue() == []


def test_picker_tap_uses_topmost_mask(db_service, editor, three_groups):
    editor.select_group(three_groups[1])
    editor.draw_mask(NormRect(0.0, 0.0, 1.0, 1.0))
    picker = PracticePicker(db_service)
    picker.load(editor.print_id)

    assert picker.toggle_group_at(0.3, 0.2) == three_groups[1]
