import pytest
from PyQt6.QtCore import QPointF

from print_srs.gestures import EditGestureEngine, GestureState
from print_srs.models.records import NormRect
from print_srs.utils.coordinate_utils import ViewTransform


@pytest.fixture
def transform():
    # 400x300 page shown 1:1, so screen px == page px
    view = ViewTransform(400, 300)
    view.fit(400, 300)
    return view


@pytest.fixture
def engine(editor, transform):
    return EditGestureEngine(editor, transform)


def test_drag_on_empty_page_draws_mask(engine, editor):
    drawn = []
    engine.mask_drawn.connect(drawn.append)

    assert engine.pointer_down(0, QPointF(40, 30))
    assert engine.state == GestureState.DRAWING_MASK
    assert engine.long_press_pending

    engine.pointer_move(0, QPointF(200, 150))
    assert not engine.long_press_pending
    assert engine.draft.w == pytest.approx(0.4)
    assert engine.draft.h == pytest.approx(0.4)

    engine.pointer_up(0, QPointF(200, 150))

    assert engine.state == GestureState.IDLE
    assert engine.draft is None
    masks = editor.masks()
    assert len(masks) == 1
    assert masks[0].x == pytest.approx(0.1)
    assert masks[0].y == pytest.approx(0.1)
    assert drawn == [masks[0].id]


def test_tiny_drag_is_discarded(engine, editor):
    engine.pointer_down(0, QPointF(40, 30))
    engine.pointer_move(0, QPointF(44, 34))
    engine.pointer_up(0, QPointF(44, 34))
    assert editor.masks() == []


def test_long_press_switches_to_panning(engine, editor, transform):
    engine.pointer_down(0, QPointF(100, 100))
    engine.long_press_fired()

    assert engine.state == GestureState.PANNING
    assert engine.draft is None

    engine.pointer_move(0, QPointF(130, 110))
    assert (transform.pan.x(), transform.pan.y()) == (30.0, 10.0)

    engine.pointer_up(0, QPointF(130, 110))
    assert engine.state == GestureState.IDLE
    assert editor.masks() == []


def test_long_press_after_movement_is_ignored(engine):
    engine.pointer_down(0, QPointF(100, 100))
    engine.pointer_move(0, QPointF(150, 150))
    engine.long_press_fired()
    assert engine.state == GestureState.DRAWING_MASK


def test_shift_pans_immediately(engine, transform):
    engine.pointer_down(0, QPointF(10, 10), pan_modifier=True)
    assert engine.state == GestureState.PANNING
    assert not engine.long_press_pending

    engine.pointer_move(0, QPointF(12, 15))
    assert (transform.pan.x(), transform.pan.y()) == (2.0, 5.0)


def test_drag_on_mask_moves_and_commits(engine, editor, db_service):
    mask = editor.draw_mask(NormRect(0.1, 0.1, 0.2, 0.2))
    moved = []
    engine.mask_moved.connect(moved.append)

    engine.pointer_down(0, QPointF(60, 50))
    assert engine.state == GestureState.MOVING_MASK
    assert not engine.long_press_pending
    assert editor.selected_mask_ids == {mask.id}

    engine.pointer_move(0, QPointF(160, 110))
    assert db_service.cache.get_mask(mask.id).x == pytest.approx(0.35)
    assert db_service.store.get('masks', mask.id).x == pytest.approx(0.1)

    engine.pointer_up(0, QPointF(160, 110))
    stored = db_service.store.get('masks', mask.id)
    assert stored.x == pytest.approx(0.35)
    assert stored.y == pytest.approx(0.3)
    assert moved == [mask.id]


def test_tap_on_mask_selects_without_writing(engine, editor):
    mask = editor.draw_mask(NormRect(0.1, 0.1, 0.2, 0.2))
    moved = []
    engine.mask_moved.connect(moved.append)

    engine.pointer_down(0, QPointF(60, 50))
    engine.pointer_up(0, QPointF(60, 50))

    assert editor.selected_mask_ids == {mask.id}
    assert moved == []


def test_cancel_reverts_uncommitted_move(engine, editor, db_service):
    mask = editor.draw_mask(NormRect(0.1, 0.1, 0.2, 0.2))

    engine.pointer_down(0, QPointF(60, 50))
    engine.pointer_move(0, QPointF(160, 110))
    engine.pointer_cancel()

    assert engine.state == GestureState.IDLE
    assert db_service.cache.get_mask(mask.id).x == pytest.approx(0.1)


def test_cancel_discards_draft(engine, editor):
    engine.pointer_down(0, QPointF(40, 30))
    engine.pointer_move(0, QPointF(200, 150))
    engine.pointer_cancel()

    assert engine.draft is None
    assert not engine.long_press_pending
    assert editor.masks() == []


def test_extra_pointers_are_ignored(engine, editor):
    engine.pointer_down(0, QPointF(40, 30))
    assert not engine.pointer_down(1, QPointF(300, 200))
    assert not engine.pointer_move(1, QPointF(350, 250))
    assert not engine.pointer_up(1, QPointF(350, 250))

    engine.pointer_move(0, QPointF(200, 150))
    engine.pointer_up(0, QPointF(200, 150))
    assert len(editor.masks()) == 1


def test_wheel_zooms_around_cursor(engine, transform):
    anchor = QPointF(100, 100)
    world = transform.screen_to_world(anchor)

    engine.wheel(anchor, 120)
    assert transform.zoom == pytest.approx(1.1)
    engine.wheel(anchor, -120)
    assert transform.zoom == pytest.approx(0.99)

    back = transform.world_to_screen(world)
    assert back.x() == pytest.approx(100.0)
    assert back.y() == pytest.approx(100.0)
