import pytest
from PyQt6.QtCore import QPointF

from print_srs.gestures import GestureState, PinchGestureEngine
from print_srs.utils.coordinate_utils import ViewTransform


@pytest.fixture
def transform():
    view = ViewTransform(400, 300)
    view.fit(400, 300)
    return view


@pytest.fixture
def engine(transform):
    return PinchGestureEngine(transform)


@pytest.fixture
def taps(engine):
    received = []
    engine.tapped.connect(received.append)
    return received


def test_still_touch_is_a_tap(engine, taps, transform):
    engine.pointer_down(1, QPointF(50, 50))
    engine.pointer_move(1, QPointF(53, 52))
    engine.pointer_up(1, QPointF(53, 52))

    assert engine.state == GestureState.IDLE
    assert len(taps) == 1
    assert taps[0].x() == pytest.approx(53.0)
    assert (transform.pan.x(), transform.pan.y()) == (0.0, 0.0)


def test_drag_pans_after_jitter_and_suppresses_tap(engine, taps, transform):
    engine.pointer_down(1, QPointF(50, 50))
    engine.pointer_move(1, QPointF(80, 50))

    assert engine.state == GestureState.PANNING
    assert transform.pan.x() == pytest.approx(30.0)

    engine.pointer_up(1, QPointF(80, 50))
    assert taps == []


def test_pinch_zooms_around_start_midpoint(engine, transform):
    engine.pointer_down(1, QPointF(100, 100))
    engine.pointer_down(2, QPointF(200, 100))
    assert engine.state == GestureState.PINCHING

    engine.pointer_move(2, QPointF(300, 100))

    assert transform.zoom == pytest.approx(2.0)
    # world point (150, 100) under the start midpoint is now under (200, 100)
    screen = transform.world_to_screen(QPointF(150, 100))
    assert screen.x() == pytest.approx(200.0)
    assert screen.y() == pytest.approx(100.0)


def test_pinch_zoom_is_clamped(engine, transform):
    engine.pointer_down(1, QPointF(0, 100))
    engine.pointer_down(2, QPointF(10, 100))
    engine.pointer_move(2, QPointF(1000, 100))
    assert transform.zoom == pytest.approx(transform.max_zoom)


def test_lifting_one_finger_reanchors_pan(engine, taps, transform):
    engine.pointer_down(1, QPointF(100, 100))
    engine.pointer_down(2, QPointF(200, 100))
    engine.pointer_move(2, QPointF(300, 100))
    engine.pointer_up(2, QPointF(300, 100))

    assert engine.state == GestureState.PANNING
    pan_before = transform.pan

    engine.pointer_move(1, QPointF(110, 120))
    assert transform.pan.x() == pytest.approx(pan_before.x() + 10)
    assert transform.pan.y() == pytest.approx(pan_before.y() + 20)

    engine.pointer_up(1, QPointF(110, 120))
    assert engine.state == GestureState.IDLE
    assert taps == []


def test_cancel_never_taps(engine, taps):
    engine.pointer_down(1, QPointF(50, 50))
    engine.pointer_cancel()
    engine.pointer_up(1, QPointF(50, 50))

    assert engine.state == GestureState.IDLE
    assert engine.pointer_count == 0
    assert taps == []


def test_wheel_zoom(engine, transform):
    engine.wheel(QPointF(0, 0), 120)
    assert transform.zoom == pytest.approx(1.1)
