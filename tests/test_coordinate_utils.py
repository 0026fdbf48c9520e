import pytest
from PyQt6.QtCore import QPointF

from print_srs.models.records import NormRect
from print_srs.utils.coordinate_utils import ViewTransform


def _transform(pan=(10.0, 20.0), zoom=2.0, size=(200.0, 100.0)):
    transform = ViewTransform(*size)
    transform.set_pan(QPointF(*pan))
    transform.set_zoom(zoom)
    return transform


def test_screen_world_normalized_chain():
    transform = _transform()
    norm = QPointF(0.5, 0.5)
    world = transform.normalized_to_world(norm)
    assert (world.x(), world.y()) == (100.0, 50.0)

    screen = transform.normalized_to_screen(norm)
    assert (screen.x(), screen.y()) == (210.0, 120.0)

    back = transform.screen_to_normalized(screen)
    assert back.x() == pytest.approx(0.5)
    assert back.y() == pytest.approx(0.5)


@pytest.mark.parametrize('pan,zoom', [
    ((0.0, 0.0), 1.0),
    ((-350.0, 42.5), 0.25),
    ((17.0, -900.0), 3.5),
    ((1234.5, 678.9), 12.0),
])
@pytest.mark.parametrize('nx,ny', [(0.0, 0.0), (0.37, 0.81), (1.0, 1.0)])
def test_normalized_round_trip_for_any_view(pan, zoom, nx, ny):
    transform = _transform(pan=pan, zoom=zoom)
    back = transform.screen_to_normalized(transform.normalized_to_screen(QPointF(nx, ny)))
    assert back.x() == pytest.approx(nx)
    assert back.y() == pytest.approx(ny)


def test_normalized_rect_to_screen():
    rect = _transform().normalized_rect_to_screen(NormRect(0.25, 0.5, 0.5, 0.25))
    assert rect.x() == pytest.approx(110.0)
    assert rect.y() == pytest.approx(120.0)
    assert rect.width() == pytest.approx(200.0)
    assert rect.height() == pytest.approx(50.0)


def test_screen_rect_to_normalized_accepts_any_corner_order():
    transform = _transform(pan=(0.0, 0.0), zoom=1.0)
    rect = transform.screen_rect_to_normalized(QPointF(150, 80), QPointF(50, 20))
    assert rect.x == pytest.approx(0.25)
    assert rect.y == pytest.approx(0.2)
    assert rect.w == pytest.approx(0.5)
    assert rect.h == pytest.approx(0.6)


def test_zoom_at_keeps_anchor_fixed():
    transform = _transform()
    anchor = QPointF(130.0, 70.0)
    world_before = transform.screen_to_world(anchor)

    applied = transform.zoom_at(anchor, 3.0)

    assert applied == pytest.approx(3.0)
    assert transform.world_to_screen(world_before).x() == pytest.approx(anchor.x())
    assert transform.world_to_screen(world_before).y() == pytest.approx(anchor.y())


def test_zoom_at_clamps_to_range():
    transform = _transform()
    transform.fit(200.0, 100.0)
    assert transform.zoom_at(QPointF(0, 0), 1000.0) == transform.max_zoom
    assert transform.zoom_at(QPointF(0, 0), 0.0001) == transform.min_zoom


def test_fit_centers_page_and_sets_zoom_range():
    transform = ViewTransform(1000.0, 500.0)
    transform.fit(500.0, 500.0)

    assert transform.zoom == pytest.approx(0.5)
    assert transform.fit_zoom == pytest.approx(0.5)
    assert transform.pan.x() == pytest.approx(0.0)
    assert transform.pan.y() == pytest.approx(125.0)
    assert transform.min_zoom == pytest.approx(0.3)
    assert transform.max_zoom == pytest.approx(3.0)


def test_small_fit_uses_zoom_floors():
    transform = ViewTransform(4000.0, 4000.0)
    transform.fit(100.0, 100.0)
    assert transform.min_zoom == pytest.approx(0.1)
    assert transform.max_zoom == pytest.approx(2.5)


def test_pan_by_is_relative_to_gesture_start():
    transform = _transform()
    start = transform.pan
    transform.pan_by(start, QPointF(5.0, -5.0))
    transform.pan_by(start, QPointF(15.0, 5.0))
    assert (transform.pan.x(), transform.pan.y()) == (25.0, 25.0)
