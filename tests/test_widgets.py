import pytest
from PyQt6.QtCore import QPointF, QSize
from PyQt6.QtGui import QResizeEvent

from print_srs.config import Config
from print_srs.models.records import NormRect
from print_srs.services.review_session import ReviewSession
from print_srs.widgets.edit_canvas import EditCanvas
from print_srs.widgets.main_window import MainWindow
from print_srs.widgets.review_canvas import ReviewCanvas


@pytest.fixture
def user_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(Config, 'get_user_data_dir', classmethod(lambda cls: tmp_path))
    return tmp_path


def test_edit_canvas_paints_page_and_masks(qapp, editor):
    editor.draw_mask(NormRect(0.1, 0.1, 0.3, 0.2))
    canvas = EditCanvas(editor)
    canvas.resize(400, 300)
    canvas.reload()

    assert canvas.transform.page_size.width() == editor.page.width
    assert not canvas.grab().isNull()


def _resize(canvas, width, height):
    old = canvas.size()
    canvas.resize(width, height)
    canvas.resizeEvent(QResizeEvent(QSize(width, height), old))


def test_resize_refits_only_while_fitted(qapp, editor):
    canvas = EditCanvas(editor)
    canvas.resize(400, 300)
    canvas.reload()
    fitted_zoom = canvas.transform.zoom

    _resize(canvas, 800, 600)
    assert canvas.is_at_fit()
    assert canvas.transform.zoom == pytest.approx(fitted_zoom * 2)

    canvas.zoom_in()
    zoom, pan = canvas.transform.zoom, canvas.transform.pan
    assert not canvas.is_at_fit()

    _resize(canvas, 500, 500)
    assert canvas.transform.zoom == pytest.approx(zoom)
    assert canvas.transform.pan == pan

    canvas.fit_to_view()
    assert canvas.is_at_fit()


def test_review_canvas_tap_reveals_mask(qapp, db_service, event_bus, editor):
    mask = editor.draw_mask(NormRect(0.0, 0.0, 0.5, 0.5))
    session = ReviewSession(db_service, event_bus=event_bus)
    session.start_practice([mask.group_id])

    canvas = ReviewCanvas(session)
    canvas.resize(400, 300)
    canvas.reload()
    canvas.fit_to_view()

    target = canvas.transform.normalized_to_screen(QPointF(0.25, 0.25))
    canvas.engine.pointer_down(1, target)
    canvas.engine.pointer_up(1, target)

    assert session.revealed == {mask.id}
    assert not canvas.grab().isNull()


def test_main_window_opens_selected_print(qapp, user_dir, db_service, event_bus, worksheet):
    window = MainWindow(db_service=db_service, event_bus=event_bus)

    window._select_print(worksheet.id)

    assert window._stack.currentIndex() == MainWindow.EDIT_PAGE
    assert window._editor.print_id == worksheet.id
    assert window._due_label.text() == "Today: 1 due"
