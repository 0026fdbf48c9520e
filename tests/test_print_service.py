import sqlite3

import pytest

from print_srs.core.page_importer import ImageDecodeError
from print_srs.services.print_service import normalize_subject
from print_srs.services.record_cache import MissingPageError

from .conftest import make_image_bytes


def test_normalize_subject():
    assert normalize_subject('Math') == ('Math', '')
    assert normalize_subject('Other', ' Piano ') == ('Other', 'Piano')
    assert normalize_subject('Chess') == ('Other', 'Chess')
    assert normalize_subject(None) == ('Other', '')


def test_import_creates_print_and_page(print_service, db_service, event_bus):
    added = []
    event_bus.print_added.connect(added.append)

    record = print_service.import_print(make_image_bytes(2000, 1000), title='Spelling', subject='English')

    page = db_service.cache.require_page(record.id)
    assert (page.width, page.height) == (1600, 800)
    assert record.display_subject() == 'English'
    assert added == [record.id]


def test_failed_import_stores_nothing(print_service, db_service):
    with pytest.raises(ImageDecodeError):
        print_service.import_print(b'garbage', title='broken')
    assert db_service.store.count('prints') == 0


def test_rename_and_set_subject(print_service, worksheet, db_service):
    assert print_service.rename_print(worksheet.id, 'Fractions 2')
    assert not print_service.rename_print('missing', 'x')

    assert print_service.set_subject([worksheet.id, 'missing'], 'Other', 'Robotics') == 1
    record = db_service.cache.get_print(worksheet.id)
    assert record.title == 'Fractions 2'
    assert record.display_subject() == 'Robotics'
    assert 'Robotics' in print_service.subjects_in_data()


def test_list_prints_newest_first(print_service):
    first = print_service.import_print(make_image_bytes(), title='first')
    second = print_service.import_print(make_image_bytes(), title='second')
    assert [p.id for p in print_service.list_prints()][:2] == [second.id, first.id]


def test_delete_prints_removes_everything(print_service, editor, worksheet, db_service):
    from print_srs.models.records import NormRect
    editor.draw_mask(NormRect(0.1, 0.1, 0.2, 0.1))

    assert print_service.delete_prints([worksheet.id]) == 1

    for kind in ('prints', 'pages', 'groups', 'masks', 'srs'):
        assert db_service.store.count(kind) == 0
    with pytest.raises(MissingPageError):
        db_service.cache.require_page(worksheet.id)


def test_export_masked_page_returns_png(print_service, editor, worksheet):
    from print_srs.models.records import NormRect
    editor.draw_mask(NormRect(0.0, 0.0, 0.5, 0.5))
    assert print_service.export_masked_page(worksheet.id).startswith(b'\x89PNG')


def test_failed_print_updates_leave_cache_untouched(print_service, worksheet, db_service, failing_writes):
    with pytest.raises(sqlite3.OperationalError):
        print_service.rename_print(worksheet.id, 'Fractions 2')
    with pytest.raises(sqlite3.OperationalError):
        print_service.set_subject([worksheet.id], 'Science')

    record = db_service.cache.get_print(worksheet.id)
    assert record.title == 'Fractions'
    assert record.display_subject() == 'Math'
