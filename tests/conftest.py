"""Shared fixtures: headless Qt, temporary databases and sample worksheets."""

import io
import os
import sqlite3
import sys

# Offscreen platform for Qt
os.environ['QT_QPA_PLATFORM'] = 'offscreen'

import pytest
from PIL import Image
from PyQt6.QtWidgets import QApplication

from print_srs.events.event_bus import EventBus
from print_srs.services.database import StoreTransaction
from print_srs.services.database_service import DatabaseService
from print_srs.services.mask_editor import MaskEditor
from print_srs.services.print_service import PrintService

_app = QApplication.instance() or QApplication(sys.argv)


def make_image_bytes(width: int = 400, height: int = 300, color=(255, 255, 255), fmt: str = 'PNG') -> bytes:
    """Encode a plain test image."""
    buffer = io.BytesIO()
    Image.new('RGB', (width, height), color).save(buffer, fmt)
    return buffer.getvalue()


@pytest.fixture
def qapp():
    return _app


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def db_service(tmp_path):
    service = DatabaseService(tmp_path / 'print_srs_test.db')
    yield service
    service.close()


@pytest.fixture
def print_service(db_service, event_bus):
    return PrintService(db_service, event_bus=event_bus)


@pytest.fixture
def worksheet(print_service):
    return print_service.import_print(make_image_bytes(), title='Fractions', subject='Math')


@pytest.fixture
def editor(db_service, event_bus, worksheet):
    mask_editor = MaskEditor(db_service, event_bus)
    mask_editor.load(worksheet.id)
    return mask_editor


@pytest.fixture
def failing_writes(monkeypatch, db_service):
    """Make every store write raise, as a full disk would."""
    def fail(*args, **kwargs):
        raise sqlite3.OperationalError('disk I/O error')

    monkeypatch.setattr(db_service.store, 'put', fail)
    monkeypatch.setattr(StoreTransaction, 'put', fail)
