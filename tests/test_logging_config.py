import logging

import pytest

from print_srs.utils.logging_config import LoggingConfig


@pytest.fixture
def fresh_logging(monkeypatch):
    monkeypatch.setattr(LoggingConfig, '_initialized', False)
    monkeypatch.setattr(LoggingConfig, '_log_file_path', None)
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers[:]:
        if handler not in before:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def test_setup_writes_log_file_once(tmp_path, fresh_logging):
    LoggingConfig.setup_logging(tmp_path / 'logs')
    added = len(fresh_logging.handlers)
    LoggingConfig.setup_logging(tmp_path / 'other')

    log_file = LoggingConfig.get_log_file_path()
    assert log_file == tmp_path / 'logs' / 'print_srs.log'
    assert len(fresh_logging.handlers) == added
    assert not (tmp_path / 'other').exists()

    LoggingConfig.get_logger('print_srs.test').debug('gesture trace')
    for handler in fresh_logging.handlers:
        handler.flush()
    assert 'gesture trace' in log_file.read_text(encoding='utf-8')


def test_console_level_follows_verbose(tmp_path, fresh_logging):
    before = set(fresh_logging.handlers)
    LoggingConfig.setup_logging(tmp_path, verbose=True)

    console = [
        h for h in fresh_logging.handlers
        if h not in before and type(h) is logging.StreamHandler
    ]
    assert [h.level for h in console] == [logging.DEBUG]
