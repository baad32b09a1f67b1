"""Tests for the logging setup."""
import logging

import pytest

from trellis.core.logger import LOG_FILE_NAME, THIRD_PARTY_LOGGERS, LogNoiseFilter, get_logger, setup_logging


@pytest.fixture()
def restore_logging():
    root = logging.getLogger()
    saved = (root.level, list(root.handlers))
    third_party = {name: (logging.getLogger(name).level, list(logging.getLogger(name).handlers), logging.getLogger(name).propagate)
                   for name in THIRD_PARTY_LOGGERS}
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(saved[0])
    for handler in saved[1]:
        root.addHandler(handler)
    for name, (level, handlers, propagate) in third_party.items():
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.handlers = handlers
        logger.propagate = propagate


def _record(message):
    return logging.LogRecord("socket", logging.INFO, __file__, 1, message, None, None)


def test_noise_filter_drops_socket_chatter_unless_debugging():
    assert not LogNoiseFilter(debug=False).filter(_record("socket.io connection open"))
    assert LogNoiseFilter(debug=False).filter(_record("🗺️ 12 Seiten gemountet"))
    assert LogNoiseFilter(debug=True).filter(_record("socket.io connection open"))


def test_file_receives_debug_messages(tmp_path, restore_logging):
    root = setup_logging(log_dir=str(tmp_path / "logs"), debug=False)
    get_logger("Pages").debug("nur in der Datei")
    for handler in root.handlers:
        handler.flush()

    content = (tmp_path / "logs" / LOG_FILE_NAME).read_text(encoding="utf-8")
    assert "nur in der Datei" in content
    assert "Trellis Logging initialisiert" in content
    assert logging.getLogger("uvicorn.access").level == logging.WARNING
    assert logging.getLogger("uvicorn.access").propagate is False


def test_setup_without_log_dir_only_logs_to_console(restore_logging):
    root = setup_logging(log_dir=None, debug=True)
    assert len(root.handlers) == 1
    assert root.handlers[0].level == logging.DEBUG
