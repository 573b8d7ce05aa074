from logging.handlers import RotatingFileHandler

import pytest

from repobackup.log import add_file_handler, logger


@pytest.fixture
def handlers():
    added = []
    yield added
    for handler in added:
        logger.removeHandler(handler)
        handler.close()


def test_file_handler_writes_log_lines(tmp_path, handlers):
    log_file = tmp_path / "logs" / "repobackup.log"

    handler = add_file_handler(log_file)
    handlers.append(handler)
    logger.info("daemon started")
    handler.flush()

    assert isinstance(handler, RotatingFileHandler)
    assert "[INFO] daemon started" in log_file.read_text()


def test_file_handler_is_added_once(tmp_path, handlers):
    log_file = tmp_path / "repobackup.log"

    first = add_file_handler(log_file, max_bytes=1024, backup_count=2)
    handlers.append(first)
    second = add_file_handler(log_file)

    assert first is second
    assert [h for h in logger.handlers if isinstance(h, RotatingFileHandler)] == [first]
    assert (first.maxBytes, first.backupCount) == (1024, 2)