import logging
import os

from logging.handlers import RotatingFileHandler

logger = logging.getLogger("repobackup")
logger.setLevel(logging.INFO)

if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(levelname)s - %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def add_file_handler(log_file, max_bytes=10 * 1024 * 1024, backup_count=5):
    """
    Mirror the package logger into a rotating log file.

    Used by the daemon, whose stdout usually ends up in the service manager's
    journal only. Calling it twice for the same file is a no-op.
    """
    log_file = os.path.expanduser(str(log_file))
    for existing in logger.handlers:
        if isinstance(existing, RotatingFileHandler) and existing.baseFilename == os.path.abspath(log_file):
            return existing

    os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
    file_handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count)
    file_handler.setFormatter(logging.Formatter('%(asctime)s [%(levelname)s] %(message)s'))
    logger.addHandler(file_handler)
    return file_handler
