import fcntl
import os
import tempfile

from contextlib import contextmanager
from pathlib import Path

from repobackup.exceptions import BackupInProgressError, PreconditionError
from repobackup.globals import Globals
from repobackup.log import logger


def default_lock_path() -> Path:
    return Path(tempfile.gettempdir()) / Globals.LOCK_FILE_NAME


def acquire_lock(lock_path: Path):
    """
    Take a non-blocking exclusive lock on `lock_path` and write our PID into it.

    Returns:
        file | None: The open lock file, or None if another process holds it.

    Raises:
        PreconditionError: If the lock file cannot be opened, e.g. it was
        created by another user without write permission for us.
    """
    try:
        lock_path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(lock_path, os.O_RDWR | os.O_CREAT, Globals.LOCK_FILE_MODE)
    except OSError as e:
        raise PreconditionError(f"Cannot open run lock {lock_path}: {e}")

    try:
        # Shared temp dir: root and regular users must both be able to lock it
        os.fchmod(fd, Globals.LOCK_FILE_MODE)
    except OSError:
        logger.debug(f"Could not change the mode of {lock_path}; it belongs to another user")

    f = os.fdopen(fd, "r+")
    try:
        fcntl.flock(f.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
    except BlockingIOError:
        f.close()
        return None

    f.seek(0)
    f.truncate()
    f.write(str(os.getpid()))
    f.flush()
    return f


def release_lock(fh):
    try:
        fcntl.flock(fh.fileno(), fcntl.LOCK_UN)
    finally:
        fh.close()


@contextmanager
def run_lock(lock_path=None):
    """Hold the run lock for the duration of the block."""
    lock_path = Path(lock_path) if lock_path is not None else default_lock_path()
    fh = acquire_lock(lock_path)
    if fh is None:
        raise BackupInProgressError(f"Another backup run holds the lock {lock_path}")

    logger.debug(f"Acquired run lock {lock_path}")
    try:
        yield
    finally:
        release_lock(fh)
