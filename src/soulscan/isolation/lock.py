"""Exclusive lock on the data directory for the duration of a scan."""

import logging
import os
from pathlib import Path

from soulscan.errors import FatalIOError, ScanInProgressError

logger = logging.getLogger(__name__)


class ScanLock:
    """Non-blocking flock on <data>/.lock. No-op where fcntl is unavailable."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._fd: int | None = None

    def acquire(self) -> None:
        if os.name != "posix":
            logger.debug("File locking not supported on %s, scanning unlocked", os.name)
            return

        import fcntl

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self.path, os.O_RDWR | os.O_CREAT, 0o600)
        except OSError as e:
            raise FatalIOError(f"Cannot open lock file {self.path}: {e}") from e

        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError as e:
            os.close(fd)
            raise ScanInProgressError(f"Another soulscan run holds {self.path}") from e
        except OSError as e:
            os.close(fd)
            raise FatalIOError(f"Cannot lock {self.path}: {e}") from e
        self._fd = fd

    def release(self) -> None:
        if self._fd is None:
            return
        import fcntl

        fcntl.flock(self._fd, fcntl.LOCK_UN)
        os.close(self._fd)
        self._fd = None

    def __enter__(self) -> "ScanLock":
        self.acquire()
        return self

    def __exit__(self, *exc: object) -> None:
        self.release()
