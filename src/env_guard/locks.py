from __future__ import annotations

import fcntl
import logging
import threading
import time
from pathlib import Path
from types import TracebackType
from typing import IO, NoReturn, Optional, Type

from .exceptions import ConfigIOError, ConfigLockedError

logger = logging.getLogger("env_guard.locks")
logger.addHandler(logging.NullHandler())

DEFAULT_LOCK_TIMEOUT = 5.0


class FileLock:
    """
    Exclusive advisory lock on a sidecar ``<path>.lock`` file.

    The target itself is replaced atomically on save, so the lock cannot live on
    its inode. Waits up to ``timeout`` seconds (0 fails fast) and raises
    ConfigLockedError on expiry. Re-entrant for the holder of this object.
    """

    def __init__(
        self, file_path: Path, timeout: float = DEFAULT_LOCK_TIMEOUT, poll_interval: float = 0.05
    ) -> None:
        if timeout < 0:
            raise ValueError("timeout must be >= 0")
        self.file_path = Path(file_path)
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.lock_file = self.file_path.with_name(self.file_path.name + ".lock")
        self._lock_fd: Optional[IO[str]] = None
        self._depth = 0
        self._guard = threading.RLock()

    @property
    def acquired(self) -> bool:
        return self._depth > 0

    def acquire(self) -> None:
        deadline = time.monotonic() + self.timeout
        # Threads sharing this object wait on the guard within the same budget.
        if self.timeout == 0:
            guarded = self._guard.acquire(blocking=False)
        else:
            guarded = self._guard.acquire(timeout=self.timeout)
        if not guarded:
            self._timed_out()
        if self._depth > 0:
            self._depth += 1
            return
        try:
            self._lock_fd = self._open_lock_file()
            self._wait_for_lock(self._lock_fd, deadline)
        except BaseException:
            self._close()
            self._guard.release()
            raise
        self._depth = 1
        logger.debug("Acquired lock: %s", self.lock_file)

    def release(self) -> None:
        if self._depth == 0:
            return
        self._depth -= 1
        if self._depth == 0:
            try:
                if self._lock_fd is not None:
                    fcntl.flock(self._lock_fd.fileno(), fcntl.LOCK_UN)
            finally:
                self._close()
                logger.debug("Released lock: %s", self.lock_file)
        self._guard.release()

    def _open_lock_file(self) -> IO[str]:
        try:
            self.lock_file.parent.mkdir(parents=True, exist_ok=True)
            return open(self.lock_file, "a")
        except OSError as exc:
            raise ConfigIOError(str(self.lock_file), exc.strerror or str(exc)) from exc

    def _wait_for_lock(self, fd: IO[str], deadline: float) -> None:
        while True:
            try:
                fcntl.flock(fd.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                return
            except BlockingIOError:
                if time.monotonic() >= deadline:
                    self._timed_out()
                time.sleep(self.poll_interval)

    def _timed_out(self) -> NoReturn:
        logger.error("Lock timeout after %ss: %s", self.timeout, self.lock_file)
        raise ConfigLockedError(str(self.file_path), self.timeout) from None

    def _close(self) -> None:
        if self._lock_fd is not None:
            self._lock_fd.close()
            self._lock_fd = None

    def __enter__(self) -> "FileLock":
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.release()
