import threading
import time

import pytest

from env_guard.exceptions import ConfigLockedError, ErrorKind
from env_guard.locks import FileLock


def test_filelock_uses_sidecar_file(tmp_path):
    target = tmp_path / "env"
    lock = FileLock(target, timeout=1)
    assert lock.lock_file == tmp_path / "env.lock"
    assert lock.acquired is False
    with lock:
        assert lock.acquired is True
        assert lock.lock_file.exists()
    assert lock.acquired is False


def test_filelock_contention_fails_fast_with_zero_timeout(tmp_path):
    target = tmp_path / "env"
    with FileLock(target):
        with pytest.raises(ConfigLockedError) as exc:
            FileLock(target, timeout=0).acquire()
    assert exc.value.kind is ErrorKind.LOCKED
    assert exc.value.path == str(target)


def test_filelock_bounded_wait_expires(tmp_path):
    target = tmp_path / "env"
    with FileLock(target):
        start = time.monotonic()
        with pytest.raises(ConfigLockedError):
            FileLock(target, timeout=0.2, poll_interval=0.02).acquire()
        assert time.monotonic() - start >= 0.2


def test_filelock_waits_for_holder_to_release(tmp_path):
    target = tmp_path / "env"
    held = threading.Event()

    def holder():
        with FileLock(target):
            held.set()
            time.sleep(0.2)

    t = threading.Thread(target=holder)
    t.start()
    try:
        assert held.wait(5)
        with FileLock(target, timeout=5) as lock:
            assert lock.acquired
    finally:
        t.join()


def test_filelock_is_reentrant(tmp_path):
    lock = FileLock(tmp_path / "env", timeout=0)
    with lock:
        with lock:
            assert lock.acquired
        assert lock.acquired
    assert lock.acquired is False


def test_filelock_released_after_exception(tmp_path):
    target = tmp_path / "env"
    with pytest.raises(RuntimeError):
        with FileLock(target):
            raise RuntimeError("write failed")
    with FileLock(target, timeout=0) as again:
        assert again.acquired


def test_filelock_rejects_negative_timeout(tmp_path):
    with pytest.raises(ValueError):
        FileLock(tmp_path / "env", timeout=-1)


def test_release_without_acquire_is_noop(tmp_path):
    FileLock(tmp_path / "env").release()


def _hold_in_thread(lock, release):
    held = threading.Event()

    def holder():
        with lock:
            held.set()
            release.wait(5)

    t = threading.Thread(target=holder)
    t.start()
    assert held.wait(5)
    return t


def test_shared_filelock_fails_fast_across_threads(tmp_path):
    lock = FileLock(tmp_path / "env", timeout=0)
    release = threading.Event()
    t = _hold_in_thread(lock, release)
    try:
        start = time.monotonic()
        with pytest.raises(ConfigLockedError):
            lock.acquire()
        assert time.monotonic() - start < 1
    finally:
        release.set()
        t.join()
    assert lock.acquired is False


def test_shared_filelock_bounded_wait_across_threads(tmp_path):
    lock = FileLock(tmp_path / "env", timeout=0.2, poll_interval=0.02)
    release = threading.Event()
    t = _hold_in_thread(lock, release)
    try:
        start = time.monotonic()
        with pytest.raises(ConfigLockedError):
            lock.acquire()
        elapsed = time.monotonic() - start
        assert 0.2 <= elapsed < 2
    finally:
        release.set()
        t.join()
    with lock:
        assert lock.acquired
