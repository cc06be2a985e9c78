from __future__ import annotations

import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Mapping, Optional, Tuple, Union

from env_guard.exceptions import ConfigIOError, ConfigParseError
from env_guard.hostinfo import user_config_dir
from env_guard.locks import DEFAULT_LOCK_TIMEOUT, FileLock

from .document import ConfigDocument

logger = logging.getLogger("env_guard.store")
logger.addHandler(logging.NullHandler())

DISABLED = "off"


def default_store_path(environ: Mapping[str, str]) -> Optional[Path]:
    """
    Locate the env file: ``GOENV`` if set, else ``<user config dir>/go/env``.

    Returns None when the store is disabled (``GOENV=off``) or no config
    directory can be determined.
    """
    goenv = environ.get("GOENV", "")
    if goenv == DISABLED:
        return None
    if goenv:
        return Path(goenv)
    config_dir = user_config_dir()
    return config_dir / "go" / "env" if config_dir is not None else None


class EnvFileStore:
    def __init__(
        self,
        path: Optional[Union[str, Path]],
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
    ) -> None:
        self._path = Path(path) if path is not None else None
        self._lock = FileLock(self._path, timeout=lock_timeout) if self._path is not None else None
        logger.debug("EnvFileStore init path=%s lock_timeout=%s", self._path, lock_timeout)

    @property
    def path(self) -> Optional[Path]:
        return self._path

    @property
    def disabled(self) -> bool:
        return self._path is None

    def load(self) -> ConfigDocument:
        if self._path is None:
            return ConfigDocument()
        try:
            data = self._path.read_bytes()
        except FileNotFoundError:
            logger.debug("No env file at %s; starting empty", self._path)
            return ConfigDocument(path=str(self._path))
        except OSError as exc:
            logger.error("Error reading %s: %s", self._path, exc)
            raise ConfigIOError(str(self._path), exc.strerror or str(exc)) from exc
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            line_no = data[: exc.start].count(b"\n") + 1
            line = data.split(b"\n")[line_no - 1].decode("utf-8", errors="replace")
            raise ConfigParseError(str(self._path), line_no, line, "invalid UTF-8") from exc
        return ConfigDocument.parse(text, str(self._path))

    def save(self, doc: ConfigDocument) -> None:
        path, lock = self._require_enabled()
        with lock:
            self._write_atomic(path, doc.serialize().encode("utf-8"))
        logger.debug("Saved %d entries to %s", len(doc), path)

    @contextmanager
    def transaction(self) -> Iterator[ConfigDocument]:
        """Hold the write lock across load and save; yields the freshly loaded document."""
        _, lock = self._require_enabled()
        with lock:
            yield self.load()

    def _require_enabled(self) -> Tuple[Path, FileLock]:
        if self._path is None or self._lock is None:
            raise ConfigIOError("GOENV", "env file is disabled by GOENV=off")
        return self._path, self._lock

    @staticmethod
    def _write_atomic(path: Path, data: bytes) -> None:
        tmp_name: Optional[str] = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
            if path.exists():
                os.chmod(tmp_name, path.stat().st_mode & 0o777)
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            logger.error("Error writing %s: %s", path, exc)
            raise ConfigIOError(str(path), exc.strerror or str(exc)) from exc
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

    def __repr__(self) -> str:
        return f"<EnvFileStore path={self._path}>"
