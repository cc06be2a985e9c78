from __future__ import annotations

import logging
import os
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Union

from .exceptions import ConfigValidationError
from .hostinfo import find_go_mod, host_goarch, host_goos
from .locks import DEFAULT_LOCK_TIMEOUT
from .mutation import CommitResult, MutationEngine, Operation, Set, Unset, parse_assignment
from .params import REGISTRY, ParamRegistry
from .resolver import ResolvedSnapshot, ResolvedValue, Resolver
from .store import ConfigDocument, EnvFileStore, PersistenceAdapterProtocol, default_store_path

logger = logging.getLogger("env_guard.config")
logger.addHandler(logging.NullHandler())

LOCK_TIMEOUT_ENV = "ENV_GUARD_LOCK_TIMEOUT"


def lock_timeout_from_env(environ: Mapping[str, str]) -> float:
    raw = environ.get(LOCK_TIMEOUT_ENV, "")
    if not raw:
        return DEFAULT_LOCK_TIMEOUT
    try:
        timeout = float(raw)
    except ValueError:
        raise ConfigValidationError({LOCK_TIMEOUT_ENV: f"Expected seconds, got {raw!r}."}) from None
    if timeout < 0:
        raise ConfigValidationError({LOCK_TIMEOUT_ENV: "Must not be negative."})
    return timeout


class EnvConfig:
    """
    Query and update facade over the layered env configuration.

    The process environment is read once, here, and handed to the resolver as
    a read-only layer. Reads never lock the store; writes go through the
    MutationEngine, which holds the store lock across read-modify-write.
    """

    def __init__(
        self,
        store: Optional[Union[PersistenceAdapterProtocol, EnvFileStore]] = None,
        registry: Optional[ParamRegistry] = None,
        environ: Optional[Mapping[str, str]] = None,
        *,
        store_path: Optional[Union[str, Path]] = None,
        lock_timeout: Optional[float] = None,
        cwd: Optional[Union[str, Path]] = None,
    ) -> None:
        self._environ = MappingProxyType(dict(os.environ if environ is None else environ))
        self._registry = registry if registry is not None else REGISTRY
        if store is None:
            if lock_timeout is None:
                lock_timeout = lock_timeout_from_env(self._environ)
            path = store_path if store_path is not None else default_store_path(self._environ)
            store = EnvFileStore(path, lock_timeout=lock_timeout)
        self._store = store
        self._cwd = Path(cwd) if cwd is not None else Path.cwd()
        self._engine = MutationEngine(self._store, self._registry)
        self._document: ConfigDocument = self._store.load()
        logger.debug("EnvConfig ready store=%r entries=%d", self._store, len(self._document))

    @property
    def document(self) -> ConfigDocument:
        return self._document

    @property
    def environ(self) -> Mapping[str, str]:
        return self._environ

    def reload(self) -> None:
        self._document = self._store.load()

    def _computed_values(self) -> Dict[str, str]:
        path = getattr(self._store, "path", None)
        return {
            "GOENV": str(path) if path is not None else "",
            "GOMOD": find_go_mod(self._cwd),
            "GOHOSTOS": host_goos(),
            "GOHOSTARCH": host_goarch(),
        }

    def _resolver(self) -> Resolver:
        return Resolver(self._registry, self._document, self._environ, self._computed_values())

    def snapshot(self) -> ResolvedSnapshot:
        """Resolve every registered key. Raises ConfigValidationError if any value is invalid."""
        return self._resolver().snapshot()

    def resolve(self, key: str) -> ResolvedValue:
        return self._resolver().resolve(key)

    def get(self, key: str) -> str:
        return self.resolve(key).value

    def apply(self, operations: Iterable[Operation], *, passthrough: bool = False) -> List[str]:
        """
        Commit a batch atomically and return the written keys that an environment
        variable still shadows.
        """
        result: CommitResult = self._engine.commit(list(operations), passthrough=passthrough)
        self._document = result.document
        shadowed = [
            k for k in result.keys if self._environ.get(k) and self._document.get(k) is not None
        ]
        for key in shadowed:
            logger.warning("%s is overridden by the process environment", key)
        return shadowed

    def write(self, assignments: Iterable[str], *, passthrough: bool = False) -> List[str]:
        return self.apply([parse_assignment(a) for a in assignments], passthrough=passthrough)

    def set(self, passthrough: bool = False, **values: str) -> List[str]:
        return self.apply([Set(k, v) for k, v in values.items()], passthrough=passthrough)

    def unset(self, keys: Iterable[str], *, passthrough: bool = False) -> List[str]:
        return self.apply([Unset(k) for k in keys], passthrough=passthrough)

    def __getitem__(self, key: str) -> str:
        return self.get(key)

    def __contains__(self, key: str) -> bool:
        return key in self._registry

    def __repr__(self) -> str:
        return f"<EnvConfig store={self._store!r}>"
