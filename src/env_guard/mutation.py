from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from .exceptions import ConfigValidationError
from .params import REGISTRY, ParamRegistry
from .store.adaptors import PersistenceAdapterProtocol
from .store.document import ConfigDocument, Entry
from .validation import ConfigValidator

logger = logging.getLogger("env_guard.mutation")
logger.addHandler(logging.NullHandler())


@dataclass(frozen=True)
class Set:
    key: str
    value: str


@dataclass(frozen=True)
class Unset:
    key: str


Operation = Union[Set, Unset]


def parse_assignment(text: str) -> Set:
    """Turn a ``KEY=value`` argument into a Set operation."""
    key, sep, value = text.partition("=")
    if not sep or not key.strip():
        raise ConfigValidationError({text: "Expected KEY=value."})
    return Set(key.strip(), value)


@dataclass(frozen=True)
class CommitResult:
    document: ConfigDocument
    written: bool
    keys: Tuple[str, ...]


class MutationEngine:
    """
    Apply batches of Set/Unset operations to a ConfigDocument, all or nothing.

    Every operation is checked before any is applied; the first invalid one
    rejects the whole batch and the input document is left as it was.
    """

    def __init__(
        self,
        store: Optional[PersistenceAdapterProtocol] = None,
        registry: Optional[ParamRegistry] = None,
    ) -> None:
        self._store = store
        self._registry = registry if registry is not None else REGISTRY

    def apply(
        self, doc: ConfigDocument, operations: Sequence[Operation], *, passthrough: bool = False
    ) -> ConfigDocument:
        checked = self._check(operations, passthrough)
        entries: List[Entry] = list(doc.entries)
        for op in checked:
            if isinstance(op, Set):
                entries = _set_entry(entries, op.key, op.value)
            else:
                entries = [e for e in entries if e.key != op.key]
        return doc.replace_entries(entries)

    def commit(self, operations: Sequence[Operation], *, passthrough: bool = False) -> CommitResult:
        if self._store is None:
            raise RuntimeError("No store set for committing changes")
        checked = self._check(operations, passthrough)
        keys = tuple(op.key for op in checked)
        with self._store.transaction() as current:
            updated = self.apply(current, checked, passthrough=passthrough)
            if updated.serialize() == current.serialize():
                logger.debug("Commit of keys=%s changed nothing; skipping write", list(keys))
                return CommitResult(current, False, keys)
            self._store.save(updated)
        logger.info("Committed keys=%s", list(keys))
        return CommitResult(updated, True, keys)

    def _check(self, operations: Sequence[Operation], passthrough: bool) -> List[Operation]:
        validator = ConfigValidator(self._registry, passthrough=passthrough)
        checked: List[Operation] = []
        for op in operations:
            if isinstance(op, Set):
                checked.append(Set(validator.check_set(op.key, op.value), op.value))
            elif isinstance(op, Unset):
                checked.append(Unset(validator.check_unset(op.key)))
            else:
                raise TypeError(f"Unsupported operation {op!r}")
        return checked


def _set_entry(entries: List[Entry], key: str, value: str) -> List[Entry]:
    out: List[Entry] = []
    replaced = False
    for entry in entries:
        if entry.key != key:
            out.append(entry)
        elif not replaced:
            # Rewrite in place; later duplicates of a hand-edited file are dropped.
            out.append(Entry.pair(key, value, entry.line_ending))
            replaced = True
    if not replaced:
        if out and not out[-1].line_ending:
            last = out[-1]
            out[-1] = Entry(last.raw + "\n", last.key, last.value)
        out.append(Entry.pair(key, value))
    return out
