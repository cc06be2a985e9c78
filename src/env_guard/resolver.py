from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Tuple

from .params import ParamRegistry
from .store.document import ConfigDocument
from .validation import ConfigValidator

logger = logging.getLogger("env_guard.resolver")
logger.addHandler(logging.NullHandler())


class Layer(enum.Enum):
    """Where an effective value came from, highest precedence first."""

    OVERRIDE = "env"
    PERSISTED = "file"
    DEFAULT = "default"


@dataclass(frozen=True)
class ResolvedValue:
    key: str
    value: str
    origin: Layer


class ResolvedSnapshot(Mapping[str, ResolvedValue]):
    """Effective value of every known key, ordered lexicographically by name."""

    def __init__(self, values: Mapping[str, ResolvedValue]) -> None:
        self._values: Dict[str, ResolvedValue] = {k: values[k] for k in sorted(values)}

    def __getitem__(self, key: str) -> ResolvedValue:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def as_dict(self) -> Dict[str, str]:
        return {k: v.value for k, v in self._values.items()}

    def origins(self) -> Dict[str, Layer]:
        return {k: v.origin for k, v in self._values.items()}

    def render(self) -> str:
        return "".join(f"{k}={shell_quote(v.value)}\n" for k, v in self._values.items())

    def to_json(self) -> str:
        return json.dumps(self.as_dict(), indent=1)

    def __repr__(self) -> str:
        return f"<ResolvedSnapshot keys={len(self._values)}>"


def shell_quote(value: str) -> str:
    return "'" + value.replace("'", "'\\''") + "'"


class Resolver:
    """
    Resolve keys across the override, persisted and default layers.

    ``environ`` is captured once by the caller and treated as read-only. An
    override that is present but empty counts as unset. ``computed`` supplies
    defaults that are only known at run time (store location, go.mod).
    """

    def __init__(
        self,
        registry: ParamRegistry,
        document: ConfigDocument,
        environ: Mapping[str, str],
        computed: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._registry = registry
        self._validator = ConfigValidator(registry)
        self._document = document
        self._environ = MappingProxyType(dict(environ))
        self._computed = dict(computed or {})

    def resolve(self, key: str) -> ResolvedValue:
        resolved = self._resolve_unchecked(key)
        if resolved.origin is not Layer.DEFAULT:
            self._validator.validate_value(resolved.key, resolved.value)
        return resolved

    def snapshot(self) -> ResolvedSnapshot:
        values = {name: self._resolve_unchecked(name) for name in self._registry.all_names()}
        # Defaults were validated at registration.
        self._validator.validate_mapping(
            {k: v.value for k, v in values.items() if v.origin is not Layer.DEFAULT}
        )
        return ResolvedSnapshot(values)

    def _resolve_unchecked(self, key: str) -> ResolvedValue:
        spec = self._registry.lookup(key)
        name = self._registry.resolve_name(spec.name)
        value, origin = self._lookup_layers(name, spec.default)
        logger.debug("Resolved %s=%r from %s", name, value, origin.value)
        return ResolvedValue(name, value, origin)

    def _lookup_layers(self, name: str, default: str) -> Tuple[str, Layer]:
        override = self._environ.get(name, "")
        if override:
            return override, Layer.OVERRIDE
        persisted = self._document.get(name)
        if persisted is not None:
            return persisted, Layer.PERSISTED
        return self._computed.get(name, default), Layer.DEFAULT
