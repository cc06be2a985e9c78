from __future__ import annotations

import logging
from typing import Dict, Tuple

from env_guard.exceptions import ConfigDuplicateError, ConfigNotFoundError

from .spec import ParamSpec

logger = logging.getLogger("env_guard.params")
logger.addHandler(logging.NullHandler())


class ParamRegistry:
    def __init__(self) -> None:
        self._specs: Dict[str, ParamSpec] = {}
        logger.debug("ParamRegistry initialized id=%s", hex(id(self)))

    @staticmethod
    def _canon(name: str) -> str:
        return name.strip().upper()

    def register(self, spec: ParamSpec, override: bool = False) -> None:
        key = self._canon(spec.name)
        logger.debug("Register called: name=%r canon=%r override=%s", spec.name, key, override)
        if not override and key in self._specs:
            logger.error("Register failed: %r already registered", key)
            raise ConfigDuplicateError(key)
        # An empty default means "not set"; anything else must satisfy the key's own rules.
        if spec.default:
            spec.validate(spec.default)
        self._specs[key] = spec
        logger.debug("Register complete: specs=%d", len(self._specs))

    def has(self, name: str) -> bool:
        return self._canon(name) in self._specs

    def lookup(self, name: str) -> ParamSpec:
        key = self._canon(name)
        try:
            spec = self._specs[key]
        except KeyError:
            logger.debug("Lookup(%r) missed | specs=%d", name, len(self._specs))
            raise ConfigNotFoundError(key) from None
        logger.debug("Lookup(%r) -> %r", name, key)
        return spec

    def resolve_name(self, name: str) -> str:
        return self._canon(self.lookup(name).name)

    def all_names(self) -> Tuple[str, ...]:
        return tuple(sorted(self._specs.keys()))

    def all(self) -> Tuple[ParamSpec, ...]:
        return tuple(self._specs[name] for name in self.all_names())

    def clear(self) -> None:
        logger.debug("Clearing registry: specs=%d", len(self._specs))
        self._specs.clear()

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def __len__(self) -> int:
        return len(self._specs)
