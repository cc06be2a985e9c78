from __future__ import annotations

import logging
import re
from typing import Dict, Mapping, Optional

from env_guard.exceptions import ConfigNotFoundError, ConfigValidationError
from env_guard.params import REGISTRY, ParamRegistry

logger = logging.getLogger("env_guard.validation")
logger.addHandler(logging.NullHandler())

KEY_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


class ConfigValidator:
    """
    Registry-aware checks for values and for set/unset requests.

    With ``passthrough`` enabled, keys the registry does not know are accepted
    verbatim as long as they are syntactically valid names.
    """

    def __init__(self, registry: Optional[ParamRegistry] = None, *, passthrough: bool = False):
        self._registry = registry if registry is not None else REGISTRY
        self._passthrough = passthrough

    def validate_value(self, key: str, value: str) -> None:
        spec = self._registry.lookup(key)
        try:
            spec.validate(value)
        except ConfigValidationError as exc:
            logger.error("Validation error for %s: %s", key, exc.errors)
            raise ConfigValidationError(exc.errors, self._registry.resolve_name(key), value) from None

    def validate_mapping(self, mapping: Mapping[str, str]) -> None:
        errors: Dict[str, str] = {}
        for k, v in mapping.items():
            try:
                self.validate_value(k, v)
            except ConfigValidationError as exc:
                errors.update(exc.errors)
        if errors:
            raise ConfigValidationError(errors)

    def check_set(self, key: str, value: str) -> str:
        """Validate a write and return the name the key is stored under."""
        name = self._writable_name(key)
        if name in self._registry:
            self.validate_value(name, value)
        elif "\n" in value or "\r" in value or "\0" in value:
            raise ConfigValidationError({name: "Value must be a single line."}, name, value)
        return name

    def check_unset(self, key: str) -> str:
        return self._writable_name(key)

    def _writable_name(self, key: str) -> str:
        try:
            spec = self._registry.lookup(key)
        except ConfigNotFoundError:
            if not self._passthrough:
                raise
            name = key.strip()
            if not KEY_PATTERN.fullmatch(name):
                raise ConfigValidationError({key: "Invalid key name."}) from None
            logger.debug("Passthrough key %r accepted without validation", name)
            return name
        name = self._registry.resolve_name(spec.name)
        if spec.computed:
            logger.error("Rejected write to computed key %s", name)
            raise ConfigValidationError({name: "Computed by the toolchain; cannot be modified."})
        return name
