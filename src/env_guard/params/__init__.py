from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Tuple

from .defaults import builtin_specs
from .registry import ParamRegistry
from .spec import ParamSpec

if TYPE_CHECKING:
    from env_guard.validation.protocol import ValidatorProtocol

logger = logging.getLogger("env_guard.params")
logger.addHandler(logging.NullHandler())

__all__ = [
    "ParamSpec",
    "ParamRegistry",
    "REGISTRY",
    "build_registry",
    "register_param",
    "get_param_spec",
    "list_params",
    "resolve_param_name",
    "get_all_specs",
]


def build_registry() -> ParamRegistry:
    """Return a fresh registry holding the built-in Go toolchain keys."""
    registry = ParamRegistry()
    for spec in builtin_specs():
        registry.register(spec)
    logger.debug("Built registry with %d builtin keys", len(registry))
    return registry


REGISTRY = build_registry()


def register_param(
    name: str,
    *,
    default: str = "",
    kind: str = "string",
    choices: Optional[Tuple[str, ...]] = None,
    pattern: Optional[str] = None,
    validator: Optional[ValidatorProtocol] = None,
    multiple: bool = False,
    computed: bool = False,
    description: str | None = None,
    override: bool = False,
) -> None:
    REGISTRY.register(
        ParamSpec(
            name=name,
            default=default,
            kind=kind,
            choices=choices,
            pattern=pattern,
            validator=validator,
            multiple=multiple,
            computed=computed,
            description=description,
        ),
        override=override,
    )


def get_param_spec(key: str) -> ParamSpec:
    return REGISTRY.lookup(key)


def resolve_param_name(key: str) -> str:
    return REGISTRY.resolve_name(key)


def list_params() -> Tuple[str, ...]:
    return REGISTRY.all_names()


def get_all_specs() -> Mapping[str, Dict[str, Any]]:
    return {spec.name: spec.to_mapping() for spec in REGISTRY.all()}
