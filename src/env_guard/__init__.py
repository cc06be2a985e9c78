"""
env-guard: a layered configuration store modeled after ``go env``.

- Resolves each key from the process environment, then the persisted env file,
  then the built-in default.
- Edits the env file in place, keeping comments, unknown keys and formatting.
- Applies batches of changes all-or-nothing under an exclusive file lock.
- Reports every failure as a ConfigError carrying its ErrorKind.
"""

from __future__ import annotations

from env_guard.config import EnvConfig
from env_guard.exceptions import (
    ConfigDuplicateError,
    ConfigError,
    ConfigIOError,
    ConfigLockedError,
    ConfigNotFoundError,
    ConfigParseError,
    ConfigValidationError,
    ErrorKind,
)
from env_guard.mutation import MutationEngine, Set, Unset
from env_guard.params import (
    REGISTRY,
    ParamRegistry,
    ParamSpec,
    get_all_specs,
    get_param_spec,
    list_params,
    register_param,
    resolve_param_name,
)
from env_guard.resolver import Layer, ResolvedSnapshot, ResolvedValue, Resolver
from env_guard.store import ConfigDocument, EnvFileStore
from env_guard.validation import ValidatorProtocol

__all__ = [
    "EnvConfig",
    "ConfigDocument",
    "EnvFileStore",
    "MutationEngine",
    "Set",
    "Unset",
    "Resolver",
    "ResolvedSnapshot",
    "ResolvedValue",
    "Layer",
    "REGISTRY",
    "ParamRegistry",
    "ParamSpec",
    "register_param",
    "get_param_spec",
    "list_params",
    "resolve_param_name",
    "get_all_specs",
    "ValidatorProtocol",
    "ErrorKind",
    "ConfigError",
    "ConfigValidationError",
    "ConfigNotFoundError",
    "ConfigDuplicateError",
    "ConfigParseError",
    "ConfigIOError",
    "ConfigLockedError",
]
