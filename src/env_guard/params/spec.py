from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple

from env_guard.exceptions import ConfigValidationError

if TYPE_CHECKING:
    from env_guard.validation.protocol import ValidatorProtocol

KINDS = ("string", "enum", "path", "bool")
BOOL_VALUES = ("0", "1", "true", "false")


@dataclass(frozen=True)
class ParamSpec:
    name: str
    default: str = ""
    kind: str = "string"
    choices: Optional[Tuple[str, ...]] = None
    pattern: Optional[str] = None
    validator: Optional[ValidatorProtocol] = None
    multiple: bool = False
    computed: bool = False
    description: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind not in KINDS:
            raise ValueError(f"kind must be one of {KINDS}, got {self.kind!r}")
        if self.kind == "enum" and not self.choices:
            raise ValueError(f"enum key {self.name!r} needs choices")
        if self.multiple and self.kind != "path":
            raise ValueError("multiple is only supported for path keys")

    def validate(self, value: Any) -> None:
        if not isinstance(value, str):
            raise ConfigValidationError({self.name: f"Expected str, got {type(value)}."})
        if "\n" in value or "\r" in value or "\0" in value:
            raise ConfigValidationError({self.name: "Value must be a single line."})

        if self.kind == "bool":
            if value.lower() not in BOOL_VALUES:
                raise ConfigValidationError(
                    {self.name: f"Expected one of {', '.join(BOOL_VALUES)}, got {value!r}."}
                )
        elif self.kind == "enum":
            assert self.choices is not None
            if value not in self.choices:
                raise ConfigValidationError(
                    {self.name: f"Unknown value {value!r}; expected one of {', '.join(self.choices)}."}
                )
        elif self.kind == "path":
            entries = value.split(os.pathsep) if self.multiple else [value]
            for entry in entries:
                if entry and not os.path.isabs(entry):
                    raise ConfigValidationError(
                        {self.name: f"Entry {entry!r} is relative; must be absolute path."}
                    )

        if self.pattern is not None and value and not re.fullmatch(self.pattern, value):
            raise ConfigValidationError({self.name: f"Pattern mismatch {self.pattern}."})

        if self.validator is not None and value:
            try:
                valid = self.validator(value)
            except Exception as e:
                raise ConfigValidationError(
                    {self.name: f"Custom validator raised exception: {e}"}
                ) from e
            if not valid:
                raise ConfigValidationError({self.name: f"Invalid value {value!r}."})

    def to_mapping(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"default": self.default, "kind": self.kind}
        if self.choices is not None:
            d["choices"] = self.choices
        if self.pattern is not None:
            d["pattern"] = self.pattern
        if self.multiple:
            d["multiple"] = True
        if self.computed:
            d["computed"] = True
        if self.description:
            d["description"] = self.description
        return d
