from __future__ import annotations

import enum
from typing import Dict


class ErrorKind(enum.Enum):
    """Error taxonomy surfaced to callers, each kind with its CLI exit code."""

    UNKNOWN_KEY = ("UnknownKey", 3)
    INVALID_VALUE = ("InvalidValue", 4)
    PARSE_ERROR = ("ParseError", 5)
    IO_ERROR = ("IOError", 6)
    LOCKED = ("Locked", 7)

    def __init__(self, label: str, exit_code: int) -> None:
        self.label = label
        self.exit_code = exit_code


class ConfigError(Exception):
    """Base config exception."""

    kind: ErrorKind = ErrorKind.INVALID_VALUE


class ConfigValidationError(ConfigError):
    """Raised when validation fails for one or more keys."""

    kind = ErrorKind.INVALID_VALUE

    def __init__(
        self, errors: Dict[str, str], key: str | None = None, value: object | None = None
    ) -> None:
        self.errors = errors
        self.key = key
        self.value = value
        msg = "; ".join(f"{k}: {v}" for k, v in errors.items())
        if key is not None and value is not None:
            msg += f" (key: {key}, value: {value!r})"
        super().__init__(msg)


class ConfigNotFoundError(ConfigError):
    """Raised when a requested configuration key is not registered."""

    kind = ErrorKind.UNKNOWN_KEY

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"unknown configuration key {key!r}")


class ConfigDuplicateError(ConfigError):
    """Raised when attempting to register a duplicate configuration key."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"configuration key {key!r} already registered")


class ConfigParseError(ConfigError):
    """Raised when a line of the persisted env file is malformed."""

    kind = ErrorKind.PARSE_ERROR

    def __init__(self, path: str, line_no: int, line: str, reason: str) -> None:
        self.path = path
        self.line_no = line_no
        self.line = line
        self.reason = reason
        super().__init__(f"{path}:{line_no}: {reason}: {line.rstrip()!r}")


class ConfigIOError(ConfigError):
    """Raised when the env file cannot be read or written."""

    kind = ErrorKind.IO_ERROR

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class ConfigLockedError(ConfigError):
    """Raised when the write lock on the env file cannot be acquired in time."""

    kind = ErrorKind.LOCKED

    def __init__(self, path: str, timeout: float) -> None:
        self.path = path
        self.timeout = timeout
        super().__init__(f"{path}: could not acquire write lock within {timeout:g}s")
