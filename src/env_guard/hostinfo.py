"""Host platform facts used for defaults and computed keys."""

from __future__ import annotations

import os
import platform
import sys
from pathlib import Path
from typing import Optional

_GOOS_BY_PLATFORM = {
    "linux": "linux",
    "darwin": "darwin",
    "win32": "windows",
    "cygwin": "windows",
    "aix": "aix",
    "sunos5": "solaris",
}

_GOARCH_BY_MACHINE = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "armv6l": "arm",
    "armv7l": "arm",
    "ppc64le": "ppc64le",
    "ppc64": "ppc64",
    "s390x": "s390x",
    "riscv64": "riscv64",
    "loongarch64": "loong64",
    "mips64": "mips64",
}


def host_goos() -> str:
    if sys.platform in _GOOS_BY_PLATFORM:
        return _GOOS_BY_PLATFORM[sys.platform]
    for prefix in ("freebsd", "openbsd", "netbsd", "dragonfly"):
        if sys.platform.startswith(prefix):
            return prefix
    return ""


def host_goarch() -> str:
    return _GOARCH_BY_MACHINE.get(platform.machine().lower(), "")


def user_config_dir() -> Optional[Path]:
    """Per-user configuration root, following the same rules the Go toolchain uses."""
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        return Path(appdata) if appdata else None
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg and os.path.isabs(xdg):
        return Path(xdg)
    return Path.home() / ".config"


def user_cache_dir() -> Optional[Path]:
    if sys.platform == "win32":
        local = os.environ.get("LOCALAPPDATA")
        return Path(local) if local else None
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Caches"
    xdg = os.environ.get("XDG_CACHE_HOME")
    if xdg and os.path.isabs(xdg):
        return Path(xdg)
    return Path.home() / ".cache"


def find_go_mod(start: Path) -> str:
    """Return the nearest go.mod at or above ``start``, or the null device when there is none."""
    current = start.resolve()
    for directory in (current, *current.parents):
        candidate = directory / "go.mod"
        if candidate.is_file():
            return str(candidate)
    return os.devnull
