"""
Built-in Go toolchain keys.

Host-dependent defaults (GOOS, GOARCH, GOPATH, GOCACHE, GOMODCACHE) are evaluated
when the table is built. Computed keys carry an empty default here; their values
are supplied at resolution time by ``EnvConfig``.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Tuple

from env_guard.hostinfo import host_goarch, host_goos, user_cache_dir

from .spec import ParamSpec

KNOWN_GOOS = (
    "aix", "android", "darwin", "dragonfly", "freebsd", "hurd", "illumos", "ios", "js",
    "linux", "netbsd", "openbsd", "plan9", "solaris", "wasip1", "windows", "zos",
)  # fmt: skip

KNOWN_GOARCH = (
    "386", "amd64", "arm", "arm64", "loong64", "mips", "mips64", "mips64le", "mipsle",
    "ppc64", "ppc64le", "riscv64", "s390x", "wasm",
)  # fmt: skip

_PROXY_URL = re.compile(r"^(https?|file)://\S+$")
_TOOLCHAIN = re.compile(r"^(auto|local|path|go1[0-9A-Za-z.\-]*(\+auto|\+path)?)$")


def valid_proxy_list(value: str) -> bool:
    # Entries are separated by "," (fall through on 404/410) or "|" (on any error).
    for entry in re.split(r"[,|]", value):
        if entry in ("direct", "off"):
            continue
        if not _PROXY_URL.match(entry):
            return False
    return True


def valid_goflags(value: str) -> bool:
    return all(flag.startswith("-") for flag in value.split())


def valid_goenv(value: str) -> bool:
    return value == "off" or os.path.isabs(value)


def valid_toolchain(value: str) -> bool:
    return bool(_TOOLCHAIN.match(value))


def _default_gopath() -> str:
    try:
        return str(Path.home() / "go")
    except RuntimeError:
        return ""


def _default_gocache() -> str:
    cache = user_cache_dir()
    return str(cache / "go-build") if cache is not None else ""


def _default_gomodcache(gopath: str) -> str:
    first = gopath.split(os.pathsep)[0] if gopath else ""
    return os.path.join(first, "pkg", "mod") if first else ""


def builtin_specs() -> Tuple[ParamSpec, ...]:
    gopath = _default_gopath()
    goos = host_goos()
    goarch = host_goarch()
    return (
        ParamSpec("CGO_ENABLED", "1", "bool", description="Enable cgo"),
        ParamSpec(
            "GO111MODULE",
            "",
            "enum",
            choices=("", "on", "off", "auto"),
            description="Module-aware mode switch",
        ),
        ParamSpec(
            "GOAMD64",
            "v1",
            "enum",
            choices=("v1", "v2", "v3", "v4"),
            description="amd64 microarchitecture level",
        ),
        ParamSpec("GOARCH", goarch, "enum", choices=KNOWN_GOARCH, description="Target architecture"),
        ParamSpec("GOBIN", "", "path", description="Install directory for go install"),
        ParamSpec("GOCACHE", _default_gocache(), "path", description="Build cache directory"),
        ParamSpec(
            "GOENV",
            "",
            validator=valid_goenv,
            computed=True,
            description="Location of this env file, or off",
        ),
        ParamSpec(
            "GOEXPERIMENT",
            "",
            pattern=r"[A-Za-z0-9_]+(,[A-Za-z0-9_]+)*",
            description="Toolchain experiments",
        ),
        ParamSpec("GOFLAGS", "", validator=valid_goflags, description="Default go command flags"),
        ParamSpec(
            "GOHOSTARCH",
            goarch,
            "enum",
            choices=KNOWN_GOARCH,
            computed=True,
            description="Host architecture",
        ),
        ParamSpec(
            "GOHOSTOS", goos, "enum", choices=KNOWN_GOOS, computed=True, description="Host OS"
        ),
        ParamSpec("GOINSECURE", "", description="Module path globs fetched insecurely"),
        ParamSpec("GOMOD", "", "path", computed=True, description="go.mod of the main module"),
        ParamSpec(
            "GOMODCACHE", _default_gomodcache(gopath), "path", description="Module cache directory"
        ),
        ParamSpec("GONOPROXY", "", description="Module path globs fetched directly"),
        ParamSpec("GONOSUMDB", "", description="Module path globs not checked against GOSUMDB"),
        ParamSpec("GOOS", goos, "enum", choices=KNOWN_GOOS, description="Target operating system"),
        ParamSpec("GOPATH", gopath, "path", multiple=True, description="Go workspace list"),
        ParamSpec("GOPRIVATE", "", description="Default for GONOPROXY and GONOSUMDB"),
        ParamSpec(
            "GOPROXY",
            "https://proxy.golang.org,direct",
            validator=valid_proxy_list,
            description="Module proxy list",
        ),
        ParamSpec("GOROOT", "", "path", description="Go installation root"),
        ParamSpec("GOSUMDB", "sum.golang.org", description="Checksum database"),
        ParamSpec("GOTMPDIR", "", "path", description="Temporary directory for the go command"),
        ParamSpec(
            "GOTOOLCHAIN", "auto", validator=valid_toolchain, description="Toolchain selection"
        ),
        ParamSpec("GOVCS", "", description="Version control tools allowed per module path"),
    )
