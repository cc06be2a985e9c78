"""
Command-line interface for env-guard.

    env-guard                       print every key as KEY='value', sorted
    env-guard KEY [KEY...]          print the effective value of each key
    env-guard -w KEY=value [...]    persist values (one all-or-nothing batch)
    env-guard -u KEY [...]          remove persisted values

Each error kind exits with its own code (see ErrorKind); usage errors exit 2.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer

from .config import EnvConfig
from .exceptions import ConfigError

PROG = "env-guard"

app = typer.Typer(add_completion=False, help="Read and edit layered Go-style env configuration.")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _fail(exc: ConfigError) -> typer.Exit:
    typer.echo(f"{PROG}: {exc}", err=True)
    return typer.Exit(code=exc.kind.exit_code)


@app.command()
def env(
    args: Optional[List[str]] = typer.Argument(
        None, metavar="[KEY | KEY=VALUE]...", help="Keys to print, or assignments with -w"
    ),
    write: bool = typer.Option(False, "-w", "--write", help="Persist KEY=VALUE assignments"),
    unset: bool = typer.Option(False, "-u", "--unset", help="Remove persisted KEYs"),
    as_json: bool = typer.Option(False, "--json", help="Print values as a JSON object"),
    passthrough: bool = typer.Option(
        False, "--passthrough", help="Allow -w/-u on keys this tool does not know"
    ),
    file: Optional[Path] = typer.Option(
        None, "--file", help="Env file to use instead of $GOENV or the user config location"
    ),
    lock_timeout: Optional[float] = typer.Option(
        None, "--lock-timeout", min=0, help="Seconds to wait for the write lock (0 fails fast)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr"),
) -> None:
    _setup_logging(verbose)
    items = list(args or [])

    if write and unset:
        raise typer.BadParameter("-w and -u cannot be combined")
    if (write or unset) and not items:
        raise typer.BadParameter(f"{'-w' if write else '-u'} requires at least one argument")
    if (write or unset) and as_json:
        raise typer.BadParameter("--json only applies when printing values")

    try:
        config = EnvConfig(store_path=file, lock_timeout=lock_timeout)
        if write:
            for key in config.write(items, passthrough=passthrough):
                typer.echo(
                    f"{PROG}: warning: {key} is also set in the process environment, "
                    "which takes precedence over the written value",
                    err=True,
                )
            return
        if unset:
            config.unset(items, passthrough=passthrough)
            return
        if items:
            values = {key: config.resolve(key) for key in items}
            if as_json:
                typer.echo(json.dumps({v.key: v.value for v in values.values()}, indent=1))
            else:
                for resolved in values.values():
                    typer.echo(resolved.value)
            return
        snapshot = config.snapshot()
        typer.echo(snapshot.to_json() if as_json else snapshot.render(), nl=as_json)
    except ConfigError as exc:
        raise _fail(exc) from exc


def main() -> None:
    app(prog_name=PROG)
