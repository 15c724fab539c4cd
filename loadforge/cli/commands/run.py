"""``loadforge run SCRIPT`` — execute a program file as the main unit.

The program runs with the configured load path, its directory (the real one,
after symlinks) as the base for ``require_relative``, and deferred callbacks
drained at the end.  The exit status is non-zero if the program or any
deferred callback failed.
"""

from __future__ import annotations

from typing import List, Optional

import typer
from rich.console import Console

from loadforge.cli.commands._common import (
    INCLUDE_OPTION,
    RESTRICTED_OPTION,
    UNTRUSTED_OPTION,
    build_engine,
)

err_console = Console(stderr=True)


def run_cmd(
    script: str = typer.Argument(..., help="Program file to run."),
    search: bool = typer.Option(
        False,
        "-S",
        "--search",
        help="Look the program up on LOADFORGE_SCRIPT_PATH.",
    ),
    include: Optional[List[str]] = INCLUDE_OPTION,
    untrusted: Optional[List[str]] = UNTRUSTED_OPTION,
    restricted: bool = RESTRICTED_OPTION,
) -> None:
    """Run a program file, then its deferred callbacks."""
    engine = build_engine(include, untrusted, restricted)
    status = engine.run_main(script, search=search)

    for failure in engine.deferred.failures:
        err_console.print(f"[bold red]at-exit callback failed:[/bold red] {failure.message}")

    raise typer.Exit(code=status)
