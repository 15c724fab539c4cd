"""``loadforge which FEATURE`` — show where a feature resolves, without loading it."""

from __future__ import annotations

from typing import List, Optional

import typer
from rich.console import Console

from loadforge.cli.commands._common import INCLUDE_OPTION, UNTRUSTED_OPTION, build_engine
from loadforge.core.engine import is_path_request
from loadforge.core.errors import LoadError

console = Console()


def which_cmd(
    feature: str = typer.Argument(..., help="Feature name or path."),
    all_matches: bool = typer.Option(
        False, "--all", "-a", help="List every match on the load path, not just the winner."
    ),
    include: Optional[List[str]] = INCLUDE_OPTION,
    untrusted: Optional[List[str]] = UNTRUSTED_OPTION,
) -> None:
    """Print the file a require of FEATURE would load."""
    engine = build_engine(include, untrusted)

    if all_matches and not is_path_request(feature):
        candidates = engine.load_path.search(feature)
    else:
        try:
            candidates = [engine.resolve(feature)]
        except LoadError as exc:
            console.print(f"[bold red]{exc}[/bold red]")
            raise typer.Exit(code=1)

    if not candidates:
        console.print(f"[bold red]cannot load such file -- {feature}[/bold red]")
        raise typer.Exit(code=1)

    for candidate in candidates:
        trust = candidate.trust.value
        marker = "" if trust == "trusted" else f" [yellow]({trust})[/yellow]"
        console.print(f"{candidate.identity}{marker}", soft_wrap=True)
