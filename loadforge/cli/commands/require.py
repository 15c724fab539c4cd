"""``loadforge require FEATURE`` — require a feature and report the outcome."""

from __future__ import annotations

from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from loadforge.cli.commands._common import (
    INCLUDE_OPTION,
    RESTRICTED_OPTION,
    UNTRUSTED_OPTION,
    build_engine,
)
from loadforge.models.features import LoadOutcome

console = Console()

_OUTCOME_STYLE = {
    LoadOutcome.LOADED: "green",
    LoadOutcome.ALREADY_LOADED: "yellow",
    LoadOutcome.FAILED: "red",
}


def require_cmd(
    features: List[str] = typer.Argument(..., help="Features to require, in order."),
    include: Optional[List[str]] = INCLUDE_OPTION,
    untrusted: Optional[List[str]] = UNTRUSTED_OPTION,
    restricted: bool = RESTRICTED_OPTION,
) -> None:
    """Require each feature in turn and print what happened."""
    engine = build_engine(include, untrusted, restricted)
    results = [engine.try_require(feature) for feature in features]

    table = Table(title="Require")
    table.add_column("Feature", style="cyan", no_wrap=True)
    table.add_column("Outcome", no_wrap=True)
    table.add_column("Kind")
    table.add_column("Identity / Error", overflow="fold")

    for result in results:
        style = _OUTCOME_STYLE[result.outcome]
        detail = (
            f"{result.error_kind}: {result.error_message}"
            if result.outcome == LoadOutcome.FAILED
            else str(result.identity or "")
        )
        table.add_row(
            result.feature,
            f"[{style}]{result.outcome.value}[/{style}]",
            result.unit_kind.value if result.unit_kind else "",
            detail,
        )

    console.print(table)
    engine.shutdown()

    if any(result.outcome == LoadOutcome.FAILED for result in results):
        raise typer.Exit(code=1)
