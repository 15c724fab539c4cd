"""``loadforge path`` — show the configured search paths."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from loadforge.cli.commands._common import build_engine

console = Console()


def path_cmd(
    scripts: bool = typer.Option(
        False, "--scripts", help="Show the -S script search path instead of the load path."
    ),
) -> None:
    """List load-path entries in search order with their trust tags."""
    engine = build_engine()
    entries = list(engine.script_path if scripts else engine.load_path)
    stats = engine.registry.get_stats()
    if stats["builtin"]:
        console.print(f"[dim]Builtin features: {stats['builtin']}[/dim]")

    if not entries:
        console.print("[dim]Search path is empty.[/dim]")
        return

    caption = "restricted: untrusted entries are refused" if engine.config.is_restricted else None
    table = Table(title="Script Path" if scripts else "Load Path", caption=caption)
    table.add_column("#", justify="right")
    table.add_column("Directory", style="cyan", overflow="fold")
    table.add_column("Trust", justify="center")

    for index, entry in enumerate(entries, start=1):
        trust = "[green]trusted[/green]" if entry.is_trusted else "[yellow]untrusted[/yellow]"
        table.add_row(str(index), entry.directory, trust)

    console.print(table)
