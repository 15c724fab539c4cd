"""Main Typer application — imports and registers all CLI commands.

Entry point: ``loadforge`` (configured via pyproject.toml console_scripts).
"""

from __future__ import annotations

import logging
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from loadforge.cli.commands.path import path_cmd
from loadforge.cli.commands.require import require_cmd
from loadforge.cli.commands.run import run_cmd
from loadforge.cli.commands.which import which_cmd
from loadforge.config import LoaderConfig

app = typer.Typer(
    name="loadforge",
    help="loadforge: feature resolution and loading engine.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Override LOADFORGE_LOG_LEVEL for this invocation."
    ),
) -> None:
    """Configure logging before any command runs."""
    settings = LoaderConfig()
    level = "DEBUG" if settings.debug and not log_level else (log_level or settings.log_level).upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


# Register subcommands
app.command(name="run", help="Run a program file as the main unit.")(run_cmd)
app.command(name="require", help="Require features and report the outcome.")(require_cmd)
app.command(name="which", help="Show where a feature resolves.")(which_cmd)
app.command(name="path", help="Show the load path and its trust tags.")(path_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
