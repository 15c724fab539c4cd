"""loadforge CLI — Typer-based command-line interface.

Provides the ``loadforge`` command with subcommands for running programs,
requiring features, resolving feature names and inspecting the load path.

All output uses Rich for formatted terminal display.
"""
