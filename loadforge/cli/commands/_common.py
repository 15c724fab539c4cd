"""Shared option handling for the loader commands."""

from __future__ import annotations

import typer

from loadforge.config import LoaderConfig
from loadforge.core.engine import RequireEngine
from loadforge.models.load_path import TrustLevel, TrustTag

INCLUDE_OPTION = typer.Option(
    None,
    "--include",
    "-I",
    help="Directory to put in front of the load path (repeatable, kept in the given order).",
)
UNTRUSTED_OPTION = typer.Option(
    None,
    "--untrusted",
    "-U",
    help="Directory to append to the load path tagged as untrusted (repeatable).",
)
RESTRICTED_OPTION = typer.Option(
    False,
    "--restricted",
    help="Refuse units found through untrusted load-path entries.",
)


def build_engine(
    include: list[str] | None = None,
    untrusted: list[str] | None = None,
    restricted: bool = False,
) -> RequireEngine:
    """Engine configured from the environment plus command-line entries."""
    config = LoaderConfig()
    if restricted:
        config = config.model_copy(update={"trust_level": TrustLevel.RESTRICTED})
    engine = RequireEngine(config)
    for directory in reversed(include or []):
        engine.load_path.prepend(directory, TrustTag.TRUSTED)
    for directory in untrusted or []:
        engine.load_path.append(directory, TrustTag.UNTRUSTED)
    return engine
