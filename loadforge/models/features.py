"""Require pipeline models — request states, outcomes, frames and units."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from loadforge.models.load_path import UnitKind


class RequireState(str, Enum):
    """States a single require request moves through."""

    RESOLVING = "resolving"
    TRUST_CHECK = "trust_check"
    DUPLICATE_CHECK = "duplicate_check"
    EXECUTING = "executing"
    DEFINITION_CHECK = "definition_check"
    DONE = "done"
    FAILED = "failed"


# Valid state transitions, enforced by RequireEngine.
# DUPLICATE_CHECK may jump straight to DONE when the unit is already loaded.
VALID_TRANSITIONS: dict[RequireState, set[RequireState]] = {
    RequireState.RESOLVING: {RequireState.TRUST_CHECK, RequireState.DONE, RequireState.FAILED},
    RequireState.TRUST_CHECK: {RequireState.DUPLICATE_CHECK, RequireState.FAILED},
    RequireState.DUPLICATE_CHECK: {RequireState.EXECUTING, RequireState.DONE, RequireState.FAILED},
    RequireState.EXECUTING: {RequireState.DEFINITION_CHECK, RequireState.DONE, RequireState.FAILED},
    RequireState.DEFINITION_CHECK: {RequireState.DONE, RequireState.FAILED},
    RequireState.DONE: set(),  # terminal
    RequireState.FAILED: set(),  # terminal
}


class LoadOutcome(str, Enum):
    """Result of a require request."""

    LOADED = "loaded"
    ALREADY_LOADED = "already_loaded"
    FAILED = "failed"


class LoadResult(BaseModel):
    """Outcome of ``require`` / ``try_require``.

    Truthy only when the unit was executed by this call, so
    ``if engine.require("x")`` reads like the boolean form.

    Examples
    --------
    >>> LoadResult(feature="set", outcome=LoadOutcome.ALREADY_LOADED).loaded
    False
    """

    model_config = ConfigDict(frozen=True)

    feature: str
    outcome: LoadOutcome
    identity: Path | None = None
    unit_kind: UnitKind | None = None
    error_kind: str | None = None
    error_message: str | None = None
    states: list[RequireState] = Field(default_factory=list)

    @property
    def loaded(self) -> bool:
        return self.outcome == LoadOutcome.LOADED

    def __bool__(self) -> bool:
        return self.loaded


class LoadFrame(BaseModel):
    """One entry of the load stack: the unit being executed and its real directory."""

    model_config = ConfigDict(frozen=True)

    identity: Path
    directory: Path
    wrapped: bool = False


class SourceUnit(BaseModel):
    """A script unit handed to the evaluator."""

    model_config = ConfigDict(frozen=True)

    identity: Path
    source: str
