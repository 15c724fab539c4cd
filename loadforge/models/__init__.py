"""loadforge data models — Pydantic v2, frozen records and str enums."""

from loadforge.models.constants import (
    ConstantDefinition,
    ConstantKind,
    ExtensionManifest,
    NamespaceEntry,
)
from loadforge.models.features import (
    VALID_TRANSITIONS,
    LoadFrame,
    LoadOutcome,
    LoadResult,
    RequireState,
    SourceUnit,
)
from loadforge.models.load_path import (
    Candidate,
    LoadPathEntry,
    TrustLevel,
    TrustTag,
    UnitKind,
)

__all__ = [
    # load path
    "TrustTag",
    "TrustLevel",
    "UnitKind",
    "LoadPathEntry",
    "Candidate",
    # features
    "RequireState",
    "VALID_TRANSITIONS",
    "LoadOutcome",
    "LoadResult",
    "LoadFrame",
    "SourceUnit",
    # constants
    "ConstantKind",
    "ConstantDefinition",
    "NamespaceEntry",
    "ExtensionManifest",
]
