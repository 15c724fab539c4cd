"""Load-path models — trust tags, trust levels, entries and search candidates."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict


class TrustTag(str, Enum):
    """Where a load-path entry's string came from."""

    TRUSTED = "trusted"
    UNTRUSTED = "untrusted"


class TrustLevel(str, Enum):
    """Runtime-wide trust setting.

    * ``unrestricted`` — untrusted entries may be loaded from.
    * ``restricted`` — units resolved through untrusted entries are refused.
    """

    UNRESTRICTED = "unrestricted"
    RESTRICTED = "restricted"


class UnitKind(str, Enum):
    """The kind of loadable unit a file represents."""

    SCRIPT = "script"
    EXTENSION = "extension"


class LoadPathEntry(BaseModel):
    """One directory on the load path, already home-expanded."""

    model_config = ConfigDict(frozen=True)

    directory: str
    trust: TrustTag = TrustTag.TRUSTED

    @property
    def is_trusted(self) -> bool:
        return self.trust == TrustTag.TRUSTED


class Candidate(BaseModel):
    """A resolved, existing file that may satisfy a feature request.

    ``entry`` is ``None`` when the candidate came from a path request or a
    relative resolution rather than a load-path search.
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    identity: Path
    unit_kind: UnitKind
    entry: LoadPathEntry | None = None

    @property
    def trust(self) -> TrustTag:
        if self.entry is None:
            return TrustTag.TRUSTED
        return self.entry.trust
