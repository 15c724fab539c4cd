"""Load path — ordered, trust-tagged directories searched for features.

Home references and search variables are expanded once, when an entry is
inserted.  Searching never re-expands: it only joins the stored directory
with the requested feature and probes the filesystem.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from pathlib import Path

from loadforge.core.canonicalizer import PathCanonicalizer
from loadforge.models.load_path import Candidate, LoadPathEntry, TrustTag, UnitKind

logger = logging.getLogger(__name__)

HOME_TOKEN = "~"


def expand_home(raw: str, home: str) -> str:
    """Expand a leading ``~`` against *home*.

    Only ``~`` and ``~/...`` are expanded; ``~user`` forms are left as-is.
    *home* is used verbatim, whatever its length.
    """
    if raw == HOME_TOKEN:
        return home
    if raw.startswith(HOME_TOKEN + "/") or raw.startswith(HOME_TOKEN + os.sep):
        return home.rstrip("/" + os.sep) + os.sep + raw[2:]
    return raw


def split_search_variable(value: str) -> list[str]:
    """Split an environment-style search variable on ``os.pathsep``."""
    return [item for item in value.split(os.pathsep) if item]


class LoadPath:
    """Ordered sequence of ``LoadPathEntry`` objects, first match wins.

    Parameters
    ----------
    canonicalizer:
        Used to probe candidate files and derive their identities.
    home:
        Value substituted for a leading ``~`` at insertion time.
    script_extensions / extension_suffixes:
        Recognised extensions, tried in this order (scripts first).

    Examples
    --------
    >>> lp = LoadPath(PathCanonicalizer(), home="/home/dev")
    >>> lp.append("~/lib").directory
    '/home/dev/lib'
    >>> len(lp)
    1
    """

    def __init__(
        self,
        canonicalizer: PathCanonicalizer,
        *,
        home: str = "",
        script_extensions: Iterable[str] = (".py",),
        extension_suffixes: Iterable[str] = (".ext",),
    ) -> None:
        self._canonicalizer = canonicalizer
        self._home = home
        self._script_extensions = list(script_extensions)
        self._extension_suffixes = list(extension_suffixes)
        self._entries: list[LoadPathEntry] = []

    # -- Mutation -----------------------------------------------------------

    def make_entry(self, raw_entry: str, trust: TrustTag = TrustTag.TRUSTED) -> LoadPathEntry:
        """Build an expanded entry without inserting it."""
        return LoadPathEntry(directory=expand_home(raw_entry, self._home), trust=trust)

    def append(self, raw_entry: str, trust: TrustTag = TrustTag.TRUSTED) -> LoadPathEntry:
        """Expand *raw_entry* and add it at the lowest precedence."""
        entry = self.make_entry(raw_entry, trust)
        self._entries.append(entry)
        logger.debug("Appended load path entry (%s, %d chars).", trust.value, len(entry.directory))
        return entry

    def prepend(self, raw_entry: str, trust: TrustTag = TrustTag.TRUSTED) -> LoadPathEntry:
        """Expand *raw_entry* and add it at the highest precedence."""
        entry = self.make_entry(raw_entry, trust)
        self._entries.insert(0, entry)
        return entry

    def extend_from_variable(
        self, value: str, trust: TrustTag = TrustTag.TRUSTED
    ) -> list[LoadPathEntry]:
        """Append every item of a search variable, each expanded independently."""
        return [self.append(item, trust) for item in split_search_variable(value)]

    def replace(self, entries: Iterable[LoadPathEntry]) -> None:
        """Replace the whole sequence (entries are stored as given, unexpanded)."""
        self._entries = list(entries)

    def clear(self) -> None:
        self._entries.clear()

    def snapshot(self) -> list[LoadPathEntry]:
        """Copy of the current entries, suitable for a later ``replace``."""
        return list(self._entries)

    def __iter__(self) -> Iterator[LoadPathEntry]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, directory: object) -> bool:
        return any(e.directory == directory for e in self._entries)

    # -- Search -------------------------------------------------------------

    def unit_kind_for(self, path: str | Path) -> UnitKind | None:
        """Classify *path* by its extension, or ``None`` if unrecognised."""
        name = os.fspath(path)
        if any(name.endswith(ext) for ext in self._script_extensions):
            return UnitKind.SCRIPT
        if any(name.endswith(ext) for ext in self._extension_suffixes):
            return UnitKind.EXTENSION
        return None

    def expansions(self, feature: str) -> list[tuple[str, UnitKind]]:
        """File names to try for *feature*, in the fixed probe order."""
        kind = self.unit_kind_for(feature)
        if kind is not None:
            return [(feature, kind)]
        names = [(feature + ext, UnitKind.SCRIPT) for ext in self._script_extensions]
        names += [(feature + ext, UnitKind.EXTENSION) for ext in self._extension_suffixes]
        return names

    def probe_file(
        self, path: str | Path, *, entry: LoadPathEntry | None = None
    ) -> Candidate | None:
        """Candidate for *path* with each recognised extension tried in order."""
        for name, kind in self.expansions(os.fspath(path)):
            identity = self._canonicalizer.probe(name)
            if identity is not None:
                return Candidate(path=Path(name), identity=identity, unit_kind=kind, entry=entry)
        return None

    def search(self, feature: str) -> list[Candidate]:
        """Every existing, readable candidate for *feature*, in precedence order.

        Entries are the outer loop and extensions the inner one, so an
        earlier directory always beats a later one regardless of extension.
        """
        found: list[Candidate] = []
        for entry in self:
            base = os.path.join(entry.directory, feature)
            for name, kind in self.expansions(base):
                identity = self._canonicalizer.probe(name)
                if identity is not None:
                    found.append(
                        Candidate(path=Path(name), identity=identity, unit_kind=kind, entry=entry)
                    )
        return found

    def find(self, feature: str) -> Candidate | None:
        """The first candidate for *feature*, or ``None``."""
        for entry in self:
            candidate = self.probe_file(os.path.join(entry.directory, feature), entry=entry)
            if candidate is not None:
                return candidate
        return None
