"""Loaded-features registry — what ``require`` has already executed.

Identities are canonical paths and are never removed.  Alongside them the
registry keeps the bare feature names each identity was required under, plus
names the host declares as built in, so a later ``require`` of the same name
short-circuits even after the load path has changed.

A bare name (``"foo"``) matches whatever unit it was loaded as.  A name with an
explicit extension (``"foo.ext"``) only matches a unit of that extension, so
``foo.py`` being loaded never hides ``foo.ext``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def feature_stem(feature: str, extensions: Iterable[str] = ()) -> str:
    """Strip a recognised extension so ``"set"`` and ``"set.py"`` compare equal."""
    ext = feature_extension(feature, extensions)
    return feature[: -len(ext)] if ext else feature


def feature_extension(feature: str, extensions: Iterable[str] = ()) -> str | None:
    """The recognised extension *feature* ends with, or ``None``."""
    for ext in extensions:
        if feature.endswith(ext) and len(feature) > len(ext):
            return ext
    return None


class LoadedFeaturesRegistry:
    """Monotonic set of canonical identities plus provided feature names.

    Examples
    --------
    >>> registry = LoadedFeaturesRegistry([".py", ".ext"])
    >>> registry.contains(Path("/lib/set.py"))
    False
    >>> registry.record(Path("/lib/set.py"), feature="set")
    True
    >>> registry.record(Path("/lib/set.py"))
    False
    >>> registry.provides("set"), registry.provides("set.py"), registry.provides("set.ext")
    (True, True, False)
    """

    def __init__(self, extensions: Iterable[str] = ()) -> None:
        self._extensions = list(extensions)
        self._identities: dict[Path, None] = {}
        # stem -> identity, for bare requests
        self._provided: dict[str, Path | None] = {}
        # stem + extension -> identity, for requests naming an extension
        self._qualified: dict[str, Path | None] = {}

    def contains(self, identity: Path) -> bool:
        return identity in self._identities

    def record(self, identity: Path, feature: str | None = None) -> bool:
        """Record *identity* (and optionally the *feature* name it was required as).

        Returns ``True`` when the identity was new.
        """
        is_new = identity not in self._identities
        if is_new:
            self._identities[identity] = None
            logger.debug("Recorded loaded feature %s.", identity)
        if feature is not None:
            stem = feature_stem(feature, self._extensions)
            self._provided.setdefault(stem, identity)
            ext = feature_extension(identity.name, self._extensions)
            if ext is not None:
                self._qualified.setdefault(stem + ext, identity)
        return is_new

    def provide(self, feature: str) -> None:
        """Mark *feature* as provided without any backing file."""
        self._provided.setdefault(feature_stem(feature, self._extensions), None)
        if feature_extension(feature, self._extensions) is not None:
            self._qualified.setdefault(feature, None)

    def _index_for(self, feature: str) -> dict[str, Path | None]:
        if feature_extension(feature, self._extensions) is None:
            return self._provided
        return self._qualified

    def provides(self, feature: str) -> bool:
        """Cheap name-only check used before resolution."""
        return feature in self._index_for(feature)

    def identity_for(self, feature: str) -> Path | None:
        return self._index_for(feature).get(feature)

    def features(self) -> list[Path]:
        """Identities in load order."""
        return list(self._identities)

    def __len__(self) -> int:
        return len(self._identities)

    def __contains__(self, identity: object) -> bool:
        return identity in self._identities

    def get_stats(self) -> dict[str, Any]:
        """Return summary statistics: ``total``, ``provided`` and ``builtin``."""
        builtin = sum(1 for identity in self._provided.values() if identity is None)
        return {
            "total": len(self._identities),
            "provided": len(self._provided),
            "builtin": builtin,
        }
