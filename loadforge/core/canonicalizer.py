"""Path canonicalization — the identity every loaded unit is tracked by.

Two requests that differ as strings but land on the same real file share a
canonical identity.  Length limits are checked before touching the
filesystem so pathological paths fail cleanly instead of reaching the OS.
"""

from __future__ import annotations

import errno
import logging
import os
from pathlib import Path

from loadforge.core.errors import PathResolutionError, PathTooLongError

logger = logging.getLogger(__name__)


class PathCanonicalizer:
    """Resolves paths to absolute, symlink-free identities.

    Parameters
    ----------
    path_max:
        Maximum length of a whole path, in characters.
    name_max:
        Maximum length of a single path segment.
    """

    def __init__(self, path_max: int = 4096, name_max: int = 255) -> None:
        self._path_max = path_max
        self._name_max = name_max

    def check_length(self, path: str | Path) -> None:
        """Raise ``PathResolutionError`` if *path* exceeds the platform limits."""
        text = os.fspath(path)
        if len(text) > self._path_max:
            raise PathTooLongError(
                f"pathname too long ({len(text)} > {self._path_max})", path=_abbreviate(text)
            )
        for segment in text.split(os.sep):
            if len(segment) > self._name_max:
                raise PathTooLongError(
                    f"path segment too long ({len(segment)} > {self._name_max})",
                    path=_abbreviate(text),
                )

    def canonicalize(self, path: str | Path, *, must_exist: bool = True) -> Path:
        """Return the absolute, symlink-resolved form of *path*.

        Raises
        ------
        PathResolutionError
            If the path is too long, does not exist while *must_exist*, or
            the OS refuses to resolve it.
        """
        absolute = os.path.abspath(os.fspath(path))
        self.check_length(absolute)
        try:
            return Path(absolute).resolve(strict=must_exist)
        except FileNotFoundError as exc:
            raise PathResolutionError(
                f"no such file or directory: {absolute}", path=absolute
            ) from exc
        except OSError as exc:
            if exc.errno == errno.ENAMETOOLONG:
                raise PathTooLongError(
                    "pathname too long", path=_abbreviate(absolute)
                ) from exc
            raise PathResolutionError(
                f"cannot resolve {absolute}: {exc.strerror or exc}", path=absolute
            ) from exc

    def probe(self, path: str | Path) -> Path | None:
        """Search-time check: the identity of *path* if it is a readable file.

        Over-long candidates are logged and ignored rather than raised, so
        one bad load-path entry does not abort a whole search.
        """
        try:
            identity = self.canonicalize(path, must_exist=True)
        except PathTooLongError:
            logger.warning("openpath: pathname too long (ignored)")
            return None
        except PathResolutionError as exc:
            logger.debug("Skipping candidate %s: %s", exc.path, exc.message)
            return None
        if not identity.is_file() or not os.access(identity, os.R_OK):
            return None
        return identity

    def real_directory(self, path: str | Path) -> Path:
        """Directory holding the real (post-symlink) file behind *path*."""
        return self.canonicalize(path, must_exist=True).parent


def _abbreviate(text: str, limit: int = 80) -> str:
    if len(text) <= limit:
        return text
    return f"{text[: limit // 2]}...{text[-limit // 2:]}"
