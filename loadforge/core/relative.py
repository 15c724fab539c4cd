"""Resolution relative to the file currently being loaded."""

from __future__ import annotations

import os
from pathlib import Path

from loadforge.core.errors import LoadError
from loadforge.core.load_stack import LoadStack


class RelativeResolver:
    """Resolves names against the real directory of the top load frame.

    The frame's directory is derived from the caller's real file, so a unit
    reached through a symlink sees the siblings of its target, not of the link.
    The load path is never consulted.
    """

    def __init__(self, stack: LoadStack) -> None:
        self._stack = stack

    def base_directory(self) -> Path:
        frame = self._stack.current
        if frame is None:
            raise LoadError("cannot infer basepath: no file is currently being loaded")
        return frame.directory

    def resolve(self, name: str) -> Path:
        """Absolute (not yet canonical) path for *name* relative to the caller.

        Raises ``LoadError`` when nothing is loading, even for an absolute *name*.
        """
        base = self.base_directory()
        if os.path.isabs(name):
            return Path(name)
        return base / name
