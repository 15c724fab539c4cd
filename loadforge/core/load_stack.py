"""Explicit stack of units currently being executed.

Frames are pushed before a unit runs and popped after it finishes, even when
it raises.  The top frame supplies the directory for relative resolution and
the stack as a whole answers "is this identity already loading?" for cycle
short-circuiting.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from loadforge.models.features import LoadFrame

logger = logging.getLogger(__name__)


class LoadStack:
    """Stack of ``LoadFrame`` records for nested ``require`` / ``load`` calls."""

    def __init__(self) -> None:
        self._frames: list[LoadFrame] = []

    def push(self, frame: LoadFrame) -> None:
        self._frames.append(frame)
        logger.debug("Entering %s (depth %d).", frame.identity, len(self._frames))

    def pop(self) -> LoadFrame:
        frame = self._frames.pop()
        logger.debug("Leaving %s (depth %d).", frame.identity, len(self._frames))
        return frame

    @contextmanager
    def frame(self, identity: Path, directory: Path, *, wrapped: bool = False) -> Iterator[LoadFrame]:
        """Push a frame for the duration of the block; always balanced."""
        frame = LoadFrame(identity=identity, directory=directory, wrapped=wrapped)
        self.push(frame)
        try:
            yield frame
        finally:
            self.pop()

    @property
    def current(self) -> LoadFrame | None:
        return self._frames[-1] if self._frames else None

    def is_loading(self, identity: Path) -> bool:
        return any(frame.identity == identity for frame in self._frames)

    @property
    def depth(self) -> int:
        return len(self._frames)

    def __len__(self) -> int:
        return len(self._frames)
