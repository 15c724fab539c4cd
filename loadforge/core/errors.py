"""Error kinds raised by the loading engine.

Each error maps to one failure class of the require/load pipeline.  The
constant-conflict errors subclass the built-in ``TypeError`` / ``NameError``
so callers can catch them either way.
"""

from __future__ import annotations

from pathlib import Path


class LoadError(ImportError):
    """Raised when a feature cannot be found or loaded.

    Parameters
    ----------
    message:
        Human-readable reason.
    path:
        The feature string or file path that failed, when known.
    """

    def __init__(self, message: str, *, path: str | Path | None = None) -> None:
        super().__init__(message, path=str(path) if path is not None else None)
        self.message = message

    def __str__(self) -> str:
        return self.message


class PathResolutionError(LoadError):
    """Raised when a path cannot be canonicalized (too long, missing, OS error)."""


class PathTooLongError(PathResolutionError):
    """Raised when a path or one of its segments exceeds the platform limits."""


class TrustViolationError(PermissionError):
    """Raised when a unit resolved through an untrusted entry is refused."""


class ConstantTypeError(TypeError):
    """Raised when an existing constant has the wrong kind or lineage."""


class ConstantNameError(NameError):
    """Raised when a nested constant exists under a different identity."""


class ArgumentError(ValueError):
    """Raised on invalid arguments to runtime operations (e.g. ``at_exit``)."""


class DynamicLoadError(RuntimeError):
    """Raised by extension loaders when a unit is not a valid loadable binary."""


class InvalidTransitionError(RuntimeError):
    """Raised when a load request attempts an invalid state transition."""
