"""Script evaluation capability.

Defines the ``Evaluator`` Protocol the engine executes script units through,
along with the default implementation for Python-source scripts.

Any object with an ``execute(unit, namespace)`` method satisfies the
protocol; embedders can supply their own language front end.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from loadforge.core.errors import LoadError
from loadforge.core.namespace import Namespace
from loadforge.models.features import SourceUnit

logger = logging.getLogger(__name__)


@runtime_checkable
class Evaluator(Protocol):
    """Protocol for script execution backends."""

    def execute(self, unit: SourceUnit, namespace: Namespace) -> Any:
        """Execute *unit* with *namespace* as its top-level scope.

        Errors raised by the unit propagate unchanged.
        """
        ...


def read_source(path: Path) -> SourceUnit:
    """Read a script file into a ``SourceUnit``; I/O failures become ``LoadError``."""
    try:
        source = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise LoadError(f"cannot read {path}: {exc.strerror or exc}", path=path) from exc
    return SourceUnit(identity=path, source=source)


class ScriptEvaluator:
    """Executes Python-source script units.

    The unit is compiled under its real file name, so tracebacks point at the
    script, and executed with ``namespace.globals`` as its globals mapping.
    """

    def execute(self, unit: SourceUnit, namespace: Namespace) -> Any:
        code = compile(unit.source, str(unit.identity), "exec")
        scope = namespace.globals
        missing = object()
        previous = scope.get("__file__", missing)
        scope["__file__"] = str(unit.identity)
        logger.debug("Executing %s in namespace '%s'.", unit.identity, namespace.label)
        try:
            exec(code, scope)
        finally:
            if previous is missing:
                scope.pop("__file__", None)
            else:
                scope["__file__"] = previous
        return None
