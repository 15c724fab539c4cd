"""Extension definition validation.

An extension declares the classes and modules it defines.  Before any of them
become visible, each declaration is checked against the namespace (and
against the declarations staged earlier by the same extension):

1. The enclosing namespace must exist (``NameError``) and be a class or
   module (``TypeError``).
2. An undefined constant is staged as a fresh definition.
3. An existing constant of a different kind is a ``TypeError``.
4. An existing class that does not descend from the declared superclass is a
   ``TypeError`` at top level and a ``NameError`` ("already defined") when
   nested under another namespace.

Only when every declaration passes are the staged entries committed, so a
failing extension leaves no partial definitions behind.
"""

from __future__ import annotations

import logging

from loadforge.core.errors import ConstantNameError, ConstantTypeError
from loadforge.core.namespace import ROOT_CLASS, Namespace
from loadforge.models.constants import (
    ConstantDefinition,
    ConstantKind,
    NamespaceEntry,
    split_qualified,
)

logger = logging.getLogger(__name__)


class ConflictChecker:
    """Stages extension definitions against a namespace and commits them atomically.

    Parameters
    ----------
    namespace:
        The namespace the extension defines into (the root namespace, or a
        wrapped child during ``load(..., wrap=True)``).
    """

    def __init__(self, namespace: Namespace) -> None:
        self._namespace = namespace
        self._staged: dict[str, NamespaceEntry] = {}

    def _lookup(self, qualified_name: str) -> NamespaceEntry | None:
        staged = self._staged.get(qualified_name)
        if staged is not None:
            return staged
        return self._namespace.lookup(qualified_name)

    # -- Checks -------------------------------------------------------------

    def _check_enclosing(self, definition: ConstantDefinition) -> None:
        parent_name, _ = split_qualified(definition.qualified_name)
        if parent_name is None:
            return
        parent = self._lookup(parent_name)
        if parent is None:
            raise ConstantNameError(f"uninitialized constant {parent_name}")
        if not parent.is_namespace:
            raise ConstantTypeError(f"{parent_name} is not a class/module")

    def _fresh_entry(self, definition: ConstantDefinition) -> NamespaceEntry:
        name = definition.qualified_name
        if definition.kind == ConstantKind.MODULE:
            return NamespaceEntry(qualified_name=name, kind=ConstantKind.MODULE, ancestors=(name,))
        superclass_name = definition.superclass or ROOT_CLASS
        superclass = self._lookup(superclass_name)
        if superclass is None:
            raise ConstantNameError(f"uninitialized constant {superclass_name}")
        if superclass.kind != ConstantKind.CLASS:
            raise ConstantTypeError(f"superclass must be a class ({superclass_name} given)")
        return NamespaceEntry(
            qualified_name=name,
            kind=ConstantKind.CLASS,
            ancestors=(name, *superclass.ancestors),
        )

    def check(self, definition: ConstantDefinition) -> NamespaceEntry:
        """Validate one declaration and stage it; return the resulting entry."""
        name = definition.qualified_name
        self._check_enclosing(definition)

        existing = self._lookup(name)
        if existing is None:
            entry = self._fresh_entry(definition)
            self._staged[name] = entry
            return entry

        if existing.kind != definition.kind:
            raise ConstantTypeError(f"{name} is not a {definition.kind.value}")

        if (
            definition.kind == ConstantKind.CLASS
            and definition.superclass is not None
            and not existing.descends_from(definition.superclass)
        ):
            if definition.is_nested:
                raise ConstantNameError(f"{name} is already defined")
            raise ConstantTypeError(f"superclass mismatch for class {name}")

        return existing

    def check_all(self, definitions: list[ConstantDefinition]) -> list[NamespaceEntry]:
        """Validate every declaration in order; raises on the first conflict."""
        return [self.check(definition) for definition in definitions]

    # -- Commit -------------------------------------------------------------

    def commit(self) -> list[str]:
        """Define every staged entry in the namespace; return their names."""
        names = list(self._staged)
        for entry in self._staged.values():
            self._namespace.define(entry)
        self._staged.clear()
        if names:
            logger.debug("Defined %s in namespace '%s'.", ", ".join(names), self._namespace.label)
        return names

    def apply(self, definitions: list[ConstantDefinition]) -> list[str]:
        """Check all *definitions*, then commit; nothing is defined on failure."""
        try:
            self.check_all(definitions)
        except (ConstantTypeError, ConstantNameError):
            self._staged.clear()
            raise
        return self.commit()
