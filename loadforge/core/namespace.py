"""Namespaces — the tagged constant table plus script globals.

Constants are stored flat by qualified name (``"Zlib::Error"``) as
``NamespaceEntry`` records tagged with their kind and ancestor chain.  A
wrapped load gets a child namespace: reads fall through to the parent,
writes stay local, and the whole child is dropped afterwards.
"""

from __future__ import annotations

import logging
from typing import Any

from loadforge.core.errors import ConstantNameError, ConstantTypeError
from loadforge.models.constants import ConstantKind, NamespaceEntry, split_qualified

logger = logging.getLogger(__name__)

ROOT_CLASS = "Object"

# Constants every root namespace starts with, defined in this order.
BOOTSTRAP_CONSTANTS: list[tuple[str, ConstantKind, str | None]] = [
    ("Object", ConstantKind.CLASS, None),
    ("Kernel", ConstantKind.MODULE, None),
    ("Comparable", ConstantKind.MODULE, None),
    ("Enumerable", ConstantKind.MODULE, None),
    ("Exception", ConstantKind.CLASS, "Object"),
    ("StandardError", ConstantKind.CLASS, "Exception"),
    ("IO", ConstantKind.CLASS, "Object"),
]


class Namespace:
    """A constant table with optional parent, plus a globals mapping for scripts.

    Parameters
    ----------
    parent:
        Namespace consulted when a lookup misses locally.  ``None`` for the
        root namespace.
    label:
        Name used in log messages (``"main"`` or ``"wrap:<file>"``).
    """

    def __init__(self, parent: Namespace | None = None, *, label: str = "main") -> None:
        self.parent = parent
        self.label = label
        self.globals: dict[str, Any] = {"__name__": label}
        self._constants: dict[str, NamespaceEntry] = {}

    @classmethod
    def bootstrap(cls) -> Namespace:
        """Root namespace pre-populated with the core classes and modules."""
        root = cls()
        for name, kind, superclass in BOOTSTRAP_CONSTANTS:
            ancestors: tuple[str, ...] = (name,)
            if superclass is not None:
                ancestors += root.require_entry(superclass).ancestors
            root.define(NamespaceEntry(qualified_name=name, kind=kind, ancestors=ancestors))
        return root

    def child(self, label: str) -> Namespace:
        """An anonymous namespace layered over this one."""
        return Namespace(parent=self, label=label)

    @property
    def is_wrapped(self) -> bool:
        return self.parent is not None

    # -- Table access -------------------------------------------------------

    def lookup(self, qualified_name: str) -> NamespaceEntry | None:
        entry = self._constants.get(qualified_name)
        if entry is None and self.parent is not None:
            return self.parent.lookup(qualified_name)
        return entry

    def require_entry(self, qualified_name: str) -> NamespaceEntry:
        entry = self.lookup(qualified_name)
        if entry is None:
            raise ConstantNameError(f"uninitialized constant {qualified_name}")
        return entry

    def is_defined(self, qualified_name: str) -> bool:
        return self.lookup(qualified_name) is not None

    def define(self, entry: NamespaceEntry) -> NamespaceEntry:
        """Store *entry* locally without any compatibility checks."""
        self._constants[entry.qualified_name] = entry
        return entry

    def __contains__(self, qualified_name: object) -> bool:
        return isinstance(qualified_name, str) and self.is_defined(qualified_name)

    # -- Script-level definitions ------------------------------------------

    def enclosing(self, qualified_name: str) -> NamespaceEntry | None:
        """The class/module *qualified_name* lives under; ``None`` at top level."""
        parent_name, _ = split_qualified(qualified_name)
        if parent_name is None:
            return None
        parent = self.require_entry(parent_name)
        if not parent.is_namespace:
            raise ConstantTypeError(f"{parent_name} is not a class/module")
        return parent

    def define_module(self, qualified_name: str) -> NamespaceEntry:
        """Open (or create) a module, like a ``module`` statement."""
        self.enclosing(qualified_name)
        existing = self.lookup(qualified_name)
        if existing is not None:
            if existing.kind != ConstantKind.MODULE:
                raise ConstantTypeError(f"{qualified_name} is not a module")
            return existing
        return self.define(
            NamespaceEntry(
                qualified_name=qualified_name,
                kind=ConstantKind.MODULE,
                ancestors=(qualified_name,),
            )
        )

    def define_class(self, qualified_name: str, superclass: str | None = None) -> NamespaceEntry:
        """Open (or create) a class, like a ``class`` statement.

        Reopening with an explicit superclass that differs from the existing
        one is a superclass mismatch.
        """
        self.enclosing(qualified_name)
        existing = self.lookup(qualified_name)
        if existing is not None:
            if existing.kind != ConstantKind.CLASS:
                raise ConstantTypeError(f"{qualified_name} is not a class")
            current = existing.ancestors[1] if len(existing.ancestors) > 1 else None
            if superclass is not None and current != superclass:
                raise ConstantTypeError(f"superclass mismatch for class {qualified_name}")
            return existing
        return self.define(self.new_class_entry(qualified_name, superclass))

    def new_class_entry(self, qualified_name: str, superclass: str | None) -> NamespaceEntry:
        """Build a class entry whose lineage extends *superclass* (``Object`` by default)."""
        parent_class = self.require_entry(superclass or ROOT_CLASS)
        if parent_class.kind != ConstantKind.CLASS:
            raise ConstantTypeError(f"superclass must be a class ({parent_class.qualified_name} given)")
        return NamespaceEntry(
            qualified_name=qualified_name,
            kind=ConstantKind.CLASS,
            ancestors=(qualified_name, *parent_class.ancestors),
        )

    def define_constant(self, qualified_name: str, value: Any) -> NamespaceEntry:
        """Bind a plain value constant."""
        self.enclosing(qualified_name)
        if qualified_name in self._constants:
            logger.warning("already initialized constant %s", qualified_name)
        return self.define(
            NamespaceEntry(qualified_name=qualified_name, kind=ConstantKind.VALUE, value=value)
        )

    def const_get(self, qualified_name: str) -> Any:
        """Value of a value constant, or the entry itself for classes and modules."""
        entry = self.require_entry(qualified_name)
        return entry.value if entry.kind == ConstantKind.VALUE else entry
