"""Constant-table models — tagged namespace entries and extension manifests."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

SCOPE_SEPARATOR = "::"


class ConstantKind(str, Enum):
    """Fundamental kind of a constant in a namespace."""

    CLASS = "class"
    MODULE = "module"
    VALUE = "value"


def split_qualified(qualified_name: str) -> tuple[str | None, str]:
    """Split ``"A::B::C"`` into ``("A::B", "C")``; top-level names give ``(None, name)``."""
    if SCOPE_SEPARATOR not in qualified_name:
        return None, qualified_name
    parent, _, name = qualified_name.rpartition(SCOPE_SEPARATOR)
    return parent, name


class NamespaceEntry(BaseModel):
    """A constant as the conflict checker sees it.

    ``ancestors`` lists qualified names from the constant itself upward, so
    for ``class BasicSocket < IO`` it is ``("BasicSocket", "IO", "Object")``.
    Modules carry only their own name; values carry none.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    qualified_name: str
    kind: ConstantKind
    ancestors: tuple[str, ...] = ()
    value: Any = None

    @property
    def is_namespace(self) -> bool:
        return self.kind in (ConstantKind.CLASS, ConstantKind.MODULE)

    def descends_from(self, qualified_name: str) -> bool:
        return qualified_name in self.ancestors


class ConstantDefinition(BaseModel):
    """A class or module an extension declares it will define."""

    model_config = ConfigDict(frozen=True)

    qualified_name: str
    kind: ConstantKind
    superclass: str | None = None

    @field_validator("kind")
    @classmethod
    def _definable_kind(cls, kind: ConstantKind) -> ConstantKind:
        if kind == ConstantKind.VALUE:
            raise ValueError("extensions may only define classes or modules")
        return kind

    @field_validator("qualified_name")
    @classmethod
    def _well_formed(cls, name: str) -> str:
        if not name or any(not part for part in name.split(SCOPE_SEPARATOR)):
            raise ValueError(f"malformed constant name: {name!r}")
        return name

    @property
    def is_nested(self) -> bool:
        return SCOPE_SEPARATOR in self.qualified_name


class ExtensionManifest(BaseModel):
    """Descriptor returned by a successful dynamic load.

    Examples
    --------
    >>> manifest = ExtensionManifest(
    ...     name="zlib",
    ...     defines=[
    ...         ConstantDefinition(qualified_name="Zlib", kind=ConstantKind.MODULE),
    ...         ConstantDefinition(
    ...             qualified_name="Zlib::Error",
    ...             kind=ConstantKind.CLASS,
    ...             superclass="StandardError",
    ...         ),
    ...     ],
    ... )
    >>> len(manifest.defines)
    2
    """

    model_config = ConfigDict(frozen=True)

    name: str
    requires: list[str] = Field(default_factory=list)
    defines: list[ConstantDefinition] = Field(default_factory=list)
