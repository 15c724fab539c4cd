"""Extension loading capability.

An extension unit is a JSON manifest (``*.ext``) with this structure::

    {
      "name": "zlib",
      "requires": ["stringio"],
      "defines": [
        {"qualified_name": "Zlib", "kind": "module"},
        {"qualified_name": "Zlib::Error", "kind": "class",
         "superclass": "StandardError"}
      ]
    }

The loader only parses and validates the manifest; defining the constants is
the engine's job, after the conflict checker has approved them.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import ValidationError

from loadforge.core.errors import DynamicLoadError
from loadforge.models.constants import ExtensionManifest

logger = logging.getLogger(__name__)


@runtime_checkable
class ExtensionLoader(Protocol):
    """Protocol for native extension loading backends."""

    def dynamic_load(self, path: Path) -> ExtensionManifest:
        """Load the unit at *path* and describe what it defines.

        Raises
        ------
        DynamicLoadError
            If *path* is not a valid loadable unit.
        """
        ...


class ManifestExtensionLoader:
    """Loads ``*.ext`` JSON manifests."""

    def dynamic_load(self, path: Path) -> ExtensionManifest:
        try:
            raw = path.read_bytes()
        except OSError as exc:
            raise DynamicLoadError(f"{path}: cannot open extension: {exc.strerror or exc}") from exc

        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise DynamicLoadError(f"{path}: not a valid loadable unit") from exc

        if not isinstance(data, dict):
            raise DynamicLoadError(f"{path}: not a valid loadable unit")

        data.setdefault("name", path.stem)
        try:
            manifest = ExtensionManifest(**data)
        except ValidationError as exc:
            raise DynamicLoadError(f"{path}: malformed extension descriptor: {exc}") from exc

        logger.debug(
            "Dynamically loaded %s (%d definition(s)).", manifest.name, len(manifest.defines)
        )
        return manifest
