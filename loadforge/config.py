"""Loader configuration — env-driven.

Centralized config using pydantic-settings.  Reads from a .env file and
LOADFORGE_* environment variables.
"""

from __future__ import annotations

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from loadforge.models.load_path import TrustLevel


class LoaderConfig(BaseSettings):
    """Loader configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export LOADFORGE_LOAD_PATH=/opt/lib:~/lib
        export LOADFORGE_TRUST_LEVEL=restricted
        export LOADFORGE_LOG_LEVEL=DEBUG

    List settings take JSON::

        export LOADFORGE_BUILTIN_FEATURES='["enumerator", "thread"]'
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="LOADFORGE_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"
    debug: bool = False

    # Search paths, os.pathsep separated; "~" expands against ``home``.
    load_path: str = ""
    script_path: str = ""
    home: str = Field(default_factory=lambda: os.path.expanduser("~"))

    trust_level: TrustLevel = TrustLevel.UNRESTRICTED

    # Tried in this order when a request carries no recognised extension.
    script_extensions: list[str] = Field(default_factory=lambda: [".py"])
    extension_suffixes: list[str] = Field(default_factory=lambda: [".ext"])

    # Platform limits enforced by the canonicalizer.
    path_max: int = 4096
    name_max: int = 255

    # Feature names treated as already provided by the host runtime.
    builtin_features: list[str] = Field(default_factory=list)

    @property
    def known_extensions(self) -> list[str]:
        """Scripts first, then extensions — the fixed probe order."""
        return [*self.script_extensions, *self.extension_suffixes]

    @property
    def is_restricted(self) -> bool:
        return self.trust_level == TrustLevel.RESTRICTED
