"""loadforge: feature resolution and loading engine for a dynamic scripting runtime.

  - ``require`` loads a feature at most once, keyed by its canonical
    (symlink-free) identity
  - ``load`` executes unconditionally, optionally wrapped in an anonymous
    namespace
  - ``require_relative`` resolves against the real directory of the loading file
  - trust-tagged load-path entries, refused under restricted trust
  - extension constant-conflict detection
  - deferred (at-exit) callbacks drained newest first
"""

__version__ = "0.1.0"
__description__ = "Feature resolution and loading engine for a dynamic scripting runtime"

from loadforge.core.engine import RequireEngine
from loadforge.config import LoaderConfig
from loadforge.cli.app import app as cli

__all__ = ["RequireEngine", "LoaderConfig", "cli", "__version__"]
