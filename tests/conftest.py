"""Shared test fixtures for loadforge."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from loadforge.config import LoaderConfig
from loadforge.core.canonicalizer import PathCanonicalizer
from loadforge.core.engine import RequireEngine
from loadforge.core.load_path import LoadPath
from loadforge.core.namespace import Namespace


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory, also used as the working directory."""
    return tmp_path


@pytest.fixture
def in_tmp_dir(tmp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Change into the temporary directory for the duration of the test."""
    monkeypatch.chdir(tmp_dir)
    return tmp_dir


@pytest.fixture
def home_dir(tmp_dir: Path) -> Path:
    home = tmp_dir / "home"
    home.mkdir()
    return home


@pytest.fixture
def loader_config(home_dir: Path) -> LoaderConfig:
    """A config isolated from the caller's LOADFORGE_* environment."""
    return LoaderConfig(
        load_path="",
        script_path="",
        home=str(home_dir),
        builtin_features=[],
        _env_file=None,
    )


@pytest.fixture
def engine(loader_config: LoaderConfig) -> RequireEngine:
    """Provide a fresh RequireEngine with an empty load path."""
    return RequireEngine(loader_config)


@pytest.fixture
def canonicalizer() -> PathCanonicalizer:
    return PathCanonicalizer()


@pytest.fixture
def load_path(canonicalizer: PathCanonicalizer, home_dir: Path) -> LoadPath:
    return LoadPath(canonicalizer, home=str(home_dir))


@pytest.fixture
def namespace() -> Namespace:
    return Namespace.bootstrap()


# ---------------------------------------------------------------------------
# File factories — shared across test modules
# ---------------------------------------------------------------------------


@pytest.fixture
def write_file(tmp_dir: Path) -> Callable[..., Path]:
    """Factory fixture: write a text file under the temp directory."""

    def _factory(relative: str, content: str = "") -> Path:
        path = tmp_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _factory


@pytest.fixture
def write_extension(write_file: Callable[..., Path]) -> Callable[..., Path]:
    """Factory fixture: write an ``.ext`` manifest declaring *defines*."""

    def _factory(
        relative: str,
        defines: list[dict[str, Any]],
        requires: list[str] | None = None,
        **overrides: Any,
    ) -> Path:
        manifest: dict[str, Any] = {"defines": defines, "requires": requires or []}
        manifest.update(overrides)
        return write_file(relative, json.dumps(manifest))

    return _factory


SOCKET_DEFINES: list[dict[str, Any]] = [
    {"qualified_name": "BasicSocket", "kind": "class", "superclass": "IO"},
    {"qualified_name": "Socket", "kind": "class", "superclass": "BasicSocket"},
    {"qualified_name": "Socket::Constants", "kind": "module"},
]

ZLIB_DEFINES: list[dict[str, Any]] = [
    {"qualified_name": "Zlib", "kind": "module"},
    {"qualified_name": "Zlib::Error", "kind": "class", "superclass": "StandardError"},
]


@pytest.fixture
def socket_ext(write_extension: Callable[..., Path], tmp_dir: Path) -> Path:
    """A ``socket`` extension in ``<tmp>/ext``."""
    return write_extension("ext/socket.ext", SOCKET_DEFINES)


@pytest.fixture
def zlib_ext(write_extension: Callable[..., Path], tmp_dir: Path) -> Path:
    """A ``zlib`` extension in ``<tmp>/ext``."""
    return write_extension("ext/zlib.ext", ZLIB_DEFINES)
