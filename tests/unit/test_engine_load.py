"""Tests for RequireEngine.load and at_exit — unconditional and wrapped loads."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from loadforge.core.engine import RequireEngine
from loadforge.core.errors import ArgumentError, LoadError

WRAPPED_SCRIPT = """\
define_module("Foo")
at_exit(lambda: print("wrap_end"))

def _fail():
    raise RuntimeError("error in at_exit test")

at_exit(_fail)
print("ok")
"""


@pytest.fixture
def counter(engine: RequireEngine) -> list[int]:
    counter: list[int] = []
    engine.namespace.globals["counter"] = counter
    return counter


class TestLoad:
    def test_executes_every_call(self, engine: RequireEngine, write_file, counter):
        path = write_file("once.py", "counter.append(1)\n")
        assert engine.load(str(path)) is True
        assert engine.load(str(path)) is True
        assert counter == [1, 1]

    def test_does_not_touch_registry(self, engine: RequireEngine, write_file, counter):
        path = write_file("once.py", "counter.append(1)\n")
        engine.load(str(path))
        assert len(engine.registry) == 0
        assert engine.require(str(path))
        assert counter == [1, 1]

    def test_unwrapped_definitions_are_global(self, engine: RequireEngine, write_file):
        path = write_file("defs.py", "define_module('Foo')\nHello = 'hello'\n")
        engine.load(str(path))
        assert "Foo" in engine.namespace
        assert engine.namespace.globals["Hello"] == "hello"

    def test_load_searches_load_path_for_exact_name(self, engine: RequireEngine, write_file, tmp_dir: Path, counter):
        write_file("lib/once.py", "counter.append(1)\n")
        engine.load_path.append(str(tmp_dir / "lib"))
        engine.load("once.py")
        assert counter == [1]
        with pytest.raises(LoadError):
            engine.load("once")

    def test_missing_file(self, engine: RequireEngine, tmp_dir: Path):
        with pytest.raises(LoadError):
            engine.load(str(tmp_dir / "missing.py"))

    def test_errors_propagate_unchanged(self, engine: RequireEngine, write_file):
        path = write_file("broken.py", "raise KeyError('k')\n")
        with pytest.raises(KeyError):
            engine.load(str(path))
        assert engine.stack.depth == 0


class TestWrappedLoad:
    def test_definitions_are_discarded(self, engine: RequireEngine, write_file):
        path = write_file("defs.py", "define_module('Foo')\nHello = 'hello'\n")
        engine.load(str(path), True)
        assert "Foo" not in engine.namespace
        assert "Hello" not in engine.namespace.globals

    def test_top_level_names_visible_inside_unit(self, engine: RequireEngine, write_file, capsys):
        path = write_file("hello.py", "Hello = 'hello'\nclass Foo:\n    print(repr(Hello))\n")
        engine.load(str(path), True)
        assert capsys.readouterr().out == "'hello'\n"

    def test_wrapped_unit_reads_global_constants(self, engine: RequireEngine, write_file):
        seen: list[bool] = []
        engine.namespace.define_constant("Seen", seen)
        path = write_file(
            "sub.py",
            "define_class('MyIO', 'IO')\n"
            "const_get('Seen').append(const_defined('IO'))\n"
            "const_get('Seen').append(const_get('MyIO').descends_from('IO'))\n",
        )
        engine.load(str(path), wrap=True)
        assert seen == [True, True]
        assert "MyIO" not in engine.namespace

    def test_wrapped_extension_is_isolated(self, engine: RequireEngine, zlib_ext: Path):
        engine.load(str(zlib_ext), wrap=True)
        assert "Zlib" not in engine.namespace

    def test_callbacks_fire_at_shutdown_not_at_unit_end(self, engine: RequireEngine, write_file, capsys):
        path = write_file("wrapped.py", WRAPPED_SCRIPT)
        engine.load(str(path), True)
        print("end")
        assert len(engine.deferred) == 2

        failures = engine.shutdown()

        assert capsys.readouterr().out.splitlines() == ["ok", "end", "wrap_end"]
        assert len(failures) == 1
        assert "error in at_exit test" in failures[0].message
        assert failures[0].origin == path.resolve()
        assert "Foo" not in engine.namespace


class TestAtExit:
    def test_without_callback(self, engine: RequireEngine):
        with pytest.raises(ArgumentError):
            engine.at_exit()

    def test_decorator_form(self, engine: RequireEngine):
        seen: list[str] = []

        @engine.at_exit
        def _record() -> None:
            seen.append("x")

        engine.shutdown()
        assert seen == ["x"]


class TestScriptFile:
    def test_file_is_restored_after_nested_require(
        self, engine: RequireEngine, write_file, tmp_dir: Path
    ):
        write_file("lib/inner.py", "inner_file = __file__\n")
        outer = write_file("outer.py", "before = __file__\nrequire('inner')\nafter = __file__\n")
        engine.load_path.append(str(tmp_dir / "lib"))

        engine.load(str(outer))

        scope = engine.namespace.globals
        assert scope["before"] == scope["after"] == str(outer.resolve())
        assert scope["inner_file"] == str((tmp_dir / "lib" / "inner.py").resolve())
        assert "__file__" not in scope


class TestSerialisedAccess:
    def test_at_exit_and_provide_wait_for_the_engine_lock(self, engine: RequireEngine):
        done = threading.Event()

        def register() -> None:
            engine.at_exit(lambda: None)
            engine.provide("thread")
            done.set()

        with engine._lock:
            worker = threading.Thread(target=register)
            worker.start()
            assert not done.wait(0.2)
            assert len(engine.deferred) == 0
        worker.join(timeout=5)
        assert done.is_set()
        assert len(engine.deferred) == 1
        assert engine.registry.provides("thread")
