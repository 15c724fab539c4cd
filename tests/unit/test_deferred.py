"""Tests for DeferredCallbackStack — LIFO drain, failure isolation."""

from __future__ import annotations

from pathlib import Path

import pytest

from loadforge.core.deferred import DeferredCallbackStack
from loadforge.core.errors import ArgumentError


class TestDeferredCallbackStack:
    def test_drain_is_lifo(self):
        stack = DeferredCallbackStack()
        seen: list[int] = []
        for i in range(3):
            stack.push(lambda i=i: seen.append(i))
        assert stack.drain() == []
        assert seen == [2, 1, 0]

    def test_failure_does_not_stop_earlier_callbacks(self):
        stack = DeferredCallbackStack()
        seen: list[str] = []

        def boom() -> None:
            raise RuntimeError("error in at_exit test")

        stack.push(lambda: seen.append("first"), origin=Path("/a.py"))
        stack.push(boom, origin=Path("/a.py"))
        failures = stack.drain()

        assert seen == ["first"]
        assert len(failures) == 1
        assert failures[0].order == 2
        assert failures[0].origin == Path("/a.py")
        assert "error in at_exit test" in failures[0].message
        assert stack.failures == failures

    def test_every_failure_is_reported(self):
        stack = DeferredCallbackStack()

        def fail(tag: str):
            def _callback() -> None:
                raise ValueError(tag)
            return _callback

        stack.push(fail("a"))
        stack.push(fail("b"))
        failures = stack.drain()
        assert [str(f.error) for f in failures] == ["b", "a"]

    def test_exit_request_does_not_stop_drain(self):
        """A callback raising SystemExit is kept as the exit request, not a failure."""
        stack = DeferredCallbackStack()
        seen: list[str] = []

        def leave() -> None:
            raise SystemExit(3)

        stack.push(lambda: seen.append("first"))
        stack.push(leave)
        failures = stack.drain()

        assert seen == ["first"]
        assert failures == []
        assert stack.exit_request is not None
        assert stack.exit_request.code == 3
        assert len(stack) == 0

    def test_no_exit_request_by_default(self):
        stack = DeferredCallbackStack()
        stack.push(lambda: None)
        stack.drain()
        assert stack.exit_request is None

    def test_drain_runs_once(self):
        stack = DeferredCallbackStack()
        seen: list[str] = []
        stack.push(lambda: seen.append("x"))
        stack.drain()
        assert stack.drained
        assert stack.drain() == []
        assert seen == ["x"]

    def test_push_without_callback(self):
        with pytest.raises(ArgumentError):
            DeferredCallbackStack().push()

    def test_push_non_callable(self):
        with pytest.raises(ArgumentError):
            DeferredCallbackStack().push("not callable")  # type: ignore[arg-type]

    def test_argument_error_is_value_error(self):
        with pytest.raises(ValueError):
            DeferredCallbackStack().push(None)

    def test_len(self):
        stack = DeferredCallbackStack()
        stack.push(lambda: None)
        assert len(stack) == 1
