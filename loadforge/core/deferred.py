"""Deferred callbacks run once at program termination, newest first."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict

from loadforge.core.errors import ArgumentError

logger = logging.getLogger(__name__)


class CallbackFailure(BaseModel):
    """One failed deferred callback, reported after the drain."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    order: int
    origin: Path | None = None
    error: BaseException

    @property
    def message(self) -> str:
        return f"{type(self.error).__name__}: {self.error}"


class DeferredCallbackStack:
    """LIFO stack of zero-argument callbacks.

    ``push`` during execution; ``drain`` exactly once at shutdown.  A failing
    callback is logged and collected, and the earlier-registered callbacks
    still run.

    Examples
    --------
    >>> stack = DeferredCallbackStack()
    >>> seen = []
    >>> stack.push(lambda: seen.append("first"))
    >>> stack.push(lambda: seen.append("second"))
    >>> stack.drain()
    []
    >>> seen
    ['second', 'first']
    """

    def __init__(self) -> None:
        self._callbacks: list[tuple[int, Callable[[], Any], Path | None]] = []
        self._registered = 0
        self._drained = False
        self._finished = False
        self._failures: list[CallbackFailure] = []
        self._exit_request: SystemExit | None = None

    def push(self, callback: Callable[[], Any] | None = None, *, origin: Path | None = None) -> None:
        """Register *callback*; ``None`` or a non-callable is an ``ArgumentError``."""
        if callback is None:
            raise ArgumentError("called without a callback")
        if not callable(callback):
            raise ArgumentError(f"callback must be callable, got {type(callback).__name__}")
        if self._finished:
            logger.warning("Deferred callback registered after drain; it will not run.")
        self._registered += 1
        self._callbacks.append((self._registered, callback, origin))

    def drain(self) -> list[CallbackFailure]:
        """Run every callback in reverse registration order; return the failures.

        Callbacks registered while draining run too, before older ones.
        A callback raising ``SystemExit`` does not stop the drain; the last such
        request is kept in ``exit_request``.
        Calling ``drain`` a second time is a no-op returning no failures.
        """
        if self._drained:
            return []
        self._drained = True
        failures: list[CallbackFailure] = []
        while self._callbacks:
            order, callback, origin = self._callbacks.pop()
            try:
                callback()
            except SystemExit as exc:
                logger.info("Deferred callback #%d requested exit (%s).", order, exc.code)
                self._exit_request = exc
            except Exception as exc:
                logger.exception("Deferred callback #%d failed.", order)
                failures.append(CallbackFailure(order=order, origin=origin, error=exc))
        self._failures = failures
        self._finished = True
        return failures

    @property
    def drained(self) -> bool:
        return self._drained

    @property
    def exit_request(self) -> SystemExit | None:
        """The last ``SystemExit`` raised by a callback during the drain."""
        return self._exit_request

    @property
    def failures(self) -> list[CallbackFailure]:
        """Failures collected by the drain, in the order they occurred."""
        return list(self._failures)

    def __len__(self) -> int:
        return len(self._callbacks)
