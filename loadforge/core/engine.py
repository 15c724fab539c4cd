"""Require engine — resolution, trust, duplicate suppression and execution.

Every ``require`` walks a small state machine::

    RESOLVING -> TRUST_CHECK -> DUPLICATE_CHECK -> EXECUTING
              -> (DEFINITION_CHECK for extensions) -> DONE

with ``FAILED`` reachable from any non-terminal state.  The engine owns all
mutable loader state (load path, registry, namespace, load stack, deferred
callbacks) explicitly; nothing here is a process-wide singleton.

A failed require records nothing, so it can be retried.  Script errors
propagate unchanged; only a failed dynamic load is wrapped as ``LoadError``.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from loadforge.config import LoaderConfig
from loadforge.core.canonicalizer import PathCanonicalizer
from loadforge.core.conflict_checker import ConflictChecker
from loadforge.core.deferred import CallbackFailure, DeferredCallbackStack
from loadforge.core.errors import (
    DynamicLoadError,
    InvalidTransitionError,
    LoadError,
    TrustViolationError,
)
from loadforge.core.evaluator import Evaluator, ScriptEvaluator, read_source
from loadforge.core.extensions import ExtensionLoader, ManifestExtensionLoader
from loadforge.core.load_path import LoadPath, expand_home
from loadforge.core.load_stack import LoadStack
from loadforge.core.loaded_features import LoadedFeaturesRegistry
from loadforge.core.namespace import Namespace
from loadforge.core.relative import RelativeResolver
from loadforge.models.features import (
    VALID_TRANSITIONS,
    LoadOutcome,
    LoadResult,
    RequireState,
)
from loadforge.models.load_path import Candidate, TrustLevel, TrustTag, UnitKind

logger = logging.getLogger(__name__)


def is_path_request(feature: str) -> bool:
    """Whether *feature* names a file directly instead of a load-path feature."""
    if os.path.isabs(feature) or feature in (".", "..", "~"):
        return True
    prefixes = ("./", "../", "~/")
    if os.sep != "/":
        prefixes += (f".{os.sep}", f"..{os.sep}", f"~{os.sep}")
    return feature.startswith(prefixes)


class _RequestTrace:
    """States visited by one require request."""

    def __init__(self, feature: str) -> None:
        self.feature = feature
        self.states: list[RequireState] = [RequireState.RESOLVING]

    @property
    def state(self) -> RequireState:
        return self.states[-1]

    def advance(self, target: RequireState) -> None:
        current = self.state
        if target not in VALID_TRANSITIONS.get(current, set()):
            raise InvalidTransitionError(
                f"Cannot move require '{self.feature}' from {current.value} to {target.value}."
            )
        self.states.append(target)
        logger.debug("require %s: %s -> %s", self.feature, current.value, target.value)

    def fail(self) -> None:
        if VALID_TRANSITIONS.get(self.state):
            self.states.append(RequireState.FAILED)


class RequireEngine:
    """Loads scripts and extensions at most once (``require``) or always (``load``).

    Parameters
    ----------
    config:
        Loader configuration.  The initial load path, script search path,
        home directory, trust level, recognised extensions and length limits
        all come from here.
    evaluator:
        Script execution backend (``ScriptEvaluator`` by default).
    extension_loader:
        Dynamic-load backend (``ManifestExtensionLoader`` by default).

    Examples
    --------
    >>> engine = RequireEngine(LoaderConfig(load_path=""))
    >>> len(engine.load_path)
    0
    >>> engine.load_path.append("/opt/lib").directory
    '/opt/lib'
    """

    def __init__(
        self,
        config: LoaderConfig | None = None,
        *,
        evaluator: Evaluator | None = None,
        extension_loader: ExtensionLoader | None = None,
    ) -> None:
        self.config = config or LoaderConfig()
        self.canonicalizer = PathCanonicalizer(
            path_max=self.config.path_max, name_max=self.config.name_max
        )
        self.load_path = self._new_load_path()
        self.load_path.extend_from_variable(self.config.load_path)
        self.script_path = self._new_load_path()
        self.script_path.extend_from_variable(self.config.script_path)

        self.registry = LoadedFeaturesRegistry(self.config.known_extensions)
        for feature in self.config.builtin_features:
            self.registry.provide(feature)

        self.trust_level: TrustLevel = self.config.trust_level
        self.namespace = Namespace.bootstrap()
        self.deferred = DeferredCallbackStack()
        self.stack = LoadStack()
        self.relative = RelativeResolver(self.stack)
        self.evaluator: Evaluator = evaluator or ScriptEvaluator()
        self.extension_loader: ExtensionLoader = extension_loader or ManifestExtensionLoader()

        self._lock = threading.RLock()
        self.bind_runtime(self.namespace)

    def _new_load_path(self) -> LoadPath:
        return LoadPath(
            self.canonicalizer,
            home=self.config.home,
            script_extensions=self.config.script_extensions,
            extension_suffixes=self.config.extension_suffixes,
        )

    # ------------------------------------------------------------------
    # Script-facing runtime
    # ------------------------------------------------------------------

    def bind_runtime(self, namespace: Namespace) -> None:
        """Expose the loader operations to scripts executed in *namespace*."""
        namespace.globals.update(
            {
                "require": lambda feature: self.require(feature).loaded,
                "require_relative": lambda name: self.require_relative(name).loaded,
                "load": self.load,
                "at_exit": self.at_exit,
                "define_module": namespace.define_module,
                "define_class": namespace.define_class,
                "define_constant": namespace.define_constant,
                "const_get": namespace.const_get,
                "const_defined": namespace.is_defined,
            }
        )

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def _not_found(self, feature: str) -> LoadError:
        return LoadError(f"cannot load such file -- {feature}", path=feature)

    def _probe_path(self, path: str | Path, feature: str) -> Candidate:
        """Candidate for a direct path, trying recognised extensions."""
        self.canonicalizer.check_length(os.path.abspath(os.fspath(path)))
        candidate = self.load_path.probe_file(path)
        if candidate is None:
            raise self._not_found(feature)
        return candidate

    def resolve(self, feature: str) -> Candidate:
        """Locate *feature* without loading it.

        Path requests are resolved against the working directory (after home
        expansion); bare features are searched on the load path.

        Raises
        ------
        LoadError
            If nothing matches, or the path is too long to resolve.
        """
        if is_path_request(feature):
            return self._probe_path(expand_home(feature, self.config.home), feature)
        candidate = self.load_path.find(feature)
        if candidate is None:
            raise self._not_found(feature)
        return candidate

    def _resolve_exact(self, path: str) -> Candidate:
        """``load`` resolution: the exact file name, cwd first, then the load path."""
        expanded = expand_home(path, self.config.home)
        if is_path_request(path):
            self.canonicalizer.check_length(os.path.abspath(expanded))
        kind = self.load_path.unit_kind_for(path) or UnitKind.SCRIPT
        identity = self.canonicalizer.probe(expanded)
        if identity is not None:
            return Candidate(path=Path(expanded), identity=identity, unit_kind=kind)
        if not is_path_request(path):
            for entry in self.load_path:
                name = os.path.join(entry.directory, path)
                identity = self.canonicalizer.probe(name)
                if identity is not None:
                    return Candidate(path=Path(name), identity=identity, unit_kind=kind, entry=entry)
        raise self._not_found(path)

    def check_trust(self, candidate: Candidate) -> None:
        """Refuse a candidate found through an untrusted entry under restricted trust."""
        if self.trust_level == TrustLevel.RESTRICTED and candidate.trust == TrustTag.UNTRUSTED:
            directory = candidate.entry.directory if candidate.entry is not None else candidate.path
            raise TrustViolationError(f"loading from unsafe path {directory}")

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _execute_script(self, identity: Path, namespace: Namespace) -> None:
        unit = read_source(identity)
        directory = self.canonicalizer.real_directory(identity)
        with self.stack.frame(identity, directory, wrapped=namespace.is_wrapped):
            self.evaluator.execute(unit, namespace)

    def _load_extension(
        self, identity: Path, namespace: Namespace, trace: _RequestTrace | None = None
    ) -> list[str]:
        try:
            manifest = self.extension_loader.dynamic_load(identity)
        except DynamicLoadError as exc:
            raise LoadError(str(exc), path=identity) from exc

        directory = self.canonicalizer.real_directory(identity)
        with self.stack.frame(identity, directory, wrapped=namespace.is_wrapped):
            for dependency in manifest.requires:
                self.require(dependency)

        if trace is not None:
            trace.advance(RequireState.DEFINITION_CHECK)
        return ConflictChecker(namespace).apply(manifest.defines)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def require(self, feature: str) -> LoadResult:
        """Load *feature* unless its canonical identity is already loaded.

        Returns
        -------
        LoadResult
            ``loaded`` if the unit was executed by this call,
            ``already_loaded`` if it was loaded before (or is loading now).

        Raises
        ------
        LoadError
            If the feature cannot be found or dynamically loaded.
        TrustViolationError
            If it resolves through an untrusted entry under restricted trust.
        TypeError, NameError
            If an extension conflicts with existing constants.
        """
        with self._lock:
            return self._require(feature)

    def require_relative(self, name: str) -> LoadResult:
        """Require *name* relative to the real directory of the loading file."""
        with self._lock:
            target = self.relative.resolve(name)
            candidate = self._probe_path(target, name)
            return self._require(name, candidate=candidate)

    def try_require(self, feature: str) -> LoadResult:
        """Like ``require``, but failures come back as a ``failed`` result."""
        try:
            return self.require(feature)
        except Exception as exc:
            logger.info("require %s failed: %s", feature, exc)
            return LoadResult(
                feature=feature,
                outcome=LoadOutcome.FAILED,
                error_kind=type(exc).__name__,
                error_message=str(exc),
            )

    def _require(self, feature: str, *, candidate: Candidate | None = None) -> LoadResult:
        trace = _RequestTrace(feature)
        bare = candidate is None and not is_path_request(feature)
        try:
            if candidate is None:
                if bare and self.registry.provides(feature):
                    trace.advance(RequireState.DONE)
                    return self._already_loaded(trace, self.registry.identity_for(feature), None)
                candidate = self.resolve(feature)

            trace.advance(RequireState.TRUST_CHECK)
            self.check_trust(candidate)

            trace.advance(RequireState.DUPLICATE_CHECK)
            identity = candidate.identity
            if self.registry.contains(identity):
                if bare:
                    self.registry.record(identity, feature)
                trace.advance(RequireState.DONE)
                return self._already_loaded(trace, identity, candidate.unit_kind)
            if self.stack.is_loading(identity):
                logger.warning("loading in progress, circular require considered harmful - %s", identity)
                trace.advance(RequireState.DONE)
                return self._already_loaded(trace, identity, candidate.unit_kind)

            trace.advance(RequireState.EXECUTING)
            if candidate.unit_kind == UnitKind.EXTENSION:
                self._load_extension(identity, self.namespace, trace)
            else:
                self._execute_script(identity, self.namespace)

            self.registry.record(identity, feature if bare else None)
            trace.advance(RequireState.DONE)
            logger.info("Loaded %s (%s).", identity, candidate.unit_kind.value)
            return LoadResult(
                feature=feature,
                outcome=LoadOutcome.LOADED,
                identity=identity,
                unit_kind=candidate.unit_kind,
                states=list(trace.states),
            )
        except Exception:
            trace.fail()
            raise

    def _already_loaded(
        self, trace: _RequestTrace, identity: Path | None, kind: UnitKind | None
    ) -> LoadResult:
        logger.debug("require %s: already loaded.", trace.feature)
        return LoadResult(
            feature=trace.feature,
            outcome=LoadOutcome.ALREADY_LOADED,
            identity=identity,
            unit_kind=kind,
            states=list(trace.states),
        )

    def load(self, path: str, wrap: bool = False) -> bool:
        """Execute *path* unconditionally; the registry is neither read nor written.

        With *wrap*, top-level definitions land in an anonymous namespace that
        is discarded afterwards.  Deferred callbacks registered meanwhile still
        go on the global stack.
        """
        with self._lock:
            candidate = self._resolve_exact(os.fspath(path))
            self.check_trust(candidate)
            namespace = self.namespace
            if wrap:
                namespace = self.namespace.child(f"wrap:{candidate.identity.name}")
                self.bind_runtime(namespace)
            if candidate.unit_kind == UnitKind.EXTENSION:
                self._load_extension(candidate.identity, namespace)
            else:
                self._execute_script(candidate.identity, namespace)
            logger.info("Loaded %s%s.", candidate.identity, " (wrapped)" if wrap else "")
            return True

    def at_exit(self, callback: Callable[[], Any] | None = None) -> Callable[[], Any]:
        """Register *callback* to run at program end; usable as a decorator."""
        with self._lock:
            frame = self.stack.current
            self.deferred.push(callback, origin=frame.identity if frame is not None else None)
        return callback  # type: ignore[return-value]

    def provide(self, feature: str) -> None:
        """Declare *feature* as loaded without any backing file."""
        with self._lock:
            self.registry.provide(feature)

    @property
    def loaded_features(self) -> list[Path]:
        return self.registry.features()

    # ------------------------------------------------------------------
    # Programs
    # ------------------------------------------------------------------

    def find_script(self, name: str) -> Path:
        """Locate a program on the script search path (``-S`` lookup)."""
        if os.sep in name or (os.altsep and os.altsep in name):
            return Path(name)
        for entry in self.script_path:
            base = os.path.join(entry.directory, name)
            identity = self.canonicalizer.probe(base)
            if identity is not None:
                return Path(base)
            candidate = self.script_path.probe_file(base, entry=entry)
            if candidate is not None:
                return candidate.path
        raise LoadError(f"No such file or directory -- {name}", path=name)

    def run_main(self, path: str, *, search: bool = False) -> int:
        """Run *path* as the main program, then drain deferred callbacks.

        Returns the exit status: ``0`` on success, non-zero if the program
        raised or any deferred callback failed.  A ``SystemExit`` raised by a
        deferred callback sets the status.
        """
        status = 0
        try:
            with self._lock:
                script = self.find_script(path) if search else Path(expand_home(path, self.config.home))
                identity = self.canonicalizer.canonicalize(script)
                self._execute_script(identity, self.namespace)
        except SystemExit as exc:
            status = _exit_code(exc)
        except Exception as exc:
            logger.error("%s: %s (%s)", path, exc, type(exc).__name__)
            status = 1
        finally:
            failures = self.shutdown()
            exit_request = self.deferred.exit_request
            if exit_request is not None:
                status = _exit_code(exit_request)
            elif failures and status == 0:
                status = 1
        return status

    def shutdown(self) -> list[CallbackFailure]:
        """Drain the deferred callbacks (once); return any failures."""
        return self.deferred.drain()


def _exit_code(exc: SystemExit) -> int:
    if exc.code is None:
        return 0
    if isinstance(exc.code, int):
        return exc.code
    logger.error("%s", exc.code)
    return 1
