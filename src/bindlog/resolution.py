"""Resolution state machine: decide, once, which logger factory is live.

    UNINITIALIZED ──► ONGOING ──► SUCCESSFUL | NOP_FALLBACK | FAILED

The first caller of get_logger_factory() takes the lock, moves the state
to ONGOING, discovers and binds a backend, then settles on a terminal
state. Everyone reads the state once afterwards and dispatches on it:

    SUCCESSFUL   → the binding's logger factory
    NOP_FALLBACK → the shared no-op factory (nothing registered)
    FAILED       → InitializationFailure, every time, until reset()
    ONGOING      → the substitute factory (a re-entrant call from inside
                   binding, or another thread while binding runs)

Whatever the outcome, the replay engine then fixes up every substitute
handed out while ONGOING and drains their buffered calls.

A ResolutionContext holds all of this for one process. The module-level
functions use a lazily created default context; tests build their own.
"""

from __future__ import annotations

import enum
import inspect
import logging
import threading
from types import ModuleType
from typing import Any

from bindlog.binding import Binding
from bindlog.config import BindlogConfig, get_config, reset_config
from bindlog.diagnostics import (
    UNSUCCESSFUL_INIT_MSG,
    DiagnosticSink,
    StderrSink,
    report_actual_binding,
    report_failed_binding,
    report_incompatible_binding,
    report_multiple_binding_ambiguity,
    report_name_mismatch,
    report_no_binding,
    version_sanity_check,
)
from bindlog.discovery import BackendLocator, CandidateSet, EntryPointLocator
from bindlog.errors import (
    IncompatibleBackend,
    InitializationFailure,
    NoBackendFound,
    UnexpectedResolutionFault,
)
from bindlog.logger import Logger, LoggerFactory
from bindlog.nop import NOPLoggerFactory
from bindlog.replay import ReplayEngine
from bindlog.substitute import SubstituteLoggerFactory

logger = logging.getLogger(__name__)


class ResolutionState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    ONGOING = "ongoing"
    SUCCESSFUL = "successful"
    NOP_FALLBACK = "nop_fallback"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ResolutionState.SUCCESSFUL, ResolutionState.NOP_FALLBACK, ResolutionState.FAILED)


class ResolutionContext:
    """Process-scoped resolution state plus the factories it dispatches to."""

    def __init__(
        self,
        locator: BackendLocator | None = None,
        sink: DiagnosticSink | None = None,
        config: BindlogConfig | None = None,
    ) -> None:
        self._config = config or get_config()
        self._locator = locator or EntryPointLocator(self._config.entry_point_group)
        self._sink = sink or StderrSink()
        self._lock = threading.Lock()
        self._nop_factory = NOPLoggerFactory()
        self._init_cycle()

    def _init_cycle(self) -> None:
        self._state = ResolutionState.UNINITIALIZED
        self._substitute_factory = SubstituteLoggerFactory()
        self._binding: Binding | None = None
        self._candidates: CandidateSet | None = None
        self._failure: BaseException | None = None
        self._replay: ReplayEngine | None = None

    # -- read-only views ----------------------------------------------------

    @property
    def state(self) -> ResolutionState:
        return self._state

    @property
    def binding(self) -> Binding | None:
        return self._binding

    @property
    def candidates(self) -> CandidateSet | None:
        """Discovered registrations; None before discovery or on constrained platforms."""
        return self._candidates

    @property
    def config(self) -> BindlogConfig:
        return self._config

    @property
    def sink(self) -> DiagnosticSink:
        return self._sink

    @property
    def substitute_factory(self) -> SubstituteLoggerFactory:
        return self._substitute_factory

    @property
    def last_replay(self) -> ReplayEngine | None:
        return self._replay

    # -- entry points -------------------------------------------------------

    def get_logger_factory(self) -> LoggerFactory:
        if self._state is ResolutionState.UNINITIALIZED:
            with self._lock:
                if self._state is ResolutionState.UNINITIALIZED:
                    self._state = ResolutionState.ONGOING
                    self._perform_initialization()

        state = self._state
        if state is ResolutionState.SUCCESSFUL:
            return self._binding.logger_factory  # type: ignore[union-attr]
        if state is ResolutionState.NOP_FALLBACK:
            return self._nop_factory
        if state is ResolutionState.FAILED:
            raise InitializationFailure(UNSUCCESSFUL_INIT_MSG) from self._failure
        if state is ResolutionState.ONGOING:
            return self._substitute_factory
        raise AssertionError(f"Unreachable resolution state: {state}")

    def get_logger(self, identifier: Any) -> Logger:
        """Logger for a name, or for a class, function or module."""
        name = logger_name(identifier)
        resolved = self.get_logger_factory().get_logger(name)
        if self._config.detect_logger_name_mismatch and isinstance(identifier, type):
            caller = _calling_module()
            if caller is not None and caller != identifier.__module__:
                report_name_mismatch(self._sink, resolved.name, caller)
        return resolved

    def reset(self) -> None:
        """Return to UNINITIALIZED. For tests only."""
        with self._lock:
            self._init_cycle()

    # -- binding ------------------------------------------------------------

    def _perform_initialization(self) -> None:
        self._bind()
        if self._state is ResolutionState.SUCCESSFUL:
            version_sanity_check(self._binding, self._sink)

    def _bind(self) -> None:
        try:
            if not self._config.is_constrained_platform:
                self._candidates = self._find_candidates()
                report_multiple_binding_ambiguity(self._candidates, self._sink)
            binding = self._locator.load_binding()
            self._binding = binding
            self._state = ResolutionState.SUCCESSFUL
            report_actual_binding(self._candidates, binding, self._sink)
            logger.debug("Bound to %s", binding.backend_id)
        except NoBackendFound as exc:
            self._state = ResolutionState.NOP_FALLBACK
            report_no_binding(self._sink, str(exc))
        except IncompatibleBackend as exc:
            self._mark_failed(exc)
            report_incompatible_binding(self._sink, exc)
            raise
        except Exception as exc:
            self._mark_failed(exc)
            report_failed_binding(self._sink, exc)
            raise UnexpectedResolutionFault("Unexpected initialization failure") from exc
        except BaseException as exc:
            # KeyboardInterrupt, SystemExit: never leave the state ONGOING
            self._mark_failed(exc)
            report_failed_binding(self._sink, exc)
            raise
        finally:
            self._post_bind_cleanup()

    def _find_candidates(self) -> CandidateSet:
        try:
            return self._locator.find_candidates()
        except Exception as exc:
            self._sink.report("Error getting binding registrations", exc)
            return ()

    def _mark_failed(self, exc: BaseException) -> None:
        self._state = ResolutionState.FAILED
        self._binding = None
        self._failure = exc

    def _post_bind_cleanup(self) -> None:
        if self._state is ResolutionState.SUCCESSFUL:
            delegate_factory: LoggerFactory = self._binding.logger_factory  # type: ignore[union-attr]
        else:
            delegate_factory = self._nop_factory
        self._replay = ReplayEngine(
            self._substitute_factory,
            delegate_factory,
            self._sink,
            deliverable=self._state is not ResolutionState.FAILED,
        )
        self._replay.run()


def logger_name(identifier: Any) -> str:
    """Dotted logger name for a string, module, class or function."""
    if isinstance(identifier, str):
        return identifier
    if isinstance(identifier, ModuleType):
        return identifier.__name__
    qualname = getattr(identifier, "__qualname__", None)
    module = getattr(identifier, "__module__", None)
    if qualname is None or module is None:
        raise TypeError(f"Cannot derive a logger name from {identifier!r}")
    return f"{module}.{qualname}"


def _calling_module() -> str | None:
    """Name of the first module on the stack outside this package."""
    frame = inspect.currentframe()
    try:
        while frame is not None:
            name = frame.f_globals.get("__name__", "")
            if name != "bindlog" and not name.startswith("bindlog."):
                return name
            frame = frame.f_back
        return None
    finally:
        del frame


# ---------------------------------------------------------------------------
# Module state
# ---------------------------------------------------------------------------

_context: ResolutionContext | None = None
_context_lock = threading.Lock()


def get_context() -> ResolutionContext:
    """The process-wide context, created on first use."""
    global _context
    ctx = _context
    if ctx is None:
        with _context_lock:
            if _context is None:
                _context = ResolutionContext()
            ctx = _context
    return ctx


def configure(
    locator: BackendLocator | None = None,
    sink: DiagnosticSink | None = None,
    config: BindlogConfig | None = None,
) -> ResolutionContext:
    """Install the process-wide context. Call before the first get_logger().

    Once resolution has started the active context is kept and returned.
    """
    global _context
    with _context_lock:
        if _context is not None and _context.state is not ResolutionState.UNINITIALIZED:
            _context.sink.report("configure() called after resolution started; keeping the active binding")
            return _context
        _context = ResolutionContext(locator=locator, sink=sink, config=config)
        return _context


def get_logger_factory() -> LoggerFactory:
    return get_context().get_logger_factory()


def get_logger(identifier: Any) -> Logger:
    """Get a logger by name, or for a class, function or module.

    Before a backend is bound this returns a substitute that buffers
    calls; they are replayed once resolution completes.
    """
    return get_context().get_logger(identifier)


def reset() -> None:
    """Drop the process-wide context and config. For tests only."""
    global _context
    with _context_lock:
        _context = None
    reset_config()
