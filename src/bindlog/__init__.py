"""bindlog: deferred-binding logging facade.

Public API:
    get_logger(name)      — Logger by name, or for a class/function/module
    get_logger_factory()  — The factory resolution settled on
    configure(...)        — Install locator/sink/config (before first use)
    reset()               — Reset for testing

Loggers handed out before a backend is bound are substitutes: they buffer
every call and replay it once resolution completes. Bindings register
under the "bindlog.bindings" entry-point group; with none registered,
logging is silently disabled.
"""

from bindlog.binding import Binding
from bindlog.config import BindlogConfig, get_config
from bindlog.diagnostics import DiagnosticSink, RecordingSink, StderrSink
from bindlog.discovery import BackendLocator, Candidate, EntryPointLocator, StaticLocator
from bindlog.errors import (
    BindlogError,
    DelegateInvariantViolation,
    IncompatibleBackend,
    InitializationFailure,
    NoBackendFound,
    UnexpectedResolutionFault,
)
from bindlog.events import Level, SubstituteLoggingEvent
from bindlog.logger import EventAwareLogger, Logger, LoggerFactory
from bindlog.resolution import (
    ResolutionContext,
    ResolutionState,
    configure,
    get_context,
    get_logger,
    get_logger_factory,
    reset,
)

__version__ = "0.1.0"

__all__ = [
    # Core API
    "get_logger",
    "get_logger_factory",
    "configure",
    "get_context",
    "reset",
    "ResolutionContext",
    "ResolutionState",
    # Loggers
    "Level",
    "Logger",
    "LoggerFactory",
    "EventAwareLogger",
    "SubstituteLoggingEvent",
    # Discovery
    "Binding",
    "BackendLocator",
    "Candidate",
    "EntryPointLocator",
    "StaticLocator",
    # Diagnostics
    "DiagnosticSink",
    "StderrSink",
    "RecordingSink",
    # Config
    "BindlogConfig",
    "get_config",
    # Errors
    "BindlogError",
    "NoBackendFound",
    "IncompatibleBackend",
    "UnexpectedResolutionFault",
    "InitializationFailure",
    "DelegateInvariantViolation",
]
