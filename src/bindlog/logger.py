"""Logger and factory protocols shared by the facade and its bindings.

Architecture:
    Logger         — WHAT application code calls (trace .. critical, log)
    LoggerFactory  — WHERE named loggers come from (one per binding)
    EventAwareLogger — a Logger that can also accept a pre-built
                       SubstituteLoggingEvent, so buffered calls keep their
                       original timestamp and thread on replay

Message formatting is the backend's job: the facade passes the raw
message, positional args and keyword pairs through untouched.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Any, Protocol, Union, runtime_checkable

from bindlog.events import Level

if TYPE_CHECKING:
    from bindlog.events import SubstituteLoggingEvent

# What callers may pass as exc_info: an exception, a sys.exc_info() tuple,
# True for "the exception being handled", or None/False for none.
ExcInfo = Union[BaseException, tuple, bool, None]


@runtime_checkable
class Logger(Protocol):
    @property
    def name(self) -> str: ...

    def is_enabled_for(self, level: Level) -> bool: ...

    def log(
        self,
        level: Level,
        msg: str,
        *args: Any,
        exc_info: ExcInfo = None,
        **kwargs: Any,
    ) -> None: ...

    def trace(self, msg: str, *args: Any, **kwargs: Any) -> None: ...

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None: ...

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None: ...

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None: ...

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None: ...

    def critical(self, msg: str, *args: Any, **kwargs: Any) -> None: ...

@runtime_checkable
class EventAwareLogger(Protocol):
    def log_event(self, event: SubstituteLoggingEvent) -> None: ...


@runtime_checkable
class LoggerFactory(Protocol):
    def get_logger(self, name: str) -> Logger: ...


class LoggerBase:
    """Level helpers on top of a single ``log`` method.

    Subclasses set ``_name`` and implement ``log`` and ``is_enabled_for``.
    """

    _name: str

    @property
    def name(self) -> str:
        return self._name

    def is_enabled_for(self, level: Level) -> bool:
        raise NotImplementedError

    def log(
        self,
        level: Level,
        msg: str,
        *args: Any,
        exc_info: ExcInfo = None,
        **kwargs: Any,
    ) -> None:
        raise NotImplementedError

    def trace(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self.log(Level.TRACE, msg, *args, **kwargs)

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self.log(Level.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self.log(Level.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self.log(Level.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self.log(Level.ERROR, msg, *args, **kwargs)

    def critical(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self.log(Level.CRITICAL, msg, *args, **kwargs)

    def exception(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log at ERROR with the exception currently being handled."""
        kwargs.setdefault("exc_info", sys.exc_info()[1])
        self.log(Level.ERROR, msg, *args, **kwargs)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._name!r})"


def resolve_exc_info(exc_info: ExcInfo) -> BaseException | None:
    """The exception an ``exc_info`` argument refers to.

    ``True`` means the exception currently being handled, so this must run
    at call time: a buffered call is replayed outside its ``except`` block.
    """
    if exc_info is None or exc_info is False:
        return None
    if exc_info is True:
        return sys.exc_info()[1]
    if isinstance(exc_info, BaseException):
        return exc_info
    if isinstance(exc_info, tuple) and len(exc_info) == 3:
        return exc_info[1]
    return None


def exc_info_tuple(exc_info: ExcInfo):
    """(type, value, traceback) for stdlib ``makeRecord``, or None."""
    exc = resolve_exc_info(exc_info)
    if exc is None:
        return None
    return (type(exc), exc, exc.__traceback__)
