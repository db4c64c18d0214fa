"""Substitute loggers: stand-ins handed out while resolution is in progress.

A SubstituteLogger records every call as a SubstituteLoggingEvent on its
factory's queue until the replay engine assigns it a delegate. From then
on it is a plain pass-through and never buffers again.

SubstituteLoggerFactory owns the logger pool (one instance per name per
resolution cycle, first request wins) and the event queue. Every
operation runs under a single factory-wide lock; the replay engine holds
the same lock across fix-up and drain so no logger can be created or
recorded to half-way through.
"""

from __future__ import annotations

import threading
from collections import deque
from typing import Any

from bindlog.events import Level, SubstituteLoggingEvent
from bindlog.logger import ExcInfo, Logger, LoggerBase, resolve_exc_info
from bindlog.nop import NOPLogger


class SubstituteLogger(LoggerBase):
    """Buffers calls until a delegate is assigned, then forwards them."""

    def __init__(
        self,
        name: str,
        factory: SubstituteLoggerFactory,
        created_post_initialization: bool = False,
    ) -> None:
        self._name = name
        self._factory = factory
        self._created_post_initialization = created_post_initialization
        self._delegate: Logger | None = None
        self._event_aware: bool | None = None

    # -- delegate management ------------------------------------------------

    @property
    def delegate(self) -> Logger | None:
        return self._delegate

    def set_delegate(self, delegate: Logger) -> None:
        """Assign the resolved logger. Called once, during fix-up."""
        self._delegate = delegate
        self._event_aware = None

    def is_delegate_null(self) -> bool:
        return self._delegate is None

    def is_delegate_nop(self) -> bool:
        return isinstance(self._delegate, NOPLogger)

    def is_delegate_event_aware(self) -> bool:
        if self._delegate is None:
            return False
        if self._event_aware is None:
            self._event_aware = callable(getattr(self._delegate, "log_event", None))
        return self._event_aware

    @property
    def created_post_initialization(self) -> bool:
        return self._created_post_initialization

    # -- logging ------------------------------------------------------------

    def is_enabled_for(self, level: Level) -> bool:
        delegate = self._delegate
        if delegate is not None:
            return delegate.is_enabled_for(level)
        # Buffered calls are filtered by the backend on replay
        return not self._created_post_initialization

    def log(
        self,
        level: Level,
        msg: str,
        *args: Any,
        exc_info: ExcInfo = None,
        **kwargs: Any,
    ) -> None:
        delegate = self._delegate
        if delegate is None:
            if self._created_post_initialization:
                return
            exc_info = resolve_exc_info(exc_info)
            event = SubstituteLoggingEvent(
                logger=self,
                level=Level(level),
                message=msg,
                args=args,
                kwargs=kwargs,
                exc_info=exc_info,
            )
            if self._factory.record(event):
                return
            # Fixed up between the check above and the factory lock
            delegate = self._delegate
        delegate.log(level, msg, *args, exc_info=exc_info, **kwargs)

    def log_event(self, event: SubstituteLoggingEvent) -> None:
        """Hand a buffered event to an event-aware delegate."""
        if self.is_delegate_event_aware():
            self._delegate.log_event(event)  # type: ignore[union-attr]


class SubstituteLoggerFactory:
    """Pool of substitute loggers plus the queue of their buffered events."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._loggers: dict[str, SubstituteLogger] = {}
        self._queue: deque[SubstituteLoggingEvent] = deque()
        self._post_initialization = False

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def get_logger(self, name: str) -> SubstituteLogger:
        with self._lock:
            logger = self._loggers.get(name)
            if logger is None:
                logger = SubstituteLogger(name, self, self._post_initialization)
                self._loggers[name] = logger
            return logger

    def record(self, event: SubstituteLoggingEvent) -> bool:
        """Enqueue ``event``. False if its logger already has a delegate."""
        with self._lock:
            if not event.logger.is_delegate_null():
                return False
            self._queue.append(event)
            return True

    def drain_queue(self, max_batch: int) -> list[SubstituteLoggingEvent]:
        """Remove and return up to ``max_batch`` events, oldest first."""
        with self._lock:
            count = min(max_batch, len(self._queue))
            return [self._queue.popleft() for _ in range(count)]

    def queue_size(self) -> int:
        with self._lock:
            return len(self._queue)

    def loggers(self) -> list[SubstituteLogger]:
        with self._lock:
            return list(self._loggers.values())

    def logger_names(self) -> list[str]:
        with self._lock:
            return list(self._loggers)

    def mark_post_initialization(self) -> None:
        """Loggers created from now on discard calls instead of buffering."""
        with self._lock:
            self._post_initialization = True

    @property
    def post_initialization(self) -> bool:
        return self._post_initialization

    def clear(self) -> None:
        """Release the pool and drop any events still queued."""
        with self._lock:
            self._loggers.clear()
            self._queue.clear()
