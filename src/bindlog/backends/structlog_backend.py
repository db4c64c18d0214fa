"""structlog binding: processor pipeline + stdlib bridge.

After binding:
- bindlog.get_logger(name) → structlog BoundLogger under a bindlog Logger
- logging.getLogger()      → ALSO structured (via the stdlib bridge)

Calls buffered before binding are replayed with ``replayed=True`` and the
thread name of the original call. Their ``timestamp`` is set back to the
call time; the time of replay is kept as ``replayed_at``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import structlog

from bindlog.backends._handler import install_handler
from bindlog.config import BindlogConfig, get_config
from bindlog.events import Level, SubstituteLoggingEvent
from bindlog.logger import ExcInfo, LoggerBase, resolve_exc_info

# TRACE has no structlog method of its own
_METHODS: dict[Level, str] = {
    Level.TRACE: "debug",
    Level.DEBUG: "debug",
    Level.INFO: "info",
    Level.WARNING: "warning",
    Level.ERROR: "error",
    Level.CRITICAL: "critical",
}


class StructlogLogger(LoggerBase):
    def __init__(self, name: str) -> None:
        self._name = name
        self._stdlib = logging.getLogger(name)
        self._bound = structlog.get_logger(name)

    def is_enabled_for(self, level: Level) -> bool:
        return self._stdlib.isEnabledFor(int(level))

    def log(
        self,
        level: Level,
        msg: str,
        *args: Any,
        exc_info: ExcInfo = None,
        **kwargs: Any,
    ) -> None:
        level = Level(level)
        # filter_by_level would judge TRACE by its "debug" method
        if not self.is_enabled_for(level):
            return
        exc = resolve_exc_info(exc_info)
        if exc is not None:
            kwargs["exc_info"] = exc
        getattr(self._bound, _METHODS[level])(msg, *args, **kwargs)

    def log_event(self, event: SubstituteLoggingEvent) -> None:
        kwargs = dict(event.kwargs)
        kwargs["replayed"] = True
        kwargs["original_time"] = datetime.fromtimestamp(event.timestamp, tz=timezone.utc).isoformat()
        kwargs["thread"] = event.thread_name
        self.log(event.level, event.message, *event.args, exc_info=event.exc_info, **kwargs)


class StructlogLoggerFactory:
    def __init__(self) -> None:
        self._loggers: dict[str, StructlogLogger] = {}

    def get_logger(self, name: str) -> StructlogLogger:
        logger = self._loggers.get(name)
        if logger is None:
            logger = self._loggers.setdefault(name, StructlogLogger(name))
        return logger


class StructlogBinding:
    """Configures structlog once and serves its loggers."""

    requested_api_version = "1.7"

    def __init__(self, config: BindlogConfig | None = None) -> None:
        cfg = config or get_config()
        install_handler(self._setup(cfg), cfg.log_level)
        self._factory = StructlogLoggerFactory()

    @property
    def logger_factory(self) -> StructlogLoggerFactory:
        return self._factory

    @property
    def backend_id(self) -> str:
        return f"{StructlogLoggerFactory.__module__}.{StructlogLoggerFactory.__qualname__}"

    @staticmethod
    def _restore_call_time(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        """Stamp replayed events with their original call time."""
        original = event_dict.pop("original_time", None)
        if original is not None:
            event_dict["replayed_at"] = event_dict.get("timestamp")
            event_dict["timestamp"] = original
        return event_dict

    @staticmethod
    def _setup(config: BindlogConfig) -> logging.Formatter:
        shared_processors: list = [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            StructlogBinding._restore_call_time,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
        ]

        if config.log_format == "console":
            renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer()
        else:
            renderer = structlog.processors.JSONRenderer()

        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                *shared_processors,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

        return structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
