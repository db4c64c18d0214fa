"""Pure stdlib logging binding with JSON formatting.

No structlog dependency used at runtime. Not registered as an entry
point; install it explicitly:

    from bindlog import configure
    from bindlog.backends.stdlib_backend import StdlibBinding
    from bindlog.discovery import StaticLocator

    configure(locator=StaticLocator(StdlibBinding))

Keyword arguments passed to logger calls are kept on the LogRecord and
rendered as JSON fields. Replayed records keep the original creation
time and thread of the buffered call.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from bindlog.backends._handler import install_handler
from bindlog.config import BindlogConfig, get_config
from bindlog.events import Level, SubstituteLoggingEvent
from bindlog.logger import ExcInfo, LoggerBase, exc_info_tuple


class StdlibJsonFormatter(logging.Formatter):
    """One JSON object per record with the structured kwargs merged in.

    Replayed records are stamped with the time of the original call, and
    name the thread that made it, so they sort where they happened.
    """

    def format(self, record: logging.LogRecord) -> str:
        structured: dict[str, Any] = getattr(record, "_structured", None) or {}
        d: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
            **structured,
        }
        if structured.get("replayed"):
            d["thread"] = record.threadName
            d["replayed_at"] = datetime.now(timezone.utc).isoformat()
        if record.exc_info and record.exc_info[1]:
            d["exception"] = self.formatException(record.exc_info)
        return json.dumps(d, default=str)


class StdlibLogger(LoggerBase):
    """Gives a stdlib logger the bindlog API, kwargs included.

    Stdlib loggers don't accept arbitrary kwargs, so they are stored on
    the LogRecord for the formatter.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger
        self._name = logger.name

    def is_enabled_for(self, level: Level) -> bool:
        return self._logger.isEnabledFor(int(level))

    def _record(
        self,
        level: Level,
        msg: str,
        args: tuple[Any, ...],
        exc_info: ExcInfo,
        kwargs: dict[str, Any],
    ) -> logging.LogRecord:
        record = self._logger.makeRecord(
            self._logger.name,
            int(level),
            "(unknown)",
            0,
            msg,
            args,
            exc_info_tuple(exc_info),
        )
        record._structured = kwargs  # type: ignore[attr-defined]
        return record

    def log(
        self,
        level: Level,
        msg: str,
        *args: Any,
        exc_info: ExcInfo = None,
        **kwargs: Any,
    ) -> None:
        if not self.is_enabled_for(level):
            return
        self._logger.handle(self._record(level, msg, args, exc_info, kwargs))

    def log_event(self, event: SubstituteLoggingEvent) -> None:
        if not self.is_enabled_for(event.level):
            return
        kwargs = dict(event.kwargs)
        kwargs["replayed"] = True
        record = self._record(event.level, event.message, event.args, event.exc_info, kwargs)
        record.created = event.timestamp
        record.msecs = (event.timestamp - int(event.timestamp)) * 1000
        record.thread = event.thread_id
        record.threadName = event.thread_name
        self._logger.handle(record)


class StdlibLoggerFactory:
    def get_logger(self, name: str) -> StdlibLogger:
        return StdlibLogger(logging.getLogger(name))


class StdlibBinding:
    requested_api_version = "1.7"

    def __init__(self, config: BindlogConfig | None = None) -> None:
        cfg = config or get_config()
        if cfg.log_format == "console":
            formatter = logging.Formatter(
                "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        else:
            formatter = StdlibJsonFormatter()
        install_handler(formatter, cfg.log_level)
        self._factory = StdlibLoggerFactory()

    @property
    def logger_factory(self) -> StdlibLoggerFactory:
        return self._factory

    @property
    def backend_id(self) -> str:
        return f"{StdlibLoggerFactory.__module__}.{StdlibLoggerFactory.__qualname__}"
