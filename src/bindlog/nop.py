"""No-op logger: default when no binding is registered."""

from __future__ import annotations

from typing import Any

from bindlog.events import Level
from bindlog.logger import ExcInfo, LoggerBase


class NOPLogger(LoggerBase):
    """Discards all calls. Zero overhead."""

    def __init__(self, name: str = "NOP") -> None:
        self._name = name

    def is_enabled_for(self, level: Level) -> bool:
        return False

    def log(self, level: Level, msg: str, *args: Any, exc_info: ExcInfo = None, **kwargs: Any) -> None:
        pass


NOP_LOGGER = NOPLogger()


class NOPLoggerFactory:
    """Hands out the shared NOPLogger for every name."""

    def get_logger(self, name: str) -> NOPLogger:
        return NOP_LOGGER
