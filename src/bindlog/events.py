"""Log levels and the buffered event recorded by substitute loggers.

Events are frozen (immutable) dataclasses. A substitute logger builds one
per call while no backend is bound; the replay engine consumes each one
exactly once.
"""

from __future__ import annotations

import enum
import threading
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from bindlog.substitute import SubstituteLogger


class Level(enum.IntEnum):
    """Severity levels, numbered like stdlib logging.

    Any other int maps to the closest level at or below it (TRACE for
    anything lower), so ``Level(35)`` is WARNING and never raises.
    """

    TRACE = 5
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50

    @classmethod
    def _missing_(cls, value: object) -> Level | None:
        if isinstance(value, int) and not isinstance(value, bool):
            below = [member for member in cls if member <= value]
            return max(below) if below else cls.TRACE
        return None


@dataclass(frozen=True, eq=False)
class SubstituteLoggingEvent:
    logger: SubstituteLogger
    level: Level
    message: str
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)
    exc_info: BaseException | None = None
    timestamp: float = field(default_factory=time.time)  # epoch seconds
    thread_name: str = field(default_factory=lambda: threading.current_thread().name)
    thread_id: int = field(default_factory=threading.get_ident)

    @property
    def logger_name(self) -> str:
        return self.logger.name
