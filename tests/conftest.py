"""Shared fakes for bindlog tests: in-memory bindings, loggers and locators."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable

import pytest

from bindlog.config import BindlogConfig, reset_config
from bindlog.diagnostics import RecordingSink
from bindlog.discovery import Candidate, CandidateSet
from bindlog.errors import NoBackendFound
from bindlog.events import Level, SubstituteLoggingEvent
from bindlog.logger import LoggerBase
from bindlog.resolution import ResolutionContext, reset


# =============================================================================
# Fake loggers
# =============================================================================


@dataclass
class Record:
    logger: str
    level: Level
    message: str
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    replayed: bool = False
    thread_name: str | None = None


class RecordingLogger(LoggerBase):
    """Event-aware: accepts buffered events as well as live calls."""

    def __init__(self, name: str, records: list[Record]) -> None:
        self._name = name
        self._records = records

    def is_enabled_for(self, level: Level) -> bool:
        return True

    def log(self, level, msg, *args, exc_info=None, **kwargs) -> None:
        self._records.append(Record(self._name, Level(level), msg, args, kwargs))

    def log_event(self, event: SubstituteLoggingEvent) -> None:
        self._records.append(
            Record(
                self._name,
                event.level,
                event.message,
                event.args,
                dict(event.kwargs),
                replayed=True,
                thread_name=event.thread_name,
            )
        )


class NameOnlyLogger(LoggerBase):
    """Cannot accept pre-built events (no log_event)."""

    def __init__(self, name: str, records: list[Record]) -> None:
        self._name = name
        self._records = records

    def is_enabled_for(self, level: Level) -> bool:
        return True

    def log(self, level, msg, *args, exc_info=None, **kwargs) -> None:
        self._records.append(Record(self._name, Level(level), msg, args, kwargs))


class RecordingLoggerFactory:
    def __init__(self, logger_cls: type = RecordingLogger) -> None:
        self.records: list[Record] = []
        self._logger_cls = logger_cls
        self._loggers: dict[str, Any] = {}
        self._lock = threading.Lock()

    def get_logger(self, name: str):
        with self._lock:
            if name not in self._loggers:
                self._loggers[name] = self._logger_cls(name, self.records)
            return self._loggers[name]

    def messages(self, logger: str | None = None) -> list[str]:
        return [r.message for r in self.records if logger is None or r.logger == logger]


# =============================================================================
# Fake bindings and locators
# =============================================================================


class FakeBinding:
    requested_api_version = "1.7"

    def __init__(
        self,
        factory: RecordingLoggerFactory | None = None,
        backend_id: str = "tests.FakeLoggerFactory",
    ) -> None:
        self._factory = factory or RecordingLoggerFactory()
        self._backend_id = backend_id

    @property
    def logger_factory(self) -> RecordingLoggerFactory:
        return self._factory

    @property
    def backend_id(self) -> str:
        return self._backend_id


class UndeclaredVersionBinding:
    """A binding without requested_api_version."""

    def __init__(self) -> None:
        self._factory = RecordingLoggerFactory()

    @property
    def logger_factory(self) -> RecordingLoggerFactory:
        return self._factory

    @property
    def backend_id(self) -> str:
        return "tests.UndeclaredVersionBinding"


class FakeLocator:
    """Deterministic locator: 0, 1 or N candidates, optional hook and error."""

    def __init__(
        self,
        bindings: list[Any] | None = None,
        locations: list[str] | None = None,
        on_load: Callable[[], None] | None = None,
        error: BaseException | None = None,
    ) -> None:
        self.bindings = list(bindings or [])
        self.locations = locations if locations is not None else [
            f"fake/binding_{i}.py" for i in range(len(self.bindings))
        ]
        self.on_load = on_load
        self.error = error
        self.find_calls = 0
        self.load_calls = 0
        self._lock = threading.Lock()

    def find_candidates(self) -> CandidateSet:
        self.find_calls += 1
        return tuple(Candidate(name=f"fake{i}", value=loc) for i, loc in enumerate(self.locations))

    def load_binding(self):
        with self._lock:
            self.load_calls += 1
        if self.on_load is not None:
            self.on_load()
        if self.error is not None:
            raise self.error
        if not self.bindings:
            raise NoBackendFound("No binding registered in FakeLocator")
        return self.bindings[0]


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_bindlog():
    """Reset process-wide context and config before and after each test."""
    reset()
    yield
    reset()
    reset_config()


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def config() -> BindlogConfig:
    return BindlogConfig(platform_vendor="linux")


@pytest.fixture()
def make_context(sink, config):
    """Build a ResolutionContext over a FakeLocator."""

    def _make(locator: FakeLocator, **overrides: Any) -> ResolutionContext:
        cfg = BindlogConfig(**{**config.to_dict(), **overrides})
        return ResolutionContext(locator=locator, sink=sink, config=cfg)

    return _make
