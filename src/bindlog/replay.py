"""Replay engine: hand buffered calls to the loggers resolution settled on.

Runs once per resolution cycle, whatever the outcome:

    1. fixup()  — every pooled substitute gets the real logger of its name
    2. replay() — drain the queue in batches of REPLAY_BATCH_SIZE and
                  dispatch each event by its delegate's capability:
                    event-aware → delivered with its original time/thread
                    no-op       → discarded silently
                    name-only   → logger name reported (calls were lost)
                  after a failed resolution nothing is delivered; every
                  affected logger name is reported instead
    3. clear()  — the factory drops its pool and anything left queued

All three steps hold the substitute factory's lock, so a substitute
created concurrently either exists before fix-up (and is fixed up) or is
created after it (and never buffers).
"""

from __future__ import annotations

import logging

from bindlog.diagnostics import (
    DiagnosticSink,
    report_replay,
    report_substitution,
    report_undelivered,
)
from bindlog.errors import DelegateInvariantViolation
from bindlog.events import SubstituteLoggingEvent
from bindlog.logger import LoggerFactory
from bindlog.substitute import SubstituteLoggerFactory

logger = logging.getLogger(__name__)

# Events drained per iteration. Bounds per-iteration memory; not configurable.
REPLAY_BATCH_SIZE = 128


class ReplayEngine:
    def __init__(
        self,
        substitute_factory: SubstituteLoggerFactory,
        delegate_factory: LoggerFactory,
        sink: DiagnosticSink,
        deliverable: bool = True,
        batch_size: int = REPLAY_BATCH_SIZE,
    ) -> None:
        self._factory = substitute_factory
        self._delegate_factory = delegate_factory
        self._sink = sink
        self._deliverable = deliverable
        self._batch_size = batch_size
        self._reported_names: set[str] = set()

        self.replayed = 0
        self.dropped = 0
        self.batches: list[int] = []

    def run(self) -> None:
        with self._factory.lock:
            try:
                self.fixup()
                self.replay()
            finally:
                self._factory.clear()
        logger.debug(
            "Replay finished: %d replayed, %d dropped in %d batches",
            self.replayed, self.dropped, len(self.batches),
        )

    def fixup(self) -> None:
        with self._factory.lock:
            self._factory.mark_post_initialization()
            for substitute in self._factory.loggers():
                substitute.set_delegate(self._delegate_factory.get_logger(substitute.name))

    def replay(self) -> None:
        with self._factory.lock:
            queue_size = self._factory.queue_size()
            count = 0
            while True:
                batch = self._factory.drain_queue(self._batch_size)
                if not batch:
                    break
                self.batches.append(len(batch))
                for event in batch:
                    if count == 0:
                        self._emit_summary(event, queue_size)
                    count += 1
                    self._replay_single(event)

    def _emit_summary(self, event: SubstituteLoggingEvent, queue_size: int) -> None:
        substitute = event.logger
        if not self._deliverable:
            report_undelivered(self._sink, queue_size)
        elif substitute.is_delegate_event_aware():
            report_replay(self._sink, queue_size)
        elif substitute.is_delegate_nop():
            pass
        else:
            report_substitution(self._sink)

    def _replay_single(self, event: SubstituteLoggingEvent) -> None:
        substitute = event.logger
        if substitute.is_delegate_null():
            raise DelegateInvariantViolation(
                f"Substitute logger {substitute.name!r} reached replay without a delegate"
            )

        if not self._deliverable:
            self.dropped += 1
            self._report_name(substitute.name)
        elif substitute.is_delegate_event_aware():
            try:
                substitute.log_event(event)
            except Exception as exc:
                self.dropped += 1
                self._sink.report(f"Failed to replay logging call for [{substitute.name}]", exc)
            else:
                self.replayed += 1
        elif substitute.is_delegate_nop():
            self.dropped += 1
        else:
            self.dropped += 1
            self._report_name(substitute.name)

    def _report_name(self, name: str) -> None:
        if name not in self._reported_names:
            self._reported_names.add(name)
            self._sink.report(name)
