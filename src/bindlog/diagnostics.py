"""Operator diagnostics: ambiguity, version and replay reports.

Everything here is advisory text written to a DiagnosticSink. Nothing in
this module raises or changes control flow; a sink that cannot write
drops the message.

Each report ends with a pointer to its entry in docs/codes.md.
"""

from __future__ import annotations

import enum
import sys
import traceback
from typing import TYPE_CHECKING, Any, Protocol, TextIO, runtime_checkable

if TYPE_CHECKING:
    from bindlog.discovery import CandidateSet

CODES_DOC = "docs/codes.md"

# Binding versions this API accepts (prefix match on requested_api_version)
API_COMPATIBILITY_LIST: tuple[str, ...] = ("1.6", "1.7")


class DiagnosticCode(str, enum.Enum):
    NO_BINDING = "no_binding"
    MULTIPLE_BINDINGS = "multiple_bindings"
    VERSION_MISMATCH = "version_mismatch"
    SUBSTITUTE_LOGGER = "substitute_logger"
    REPLAY = "replay"
    UNDELIVERED = "undelivered"
    LOGGER_NAME_MISMATCH = "logger_name_mismatch"
    UNSUCCESSFUL_INIT = "unsuccessful_init"

    @property
    def url(self) -> str:
        return f"{CODES_DOC}#{self.value}"


UNSUCCESSFUL_INIT_MSG = (
    "bindlog LoggerFactory in failed state. Original exception was raised EARLIER. "
    f"See also {DiagnosticCode.UNSUCCESSFUL_INIT.url}"
)


# ---------------------------------------------------------------------------
# Sinks
# ---------------------------------------------------------------------------


@runtime_checkable
class DiagnosticSink(Protocol):
    """Where diagnostics go. Must never raise."""

    def report(self, message: str, cause: BaseException | None = None) -> None: ...


class StderrSink:
    """Write diagnostics to stderr, prefixed with ``BINDLOG:``."""

    prefix = "BINDLOG: "

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def report(self, message: str, cause: BaseException | None = None) -> None:
        stream = self._stream or sys.stderr
        try:
            if cause is None:
                stream.write(f"{self.prefix}{message}\n")
            else:
                stream.write(f"{message}\nReported exception:\n")
                stream.write("".join(traceback.format_exception(type(cause), cause, cause.__traceback__)))
            stream.flush()
        except Exception:
            pass  # diagnostics must not break the caller


class RecordingSink:
    """Keep diagnostics in memory. Used by `bindlog doctor` and tests."""

    def __init__(self) -> None:
        self.messages: list[str] = []
        self.causes: list[BaseException] = []

    def report(self, message: str, cause: BaseException | None = None) -> None:
        self.messages.append(message)
        if cause is not None:
            self.causes.append(cause)

    def contains(self, fragment: str) -> bool:
        return any(fragment in m for m in self.messages)

    def count(self, fragment: str) -> int:
        return sum(1 for m in self.messages if fragment in m)


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


def is_ambiguous(candidates: CandidateSet | None) -> bool:
    return candidates is not None and len(candidates) > 1


def report_multiple_binding_ambiguity(candidates: CandidateSet | None, sink: DiagnosticSink) -> None:
    if not is_ambiguous(candidates):
        return
    sink.report("Environment contains multiple bindlog bindings.")
    for candidate in candidates:  # type: ignore[union-attr]
        sink.report(f"Found binding in [{candidate.location}]")
    sink.report(f"See {DiagnosticCode.MULTIPLE_BINDINGS.url} for an explanation.")


def report_actual_binding(candidates: CandidateSet | None, binding: Any, sink: DiagnosticSink) -> None:
    # candidates is None on constrained platforms
    if is_ambiguous(candidates):
        sink.report(f"Actual binding is of type [{binding.backend_id}]")


def report_no_binding(sink: DiagnosticSink, reason: str) -> None:
    sink.report(f"{reason}.")
    sink.report("Defaulting to no-operation (NOP) logger implementation")
    sink.report(f"See {DiagnosticCode.NO_BINDING.url} for further details.")


def report_incompatible_binding(sink: DiagnosticSink, exc: BaseException) -> None:
    sink.report("Failed to instantiate bindlog LoggerFactory", exc)
    sink.report("The registered binding does not expose logger_factory and backend_id.")
    sink.report("Upgrade your binding to one written for bindlog 1.6 or later.")


def report_failed_binding(sink: DiagnosticSink, exc: BaseException) -> None:
    sink.report("Failed to instantiate bindlog LoggerFactory", exc)


# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------


def is_compatible_version(requested: str, compatibility: tuple[str, ...] = API_COMPATIBILITY_LIST) -> bool:
    return any(requested.startswith(prefix) for prefix in compatibility)


def version_sanity_check(
    binding: Any,
    sink: DiagnosticSink,
    compatibility: tuple[str, ...] = API_COMPATIBILITY_LIST,
) -> None:
    """Report a binding whose declared API version is not compatible.

    Bindings that declare no ``requested_api_version`` are not checked.
    """
    try:
        try:
            requested = binding.requested_api_version
        except AttributeError:
            return
        if not is_compatible_version(str(requested), compatibility):
            sink.report(
                f"The requested version {requested} by your bindlog binding is not compatible with "
                f"{list(compatibility)}"
            )
            sink.report(f"See {DiagnosticCode.VERSION_MISMATCH.url} for further details.")
    except Exception as exc:
        sink.report("Unexpected problem occurred during version sanity check", exc)


# ---------------------------------------------------------------------------
# Replay
# ---------------------------------------------------------------------------


def report_replay(sink: DiagnosticSink, event_count: int) -> None:
    sink.report(
        f"A number ({event_count}) of logging calls during the initialization phase have been "
        "intercepted and are"
    )
    sink.report("now being replayed. These are subject to the filtering rules of the underlying logging system.")
    sink.report(f"See also {DiagnosticCode.REPLAY.url}")


def report_substitution(sink: DiagnosticSink) -> None:
    sink.report("The following set of substitute loggers may have been accessed")
    sink.report("during the initialization phase. Logging calls during this")
    sink.report("phase were not honored. However, subsequent logging calls to these")
    sink.report("loggers will work as normally expected.")
    sink.report(f"See also {DiagnosticCode.SUBSTITUTE_LOGGER.url}")


def report_undelivered(sink: DiagnosticSink, event_count: int) -> None:
    sink.report(
        f"A number ({event_count}) of logging calls during the initialization phase could not be "
        "delivered because initialization failed."
    )
    sink.report(f"See also {DiagnosticCode.UNDELIVERED.url}")
    sink.report("They were issued by the following loggers:")


# ---------------------------------------------------------------------------
# Logger names
# ---------------------------------------------------------------------------


def report_name_mismatch(sink: DiagnosticSink, given: str, computed: str) -> None:
    sink.report(f'Detected logger name mismatch. Given name: "{given}"; computed name: "{computed}".')
    sink.report(f"See {DiagnosticCode.LOGGER_NAME_MISMATCH.url} for an explanation")
