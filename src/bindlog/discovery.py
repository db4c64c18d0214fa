"""Backend discovery: which bindings are registered in this interpreter.

Bindings register under an entry-point group (default "bindlog.bindings"):

    [project.entry-points."bindlog.bindings"]
    structlog = "bindlog.backends.structlog_backend:StructlogBinding"

More than one registration is ambiguous. Resolution still proceeds with
the first one in discovery order, which is whatever order
importlib.metadata walks sys.path in. Treat that as an accident of the
environment, not a guarantee.

Or hand bindings over directly:
    from bindlog.discovery import StaticLocator
    configure(locator=StaticLocator(StdlibBinding))
"""

from __future__ import annotations

from dataclasses import dataclass
from importlib.metadata import EntryPoint, entry_points
from typing import Any, Protocol, runtime_checkable

from bindlog.binding import Binding, coerce_binding
from bindlog.config import DEFAULT_ENTRY_POINT_GROUP
from bindlog.errors import NoBackendFound


@dataclass(frozen=True)
class Candidate:
    """One discovered binding registration."""

    name: str
    value: str  # "module:attr"
    distribution: str | None = None

    @property
    def location(self) -> str:
        if self.distribution:
            return f"{self.value} ({self.distribution})"
        return self.value

    @classmethod
    def from_entry_point(cls, ep: EntryPoint) -> Candidate:
        dist = getattr(ep, "dist", None)
        return cls(name=ep.name, value=ep.value, distribution=dist.name if dist else None)


# Ordered, duplicate-free
CandidateSet = tuple[Candidate, ...]


def dedupe(candidates: list[Candidate]) -> CandidateSet:
    """Drop repeated registrations, keeping first-seen order.

    The same distribution reachable twice on sys.path yields the same
    entry point twice; that is one binding, not an ambiguity.
    """
    seen: set[tuple[str, str | None]] = set()
    unique: list[Candidate] = []
    for candidate in candidates:
        key = (candidate.value, candidate.distribution)
        if key in seen:
            continue
        seen.add(key)
        unique.append(candidate)
    return tuple(unique)


@runtime_checkable
class BackendLocator(Protocol):
    """Strategy: where bindings are found.

    find_candidates() lists every registration (for ambiguity reporting).
    load_binding() loads the first one; raises NoBackendFound when there
    is none and IncompatibleBackend when it is not a binding.
    """

    def find_candidates(self) -> CandidateSet: ...

    def load_binding(self) -> Binding: ...


class EntryPointLocator:
    """Discover bindings through importlib.metadata entry points."""

    def __init__(self, group: str = DEFAULT_ENTRY_POINT_GROUP) -> None:
        self._group = group

    @property
    def group(self) -> str:
        return self._group

    def _entry_points(self) -> list[EntryPoint]:
        return list(entry_points(group=self._group))

    def find_candidates(self) -> CandidateSet:
        return dedupe([Candidate.from_entry_point(ep) for ep in self._entry_points()])

    def load_binding(self) -> Binding:
        eps = self._entry_points()
        if not eps:
            raise NoBackendFound(f'No binding registered under entry-point group "{self._group}"')
        return coerce_binding(eps[0].load())


class StaticLocator:
    """Bindings supplied in code, in priority order."""

    def __init__(self, *bindings: Any) -> None:
        self._bindings = list(bindings)

    def find_candidates(self) -> CandidateSet:
        return dedupe([
            Candidate(name=f"static[{i}]", value=_describe(binding))
            for i, binding in enumerate(self._bindings)
        ])

    def load_binding(self) -> Binding:
        if not self._bindings:
            raise NoBackendFound("No binding supplied to StaticLocator")
        return coerce_binding(self._bindings[0])


def _describe(obj: Any) -> str:
    target = obj if isinstance(obj, type) or (callable(obj) and hasattr(obj, "__qualname__")) else type(obj)
    return f"{target.__module__}:{target.__qualname__}"
