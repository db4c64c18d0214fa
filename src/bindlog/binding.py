"""The binding interface a logging backend exposes to the facade."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from bindlog.errors import IncompatibleBackend
from bindlog.logger import LoggerFactory


@runtime_checkable
class Binding(Protocol):
    """A resolved backend.

    logger_factory — hands out the backend's named loggers
    backend_id     — human-readable identifier used in diagnostics

    A binding may also declare ``requested_api_version`` (e.g. "1.7");
    bindings that do are checked against the facade's compatibility list.
    """

    @property
    def logger_factory(self) -> LoggerFactory: ...

    @property
    def backend_id(self) -> str: ...


def coerce_binding(target: Any) -> Binding:
    """Turn a registered object into a Binding.

    A registration may point at a Binding instance, a Binding class or a
    zero-argument callable returning a Binding.
    """
    if isinstance(target, type) or (callable(target) and not isinstance(target, Binding)):
        target = target()
    if not isinstance(target, Binding):
        raise IncompatibleBackend(
            f"{target!r} is not a bindlog binding (needs logger_factory and backend_id)"
        )
    return target
