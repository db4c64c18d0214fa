"""Exceptions raised while resolving and replaying to a logging binding."""

from __future__ import annotations


class BindlogError(Exception):
    """Base class for all bindlog errors."""


class NoBackendFound(BindlogError):
    """No binding is registered. Resolution degrades to the no-op factory."""


class IncompatibleBackend(BindlogError):
    """A registered binding does not provide the binding interface."""


class UnexpectedResolutionFault(BindlogError):
    """Binding failed for a reason other than a missing or incompatible backend."""


class InitializationFailure(BindlogError):
    """Raised on every logger request after resolution has failed."""


class DelegateInvariantViolation(BindlogError):
    """A substitute logger reached replay without a delegate."""
