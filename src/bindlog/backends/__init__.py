"""Bundled bindings: structlog (registered entry point) and stdlib logging."""

from bindlog.backends.stdlib_backend import StdlibBinding
from bindlog.backends.structlog_backend import StructlogBinding

__all__ = ["StdlibBinding", "StructlogBinding"]
