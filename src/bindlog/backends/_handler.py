"""Root-handler wiring shared by the bundled bindings."""

from __future__ import annotations

import logging
import sys

from bindlog.events import Level


def install_handler(formatter: logging.Formatter, level: str) -> logging.Handler:
    """Attach a stderr handler with ``formatter`` to the root logger.

    Only replaces a handler a previous binding installed; external ones
    (pytest caplog, monitoring agents, etc.) are preserved.
    """
    logging.addLevelName(Level.TRACE, "TRACE")

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    handler._bindlog_managed = True  # type: ignore[attr-defined]

    root_logger = logging.getLogger()
    root_logger.handlers = [
        h for h in root_logger.handlers
        if not getattr(h, "_bindlog_managed", False)
    ]
    root_logger.addHandler(handler)
    level_no = Level.TRACE if level.upper() == "TRACE" else getattr(logging, level.upper(), logging.INFO)
    root_logger.setLevel(level_no)
    return handler
