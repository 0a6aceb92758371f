"""structlog setup for the CLI and the sidecar.

Library code only calls ``structlog.get_logger``; embedding applications
are free to configure structlog themselves instead of calling this.
"""

from __future__ import annotations
import logging
import sys

import structlog

LOG_FORMATS = ("console", "json")


def configure_logging(level: str = "INFO", fmt: str = "console") -> None:
    """Install level filtering and a console/JSON renderer writing to stderr."""
    level_num = logging.getLevelName(level.upper())
    if not isinstance(level_num, int):
        raise ValueError(f"Unknown log level: {level}")
    if fmt not in LOG_FORMATS:
        raise ValueError(f"Unknown log format: {fmt} (expected one of {LOG_FORMATS})")

    renderer = (
        structlog.processors.JSONRenderer()
        if fmt == "json"
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level_num),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )
