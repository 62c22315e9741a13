"""Rich-backed logging setup shared by the CLI and the analysis workflow."""
from __future__ import annotations

import logging
from typing import Optional

from rich.logging import RichHandler

PACKAGE_LOGGER = "bizhealth_report"
# Third-party loggers that are only interesting when debugging the graph runtime
_QUIET_LOGGERS = ("langgraph", "httpx")

_handler: Optional[RichHandler] = None


def configure_logging(debug: bool = False, *, level: Optional[int] = None) -> logging.Logger:
    """Attach a single Rich handler to the package logger and return it.

    Calling again only adjusts the level, so a ``--debug`` toggle can be
    applied after the first configuration.
    """
    global _handler
    resolved_level = level or (logging.DEBUG if debug else logging.INFO)
    logger = logging.getLogger(PACKAGE_LOGGER)

    if _handler is None:
        _handler = RichHandler(rich_tracebacks=debug, show_path=debug, log_time_format="%H:%M:%S")
        _handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(_handler)
        logger.propagate = False

    logger.setLevel(resolved_level)
    _handler.setLevel(resolved_level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if debug else logging.WARNING)
    return logger
