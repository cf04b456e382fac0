"""Diagnostic logging to stderr with the tool's stable prefix."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "agent: %(message)s"
PACKAGE_LOGGER = "shell_agent"


def configure_logging(*, verbose: bool) -> logging.Logger:
    """Route package logs to the current stderr; stdout is never touched."""

    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False
    return logger
