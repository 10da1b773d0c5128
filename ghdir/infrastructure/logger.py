"""
Package-wide logger for ghdir.

Library code only ever logs through ``logger``; attaching handlers is left to
the entry point (see ``configure_logging``).
"""

import logging
from typing import Optional


LOGGER_NAME = "ghdir"

logger = logging.getLogger(LOGGER_NAME)
logger.addHandler(logging.NullHandler())


def level_for(verbose: bool) -> int:
    return logging.DEBUG if verbose else logging.INFO


def configure_logging(
    verbose: bool = False,
    handler: Optional[logging.Handler] = None
) -> logging.Logger:
    """
    Attach a handler to the package logger and set its level.

    Args:
        verbose: Emit debug records when True
        handler: Handler to attach; a plain stream handler when omitted

    Returns:
        The configured package logger
    """
    if handler is None:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))

    for existing in list(logger.handlers):
        if not isinstance(existing, logging.NullHandler):
            logger.removeHandler(existing)

    logger.addHandler(handler)
    logger.setLevel(level_for(verbose))
    return logger


__all__ = [
    "logger",
    "configure_logging",
    "level_for",
    "LOGGER_NAME",
]
