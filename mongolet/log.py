"""
Package logger for mongolet.

Every module logs through ``logging.getLogger(__name__)`` so records end up
under the ``mongolet`` logger configured here.
"""

from __future__ import annotations

import logging

LOGGER_NAME = "mongolet"

logger: logging.Logger = logging.getLogger(LOGGER_NAME)
logger.addHandler(logging.NullHandler())


class _ForwardHandler(logging.Handler):
    def __init__(self, target: logging.Logger) -> None:
        super().__init__()
        self.target = target

    def emit(self, record: logging.LogRecord) -> None:
        self.target.handle(record)


def set_log_level(level: int) -> None:
    """Set the logging level for the package.

    Args:
        level: logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR, or logging.CRITICAL
    """
    logger.setLevel(level)


def set_logger(custom_logger: logging.Logger | None) -> None:
    """Forward package records to ``custom_logger``; ``None`` stops forwarding."""
    for handler in list(logger.handlers):
        if isinstance(handler, _ForwardHandler):
            logger.removeHandler(handler)
    if custom_logger is not None:
        logger.addHandler(_ForwardHandler(custom_logger))
        logger.propagate = False
    else:
        logger.propagate = True
