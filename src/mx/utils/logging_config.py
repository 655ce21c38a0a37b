"""Logging setup shared by the mx entry points."""

from __future__ import annotations

import logging

from mx.config import MX_LOG_LEVEL

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int | None = None) -> None:
    """Send mx log records to stderr.

    Interpreter output is inherited by child processes and never passes
    through these handlers.
    """
    logger = logging.getLogger("mx")
    logger.setLevel(level if level is not None else MX_LOG_LEVEL)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
