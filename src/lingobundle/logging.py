"""Logging setup for the command-line interface.

Library modules only create ``logging.getLogger(__name__)`` loggers and
never configure handlers; applications embedding lingobundle keep full
control. The CLI calls :func:`configure_logging` once at startup.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "lingobundle"


def configure_logging(level: str | int = "WARNING", console: Console | None = None) -> logging.Logger:
    """Attach a RichHandler to the ``lingobundle`` logger.

    Calling it again replaces the previous handler instead of stacking.

    Args:
        level: Level name or number.
        console: Console to log to; stderr by default.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level if isinstance(level, int) else level.upper())
    logger.propagate = False
    return logger
