"""Logging setup for the command line entry point."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "cinnamon_cli"


def configure_logging(debug: bool = False, console: Console | None = None) -> logging.Logger:
    """Route ``cinnamon_cli`` loggers through Rich on stderr.

    Only warnings are shown unless ``debug`` is set. Calling this again
    replaces the previous handler instead of stacking a new one.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=debug,
        show_time=debug,
        markup=False,
        rich_tracebacks=debug,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    logger.propagate = False
    return logger


__all__ = ["LOGGER_NAME", "configure_logging"]
