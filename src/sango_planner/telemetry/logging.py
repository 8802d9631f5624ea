"""Console logging setup for CLI runs."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Route ``sango_planner.*`` loggers to a rich console handler."""
    logger = logging.getLogger("sango_planner")
    logger.setLevel(level.upper())
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True))
    logger.propagate = False
    return logger
