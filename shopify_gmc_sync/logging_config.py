"""Logging setup for the bundle sync.

All modules log through children of the ``shopify_gmc_sync`` logger. The
console handler is a :class:`rich.logging.RichHandler` so log records share
the terminal with the CLI's rich output.
"""

import logging
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "shopify_gmc_sync"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: Union[str, int] = "INFO", console: Optional[Console] = None) -> logging.Logger:
    """Attach a rich console handler to the package logger.

    Repeated calls only adjust the level, so tests and the HTTP handler can
    call this per invocation without stacking handlers.

    Returns:
        The package logger.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        log_time_format=_DATE_FORMAT,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
