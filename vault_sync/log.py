"""Logging setup for the command-line tools."""

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "vault_sync"


def setup_logging(verbose: bool = False, console: Console = None) -> logging.Logger:
    """Route the package's log records through rich.

    Safe to call more than once; the previous handler is replaced.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(console=console, show_time=False, show_path=False, markup=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
    return logger
