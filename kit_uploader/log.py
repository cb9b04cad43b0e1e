"""Logging setup for the uploader.

All modules log under the ``kit_uploader`` namespace. Output is rendered
with Rich. A TRACE level below DEBUG carries full request and response
dumps and is only enabled with ``--verbose``.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

LOGGER_NAME = "kit_uploader"


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Return a logger inside the uploader namespace."""
    if name != LOGGER_NAME and not name.startswith(LOGGER_NAME + "."):
        name = f"{LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def setup_logging(verbose: bool = False, console: Console = None) -> logging.Logger:
    """Configure the uploader logger.

    Args:
        verbose: Log at TRACE level instead of INFO
        console: Rich console to write to (defaults to stdout)

    Returns:
        The configured root uploader logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(TRACE if verbose else logging.INFO)

    # Replace handlers from a previous call
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(legacy_windows=True),
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    # The Rich handler is the only output; do not repeat lines through root handlers
    logger.propagate = False
    return logger
