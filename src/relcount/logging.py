"""Logging configuration for relcount."""

import logging
import sys

logger = logging.getLogger("relcount")

DEFAULT_FORMAT = "%(message)s"
VERBOSE_FORMAT = "%(levelname)s: %(message)s"


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure logging for the CLI.

    Args:
        verbose: If True, show DEBUG level messages with level prefix.
        quiet: If True, suppress INFO messages (only show WARNING+).
    """
    logger.handlers.clear()

    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(VERBOSE_FORMAT if verbose else DEFAULT_FORMAT))

    logger.addHandler(handler)
    logger.setLevel(level)


def get_logger() -> logging.Logger:
    """Get the relcount logger."""
    return logger
