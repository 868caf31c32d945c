"""Logging configuration for amldeploy commands."""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"

_ROOT_LOGGER_NAME = "amldeploy"


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name."""
    return logging.getLogger(name)


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure the package logger.

    Operator-facing progress is printed through click; log records are a
    separate diagnostic channel written to stderr.

    Args:
        verbose: Enable DEBUG output, including every az invocation
        quiet: Only emit ERROR records
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    logger = logging.getLogger(_ROOT_LOGGER_NAME)
    logger.setLevel(level)

    # Avoid stacking handlers when several commands run in one process (tests)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
