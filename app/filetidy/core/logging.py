"""Logging setup for the command line.

Library modules only create module loggers; handlers are installed once,
by the CLI, on the ``filetidy`` package logger.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "filetidy"


def resolve_level(verbose: bool, quiet: bool) -> int:
    """Map the global CLI flags to a log level.

    ``--quiet`` wins over ``--verbose``.
    """
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    return logging.WARNING


def configure_logging(verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """Install a rich stderr handler on the package logger.

    Calling this again replaces the handler installed by the previous call,
    so repeated CLI invocations in one process do not duplicate output.

    Args:
        verbose: Show debug messages.
        quiet: Show errors only.

    Returns:
        The configured package logger.
    """
    level = resolve_level(verbose, quiet)
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=verbose,
        rich_tracebacks=verbose,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    return logger
