"""Logging configuration for rstedit.

Library modules obtain loggers through ``get_logger(__name__)`` (or plain
``logging.getLogger(__name__)``) and never configure handlers themselves.
Applications embedding rstedit call ``setup_logging`` once.
"""

import logging
import sys

LOGGER_NAMESPACE = "rstedit"
DEFAULT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
VERBOSE_FORMAT = (
    "%(asctime)s %(levelname)-8s %(name)s [%(filename)s:%(lineno)d]: %(message)s"
)

_handler: logging.Handler | None = None


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure the rstedit logger hierarchy.

    Calling this more than once replaces the previously installed handler,
    so it is safe to reconfigure after parsing command-line flags.

    Args:
        verbose: Log at DEBUG level with file/line information
        quiet: Only log errors. Takes precedence over ``verbose``.
    """
    global _handler

    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    root = logging.getLogger(LOGGER_NAMESPACE)
    if _handler is not None:
        root.removeHandler(_handler)

    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(
        logging.Formatter(VERBOSE_FORMAT if verbose and not quiet else DEFAULT_FORMAT)
    )
    root.addHandler(_handler)
    root.setLevel(level)
    root.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Return a logger inside the rstedit namespace.

    Args:
        name: Usually ``__name__`` of the calling module

    Returns:
        Logger whose name is prefixed with ``rstedit`` when it is not already
    """
    if name != LOGGER_NAMESPACE and not name.startswith(f"{LOGGER_NAMESPACE}."):
        name = f"{LOGGER_NAMESPACE}.{name}"
    return logging.getLogger(name)
