"""Logging for tubenet.

All modules log through children of the ``tubenet`` logger, obtained with
``get_logger(__name__)``. Only the ``tubenet`` logger owns a handler; child
loggers stay at ``NOTSET`` so one call to ``set_global_log_level`` governs the
whole package. Records also propagate to the Python root logger, which is
where pytest's ``caplog`` listens.
"""

import logging
import sys
from typing import Optional

PACKAGE_LOGGER = "tubenet"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def setup_root_logger(
    level: int = logging.INFO,
    format_string: Optional[str] = None,
    handler: Optional[logging.Handler] = None,
) -> None:
    """Install the single handler of the ``tubenet`` logger.

    Does nothing once configured; call ``reset_logging()`` first to install a
    different handler.

    Args:
        level: Package log level.
        format_string: Record format, ``DEFAULT_FORMAT`` when None.
        handler: Destination, a stdout ``StreamHandler`` when None.
    """
    global _configured
    if _configured:
        return

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)
    package_logger.handlers.clear()

    handler = handler if handler is not None else logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
    package_logger.addHandler(handler)
    package_logger.propagate = True

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a tubenet module (pass ``__name__``)."""
    setup_root_logger()
    logger = logging.getLogger(name)
    logger.setLevel(logging.NOTSET)
    return logger


def set_global_log_level(level: int) -> None:
    """Set the level of the ``tubenet`` logger and of its handlers."""
    setup_root_logger()
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)
    for handler in package_logger.handlers:
        handler.setLevel(level)


def level_for_flags(verbose: bool = False, quiet: bool = False) -> int:
    """Map the CLI's ``--verbose`` / ``--quiet`` flags to a log level.

    ``verbose`` wins when both are set.
    """
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def enable_debug_logging() -> None:
    set_global_log_level(logging.DEBUG)


def disable_debug_logging() -> None:
    """Return to INFO level."""
    set_global_log_level(logging.INFO)


def reset_logging() -> None:
    """Drop the handler and level so the next call configures afresh (tests)."""
    global _configured
    _configured = False
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.handlers.clear()
    package_logger.setLevel(logging.NOTSET)


setup_root_logger()
