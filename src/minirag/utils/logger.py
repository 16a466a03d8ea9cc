"""Logging configuration for minirag.

Log output goes to stderr so that library users keep stdout for their own output.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
PACKAGE_LOGGER = "minirag"


def setup_logger(name: str, level: str = "INFO") -> logging.Logger:
    """
    Set up a logger with stderr output.

    Args:
        name: Logger name (typically __name__)
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Configured logger instance

    Example:
        >>> logger = setup_logger(__name__, "DEBUG")
        >>> logger.info("Upserted 12 points into 'documents'")
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid duplicate handlers when a module is re-imported
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)

    logger.propagate = False

    return logger


def configure_root_logger(level: str = "INFO") -> None:
    """
    Configure the root logger and apply ``level`` to every minirag logger.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Note:
        Loggers built by setup_logger do not propagate, so their own level and
        handler level are updated as well.
    """
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        stream=sys.stderr,
        force=True,
    )

    for name, existing in list(logging.root.manager.loggerDict.items()):
        if name.split(".")[0] != PACKAGE_LOGGER or not isinstance(existing, logging.Logger):
            continue
        existing.setLevel(level)
        for handler in existing.handlers:
            handler.setLevel(level)
