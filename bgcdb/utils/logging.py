"""
Logging utilities for bgcdb.

Every package logger hangs below the ``bgcdb`` logger, which owns the
handlers. Modules call ``get_logger(__name__)`` once at import time; the
``bgcdb`` logger is given a stdout handler the first time that happens.
"""

import logging
import sys
from typing import Optional, Union


ROOT_LOGGER = "bgcdb"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_handlers_installed = False


def _to_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def setup_logger(
    level: Union[str, int] = "INFO",
    log_file: Optional[str] = None,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the ``bgcdb`` logger, replacing any previous handlers.

    Args:
        level: Level name (DEBUG, INFO, ...) or number
        log_file: Also write records to this file
        format_string: Record format, ``LOG_FORMAT`` if None

    Returns:
        The ``bgcdb`` logger
    """
    global _handlers_installed

    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(_to_level(level))
    root.propagate = False
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(format_string or LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    _handlers_installed = True
    return root


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """
    Get a logger below the ``bgcdb`` logger.

    Names outside the package namespace (scripts run as ``__main__``) are
    placed under it, so every record goes through the same handlers.
    """
    if not _handlers_installed:
        setup_logger()
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def set_level(level: Union[str, int]) -> None:
    """Change the level of the ``bgcdb`` logger."""
    get_logger().setLevel(_to_level(level))


class LogContext:
    """
    Temporarily change the level of a logger.

    Example:
        >>> with LogContext("DEBUG"):
        ...     evaluator.evaluate(query.terms)
    """

    def __init__(self, level: Union[str, int], logger: Optional[logging.Logger] = None):
        self.logger = logger or get_logger()
        self.level = _to_level(level)
        self._previous = self.logger.level

    def __enter__(self) -> logging.Logger:
        self._previous = self.logger.level
        self.logger.setLevel(self.level)
        return self.logger

    def __exit__(self, *exc_info) -> None:
        self.logger.setLevel(self._previous)
