"""
Utility functions for bgcdb.
"""

from .sets import intersect, union, difference
from .logging import setup_logger, get_logger, set_level, LogContext

__all__ = [
    "intersect",
    "union",
    "difference",
    "setup_logger",
    "get_logger",
    "set_level",
    "LogContext",
]
