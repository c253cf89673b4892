"""Utility modules: logging, locking, outbound HTTP."""

from typedmcp.utils.logging import setup_logging, get_logger, set_request_id
from typedmcp.utils.locks import ReadWriteLock

__all__ = [
    "setup_logging",
    "get_logger",
    "set_request_id",
    "ReadWriteLock",
]
