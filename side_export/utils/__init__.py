"""Utility modules for side-code-export.

Provides:
- Structured logging configuration
"""

from .logging import LogContext, configure_logging, get_logger, log_operation

__all__ = [
    "configure_logging",
    "get_logger",
    "LogContext",
    "log_operation",
]
