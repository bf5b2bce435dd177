"""Structured logging for the watchdog."""
from .config import bootstrap_logging, shutdown_logging
from .context import context, get_context
from .levels import LogLevel
from .logger import StructuredLogger, get_logger, traceable

__all__ = [
    "bootstrap_logging",
    "shutdown_logging",
    "context",
    "get_context",
    "LogLevel",
    "StructuredLogger",
    "get_logger",
    "traceable",
]
