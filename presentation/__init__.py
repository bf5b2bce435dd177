"""Presentation layer - Command-line commands."""
from .cli import WatchdogCommand, CheckCommand

__all__ = [
    "WatchdogCommand",
    "CheckCommand",
]
