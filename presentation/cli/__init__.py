"""Presentation CLI exports."""
from .watchdog_command import WatchdogCommand
from .check_command import CheckCommand

__all__ = [
    "WatchdogCommand",
    "CheckCommand",
]
