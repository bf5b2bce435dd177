"""Application services root exports."""
from .monitor import MonitorState, ProbeMonitor, Supervisor

__all__ = [
    "MonitorState",
    "ProbeMonitor",
    "Supervisor",
]
