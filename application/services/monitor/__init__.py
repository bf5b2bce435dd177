"""Per-target monitoring engine."""
from .monitor_state import MonitorState
from .probe_monitor import ProbeMonitor
from .supervisor import Supervisor, SHUTDOWN_SIGNALS

__all__ = [
    "MonitorState",
    "ProbeMonitor",
    "Supervisor",
    "SHUTDOWN_SIGNALS",
]
