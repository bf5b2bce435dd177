"""Application layer - Monitoring services."""
from .services import ProbeMonitor, Supervisor

__all__ = [
    'ProbeMonitor',
    'Supervisor',
]
