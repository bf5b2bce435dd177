"""Monitor status enumeration."""
from enum import Enum


class MonitorStatus(Enum):
    """Position of a monitor in the failure-counting state machine."""

    HEALTHY = "healthy"    # counter == 0
    DEGRADED = "degraded"  # 0 < counter < down_times
    TRIPPED = "tripped"    # counter >= down_times

    @classmethod
    def classify(cls, counter: int, down_times: int) -> 'MonitorStatus':
        """Derive the status from a failure counter and threshold."""
        if counter <= 0:
            return cls.HEALTHY
        if counter < down_times:
            return cls.DEGRADED
        return cls.TRIPPED
