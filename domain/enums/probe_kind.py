"""Probe kind enumeration."""
from enum import Enum


class ProbeKind(Enum):
    """Transport used to check a target.

    Provides:
    - label: short human-friendly name for CLI output
    """

    HTTP = "http"  # GET, expects 200/204
    ICMP = "icmp"  # echo requests, expects zero loss

    @property
    def label(self) -> str:
        """Get the label shown in summaries."""
        return "ping" if self == ProbeKind.ICMP else "http"

    @classmethod
    def parse(cls, value: str) -> 'ProbeKind':
        """Parse a kind name, accepting 'ping' as an alias for ICMP."""
        name = value.strip().lower()
        if name == "ping":
            return cls.ICMP
        return cls(name)
