"""Domain exceptions."""
from __future__ import annotations

from typing import Optional


class WatchdogError(Exception):
    """Base class for watchdog errors."""


class ConfigurationError(WatchdogError):
    """Invalid or missing configuration. Fatal at startup."""

    def __init__(self, message: str, *, probe: Optional[int] = None, field: Optional[str] = None) -> None:
        self.reason = message
        self.probe = probe
        self.field = field
        where = []
        if probe is not None:
            where.append(f"probes[{probe}]")
        if field:
            where.append(field)
        prefix = ".".join(where)
        super().__init__(f"{prefix}: {message}" if prefix else message)


class RemediationError(WatchdogError):
    """Remediation attempt failed."""

    def __init__(self, message: str, *, output: str = "", exit_status: Optional[int] = None) -> None:
        super().__init__(message)
        self.output = output
        self.exit_status = exit_status


class RemediationConnectionError(RemediationError):
    """Remote host unreachable, handshake failed or authentication rejected."""


class RemediationCommandError(RemediationError):
    """Remote command exited non-zero or did not finish in time."""
