from __future__ import annotations

from dataclasses import dataclass

from .settings import Settings, settings as default_settings


@dataclass(frozen=True, slots=True)
class WatchdogOptions:
    """Runtime knobs handed to monitors, probers and the remediator."""
    verbose: bool = False
    ping_binary: str = "ping"
    ping_count: int = 3
    ping_deadline_s: float = 5.0
    ssh_connect_timeout_s: float = 10.0
    ssh_command_timeout_s: float = 120.0
    shutdown_grace_s: float = 10.0

    @classmethod
    def from_settings(cls, s: Settings = default_settings, *, verbose: bool | None = None) -> "WatchdogOptions":
        """Build options from Settings, letting the CLI override verbosity."""
        return cls(
            verbose=s.VERBOSE if verbose is None else verbose,
            ping_binary=s.PING_BINARY,
            ping_count=max(1, s.PING_COUNT),
            ping_deadline_s=max(1.0, s.PING_DEADLINE_S),
            ssh_connect_timeout_s=s.SSH_CONNECT_TIMEOUT_S,
            ssh_command_timeout_s=s.SSH_COMMAND_TIMEOUT_S,
            shutdown_grace_s=max(0.0, s.SHUTDOWN_GRACE_S),
        )
