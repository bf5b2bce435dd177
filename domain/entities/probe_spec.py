"""Probe specification entities."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..enums import ProbeKind
from ..exceptions import ConfigurationError

DEFAULT_SSH_PORT = 22
DEFAULT_PROBE_URL = "https://www.google.com/generate_204"


@dataclass(frozen=True)
class RemediationTarget:
    """Remote host that receives the reset command."""

    hostname: str
    username: str
    command: str
    port: int = DEFAULT_SSH_PORT
    password: Optional[str] = None
    key_file: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.hostname:
            raise ConfigurationError("hostname is required", field="server.hostname")
        if not self.username:
            raise ConfigurationError("username is required", field="server.username")
        if not self.command:
            raise ConfigurationError("reset_command is required", field="server.reset_command")
        if not self.password and not self.key_file:
            raise ConfigurationError("one of password or key_file is required", field="server")
        if not 0 < self.port < 65536:
            raise ConfigurationError(f"invalid port {self.port}", field="server.hostname")

    @property
    def address(self) -> str:
        """Render host:port, bracketing IPv6 literals."""
        host = f"[{self.hostname}]" if ":" in self.hostname else self.hostname
        return f"{host}:{self.port}"

    def auth_methods(self) -> List[Tuple[str, str]]:
        """Configured auth methods, in the order they are tried."""
        methods: List[Tuple[str, str]] = []
        if self.password:
            methods.append(("password", self.password))
        if self.key_file:
            methods.append(("publickey", self.key_file))
        return methods

    def __repr__(self) -> str:
        return (
            f"RemediationTarget(address={self.address!r}, username={self.username!r}, "
            f"password={'***' if self.password else None}, key_file={self.key_file!r})"
        )


@dataclass(frozen=True)
class ProbeSpec:
    """Immutable configuration of one monitored target.

    timeout and interval are seconds. down_times is the number of
    consecutive failed checks that trips remediation.
    """

    name: str
    kind: ProbeKind
    target: str
    timeout: float
    interval: float
    down_times: int
    remediation: RemediationTarget

    def __post_init__(self) -> None:
        if self.down_times < 1:
            raise ConfigurationError("invalid down times", field="down_times")
        if self.interval <= 0:
            raise ConfigurationError("interval must be positive", field="interval")
        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive", field="timeout")
        if not self.target:
            raise ConfigurationError("probe target is empty", field="probe_url")

    def describe(self) -> str:
        """One-line summary used in startup logs."""
        return (
            f"{self.name}: {self.kind.label} {self.target} every {self.interval:g}s "
            f"(timeout {self.timeout:g}s, down_times {self.down_times}) -> {self.remediation.address}"
        )
