"""Prober and remediator interfaces."""
from abc import ABC, abstractmethod

from ..entities import ProbeSpec, ProbeResult, RemediationTarget, RemediationOutcome


class IProber(ABC):
    """Checks one target once."""

    @abstractmethod
    async def check(self, spec: ProbeSpec) -> ProbeResult:
        """Run a single probe. Expected failures are returned, not raised."""
        pass


class IRemediator(ABC):
    """Runs the recovery command on a remote host."""

    @abstractmethod
    async def remediate(self, target: RemediationTarget) -> RemediationOutcome:
        """Run the configured command once over a fresh session."""
        pass
