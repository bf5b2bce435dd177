"""Transient per-tick result types."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..enums import FailureCause, MonitorStatus, RemediationFailure


@dataclass(frozen=True, slots=True)
class ProbeResult:
    """Outcome of one probe invocation."""
    success: bool
    cause: Optional[FailureCause] = None
    error: Optional[str] = None
    status_code: Optional[int] = None
    latency_ms: Optional[int] = None
    packets_sent: Optional[int] = None
    packets_received: Optional[int] = None

    @classmethod
    def ok(cls, **kwargs) -> "ProbeResult":
        return cls(success=True, **kwargs)

    @classmethod
    def failed(cls, cause: FailureCause, error: str, **kwargs) -> "ProbeResult":
        return cls(success=False, cause=cause, error=error, **kwargs)

    def describe(self) -> str:
        if self.success:
            return "ok"
        return f"{self.cause.value if self.cause else 'failed'}: {self.error}"


@dataclass(frozen=True, slots=True)
class RemediationOutcome:
    """Outcome of one remediation attempt. Output is kept even on failure."""
    success: bool
    output: str = ""
    failure: Optional[RemediationFailure] = None
    error: Optional[str] = None
    exit_status: Optional[int] = None

    @classmethod
    def ok(cls, output: str, exit_status: int = 0) -> "RemediationOutcome":
        return cls(success=True, output=output, exit_status=exit_status)

    @classmethod
    def failed(
        cls,
        failure: RemediationFailure,
        error: str,
        *,
        output: str = "",
        exit_status: Optional[int] = None,
    ) -> "RemediationOutcome":
        return cls(success=False, output=output, failure=failure, error=error, exit_status=exit_status)


@dataclass(frozen=True, slots=True)
class TickReport:
    """Snapshot of a monitor after one tick."""
    counter: int
    status: MonitorStatus
    probe: ProbeResult
    remediation: Optional[RemediationOutcome] = None

    @property
    def remediated(self) -> bool:
        return self.remediation is not None
