"""Failure cause enumerations for probes and remediation."""
from enum import Enum


class FailureCause(Enum):
    """Why a single probe failed."""

    TIMEOUT = "timeout"
    CONNECTION_ERROR = "connection-error"
    UNEXPECTED_STATUS = "unexpected-status"
    PROBE_UNFINISHED = "probe-unfinished"  # ICMP packet loss
    PROBE_ERROR = "probe-error"


class RemediationFailure(Enum):
    """Why a remediation attempt failed."""

    CONNECTION = "connection"  # unreachable, auth rejected, bad key
    COMMAND = "command"        # non-zero exit or channel timeout
