"""Domain layer - Probe entities, enums, errors and interfaces."""
from .entities import ProbeSpec, RemediationTarget, ProbeResult, RemediationOutcome, TickReport
from .enums import ProbeKind, FailureCause, RemediationFailure, MonitorStatus
from .exceptions import (
    WatchdogError,
    ConfigurationError,
    RemediationError,
    RemediationConnectionError,
    RemediationCommandError,
)
from .interfaces import IProber, IRemediator

__all__ = [
    # Entities
    'ProbeSpec',
    'RemediationTarget',
    'ProbeResult',
    'RemediationOutcome',
    'TickReport',
    # Enums
    'ProbeKind',
    'FailureCause',
    'RemediationFailure',
    'MonitorStatus',
    # Errors
    'WatchdogError',
    'ConfigurationError',
    'RemediationError',
    'RemediationConnectionError',
    'RemediationCommandError',
    # Interfaces
    'IProber',
    'IRemediator',
]
