"""Domain enumerations."""
from .probe_kind import ProbeKind
from .failure_cause import FailureCause, RemediationFailure
from .monitor_status import MonitorStatus

__all__ = [
    'ProbeKind',
    'FailureCause',
    'RemediationFailure',
    'MonitorStatus',
]
