"""Domain entities."""
from .probe_spec import ProbeSpec, RemediationTarget, DEFAULT_PROBE_URL, DEFAULT_SSH_PORT
from .results import ProbeResult, RemediationOutcome, TickReport

__all__ = [
    'ProbeSpec',
    'RemediationTarget',
    'DEFAULT_PROBE_URL',
    'DEFAULT_SSH_PORT',
    'ProbeResult',
    'RemediationOutcome',
    'TickReport',
]
