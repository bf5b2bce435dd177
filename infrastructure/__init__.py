"""Infrastructure layer - Probe transports and the SSH remediator."""
from .probes import HTTPProber, ICMPProber, ProberRegistry, build_http_client
from .remote import SSHRemediator

__all__ = [
    'HTTPProber',
    'ICMPProber',
    'ProberRegistry',
    'build_http_client',
    'SSHRemediator',
]
