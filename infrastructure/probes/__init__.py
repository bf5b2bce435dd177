"""Probe transports."""
from .http_prober import HTTPProber, build_http_client
from .icmp_prober import ICMPProber, PingSummary, parse_ping_summary
from .factory import ProberRegistry

__all__ = [
    'HTTPProber',
    'build_http_client',
    'ICMPProber',
    'PingSummary',
    'parse_ping_summary',
    'ProberRegistry',
]
