"""Domain interfaces."""
from .probing import IProber, IRemediator

__all__ = [
    'IProber',
    'IRemediator',
]
