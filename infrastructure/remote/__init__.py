"""Remote command execution."""
from .ssh_remediator import SSHRemediator, load_private_key

__all__ = [
    'SSHRemediator',
    'load_private_key',
]
