"""Application settings and configuration."""
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_PATH = Path(os.getenv('WATCHDOG_ENV_FILE', Path(__file__).resolve().parent / '.env'))
load_dotenv(dotenv_path=ENV_PATH)


def _flag(name: str, default: bool = False) -> bool:
    return os.getenv(name, 'true' if default else 'false').strip().lower() in ('1', 'true', 'yes', 'on')


def _float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def _int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


class Settings:
    """Process-level settings read from the environment (and config/.env).

    Per-target settings live in the YAML probe file, not here.
    """

    # ── Probe file ─────────────────────────────────────────────────────────
    CONFIG_PATH: Optional[str] = os.getenv('WATCHDOG_CONFIG') or None
    VERBOSE:     bool          = _flag('WATCHDOG_VERBOSE')

    # ── Logging ────────────────────────────────────────────────────────────
    LOG_LEVEL:   str            = os.getenv('LOG_LEVEL', 'INFO')
    LOG_CONSOLE: bool           = _flag('LOG_CONSOLE', True)
    LOG_DIR:     Optional[Path] = Path(os.environ['LOG_DIR']) if os.getenv('LOG_DIR') else None

    # ── ICMP probe ─────────────────────────────────────────────────────────
    # 3 echo requests, 5 seconds total, zero loss tolerated
    PING_BINARY:     str   = os.getenv('PING_BINARY', 'ping')
    PING_COUNT:      int   = _int('PING_COUNT', 3)
    PING_DEADLINE_S: float = _float('PING_DEADLINE_S', 5.0)

    # ── Remediation (SSH) ──────────────────────────────────────────────────
    SSH_CONNECT_TIMEOUT_S: float = _float('SSH_CONNECT_TIMEOUT_S', 10.0)
    SSH_COMMAND_TIMEOUT_S: float = _float('SSH_COMMAND_TIMEOUT_S', 120.0)

    # ── Shutdown ───────────────────────────────────────────────────────────
    SHUTDOWN_GRACE_S: float = _float('SHUTDOWN_GRACE_S', 10.0)


settings = Settings()
