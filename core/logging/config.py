from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler, QueueHandler, QueueListener
from queue import Queue
from pathlib import Path
from typing import Optional

from .context import ContextFilter
from .levels import register_levels, to_level
from .formatter import ConsoleFormatter, JSONFormatter

_listener: QueueListener | None = None


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def bootstrap_logging(
    *,
    service: str = "watchdog",
    level: str | int | None = None,
    console: Optional[bool] = None,
    log_dir: Optional[Path] = None,
    log_file_name: str = "watchdog.jsonl",
    max_bytes: int = 5_000_000,
    backup_count: int = 5,
) -> None:
    """Configure the root logger: console lines and an optional JSON-lines file."""
    global _listener
    shutdown_logging()
    register_levels()
    root = logging.getLogger()
    root.handlers.clear()
    lvl = to_level(level or os.getenv("LOG_LEVEL", "INFO"))
    root.setLevel(lvl)
    context_filter = ContextFilter()

    if console if console is not None else _env_flag("LOG_CONSOLE", True):
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(to_level(os.getenv("LOG_CONSOLE_LEVEL"), default=lvl))
        handler.setFormatter(ConsoleFormatter(color=sys.stderr.isatty()))
        handler.addFilter(context_filter)
        root.addHandler(handler)

    if log_dir:
        log_dir.mkdir(parents=True, exist_ok=True)
        json_handler = RotatingFileHandler(str(log_dir / log_file_name), maxBytes=max_bytes, backupCount=backup_count)
        json_handler.setLevel(lvl)
        json_handler.setFormatter(JSONFormatter())
        q: Queue[logging.LogRecord] = Queue(-1)
        qh = QueueHandler(q)
        qh.addFilter(context_filter)
        root.addHandler(qh)
        _listener = QueueListener(q, json_handler, respect_handler_level=True)
        _listener.start()

    # chatty transports
    logging.getLogger("paramiko").setLevel(max(lvl, logging.WARNING))
    logging.getLogger("httpx").setLevel(max(lvl, logging.WARNING))
    logging.getLogger("httpcore").setLevel(max(lvl, logging.WARNING))
    logging.getLogger(__name__).debug("logging ready", extra={"service": service})


def shutdown_logging() -> None:
    global _listener
    if _listener:
        _listener.stop()
        _listener = None
