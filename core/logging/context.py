from __future__ import annotations

import contextvars
import logging
from typing import Any, Dict

# Each asyncio task runs in a copy of the creating context, so values bound
# inside a monitor task stay local to that monitor.
_context: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar("watchdog_log_context", default={})


def get_context() -> Dict[str, Any]:
    return dict(_context.get())


class context(object):
    """Temporarily bind values to the log context."""

    def __init__(self, **values: Any) -> None:
        self._values = {k: v for k, v in values.items() if v is not None}
        self._token: contextvars.Token | None = None

    def __enter__(self) -> Dict[str, Any]:
        current = get_context()
        current.update(self._values)
        self._token = _context.set(current)
        return current

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._token is not None:
            _context.reset(self._token)
            self._token = None
        return False


class ContextFilter(logging.Filter):
    """Copy the log context onto records before they cross a queue."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "log_context"):
            record.log_context = get_context()
        return True
