from __future__ import annotations

from pathlib import Path
from typing import List

from application.services.monitor import Supervisor
from config.loader import load_probe_specs
from config.options import WatchdogOptions
from core.logging.logger import StructuredLogger, get_logger
from domain.entities import ProbeSpec


class WatchdogCommand:
    """Long-running daemon: monitor every configured probe until SIGINT/SIGTERM."""

    def __init__(self, options: WatchdogOptions) -> None:
        self.options = options
        self.logger: StructuredLogger = get_logger(__name__, service="watchdog")

    def load(self, config_path: str | Path) -> List[ProbeSpec]:
        specs = load_probe_specs(config_path)
        self.logger.info(f"loaded {len(specs)} probe(s) from {config_path}")
        for spec in specs:
            self.logger.info(f"probe {spec.describe()}")
        return specs

    async def run(self, config_path: str | Path) -> int:
        specs = self.load(config_path)
        supervisor = Supervisor(specs, self.options)
        try:
            clean = await supervisor.run_until_signal()
        finally:
            await supervisor.aclose()
        self.logger.info("watchdog stopped" if clean else "watchdog stopped, some monitors were cancelled")
        return 0
