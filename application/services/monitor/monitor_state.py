from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from domain.entities import ProbeResult
from domain.enums import MonitorStatus


@dataclass(slots=True)
class MonitorState:
    """Mutable runtime state of one monitor. Owned by that monitor only."""
    counter: int = 0
    last_result: Optional[ProbeResult] = None

    def record(self, result: ProbeResult) -> int:
        """Fold a probe result into the failure counter."""
        self.last_result = result
        if result.success:
            self.counter = 0
        else:
            self.counter += 1
        return self.counter

    def reset(self) -> None:
        self.counter = 0

    def tripped(self, down_times: int) -> bool:
        return self.counter >= down_times

    def status(self, down_times: int) -> MonitorStatus:
        return MonitorStatus.classify(self.counter, down_times)
