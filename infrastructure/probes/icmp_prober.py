from __future__ import annotations

import asyncio
import math
import re
import time
from dataclasses import dataclass
from typing import List, Optional

from core.logging.logger import StructuredLogger
from domain.entities import ProbeResult, ProbeSpec
from domain.enums import FailureCause
from domain.interfaces import IProber

UNFINISHED_ERROR = "ping probe unfinished"

# iputils: "3 packets transmitted, 2 received, 33% packet loss, time 2003ms"
# busybox: "3 packets transmitted, 2 packets received, 33% packet loss"
_SUMMARY = re.compile(r"(\d+)\s+packets transmitted,\s+(\d+)\s+(?:packets\s+)?received")

# grace on top of the ping deadline before the subprocess is killed
_KILL_SLACK_S = 2.0


@dataclass(frozen=True, slots=True)
class PingSummary:
    transmitted: int
    received: int

    @property
    def loss_percent(self) -> float:
        if not self.transmitted:
            return 100.0
        return 100.0 * (self.transmitted - self.received) / self.transmitted


def parse_ping_summary(output: str) -> Optional[PingSummary]:
    """Pull transmitted/received counts out of ping's statistics block."""
    m = _SUMMARY.search(output)
    if not m:
        return None
    return PingSummary(transmitted=int(m.group(1)), received=int(m.group(2)))


class ICMPProber(IProber):
    """Send a fixed number of echo requests; any loss is a failure."""

    def __init__(
        self,
        logger: StructuredLogger,
        *,
        count: int = 3,
        deadline_s: float = 5.0,
        binary: str = "ping",
        verbose: bool = False,
    ) -> None:
        self.logger = logger
        self.count = count
        self.deadline_s = deadline_s
        self.binary = binary
        self.verbose = verbose

    def command(self, host: str) -> List[str]:
        return [
            self.binary,
            "-n",
            "-c", str(self.count),
            "-w", str(max(1, math.ceil(self.deadline_s))),
            "--",
            host,
        ]

    async def check(self, spec: ProbeSpec) -> ProbeResult:
        start = time.perf_counter()
        try:
            proc = await asyncio.create_subprocess_exec(
                *self.command(spec.target),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            return ProbeResult.failed(FailureCause.CONNECTION_ERROR, f"cannot run {self.binary}: {e}")

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), self.deadline_s + _KILL_SLACK_S)
        except asyncio.CancelledError:
            self._kill(proc)
            await asyncio.shield(proc.wait())
            raise
        except asyncio.TimeoutError:
            self._kill(proc)
            await proc.wait()
            return ProbeResult.failed(
                FailureCause.TIMEOUT,
                f"{self.binary} did not finish within {self.deadline_s + _KILL_SLACK_S:g}s",
                latency_ms=self._elapsed(start),
                packets_sent=self.count,
            )

        out = stdout.decode("utf-8", errors="replace")
        err = stderr.decode("utf-8", errors="replace").strip()
        latency_ms = self._elapsed(start)
        if self.verbose:
            self._log_output(spec.target, out)

        summary = parse_ping_summary(out)
        if summary is None:
            # no statistics block: ping could not even start (unknown host, no permission)
            detail = err or out.strip() or f"exit status {proc.returncode}"
            return ProbeResult.failed(FailureCause.CONNECTION_ERROR, detail, latency_ms=latency_ms)

        if summary.received < self.count:
            return ProbeResult.failed(
                FailureCause.PROBE_UNFINISHED,
                f"{UNFINISHED_ERROR} ({summary.received}/{summary.transmitted} replies, {summary.loss_percent:.0f}% loss)",
                latency_ms=latency_ms,
                packets_sent=summary.transmitted,
                packets_received=summary.received,
            )
        return ProbeResult.ok(
            latency_ms=latency_ms,
            packets_sent=summary.transmitted,
            packets_received=summary.received,
        )

    def _log_output(self, host: str, out: str) -> None:
        for line in out.splitlines():
            line = line.strip()
            if "bytes from" in line or "packets transmitted" in line or line.startswith(("rtt", "round-trip")):
                self.logger.debug(lambda line=line: f"ping {host}: {line}")

    @staticmethod
    def _kill(proc: asyncio.subprocess.Process) -> None:
        if proc.returncode is None:
            try:
                proc.kill()
            except ProcessLookupError:
                pass

    @staticmethod
    def _elapsed(start: float) -> int:
        return int((time.perf_counter() - start) * 1000.0)
