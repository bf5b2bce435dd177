from __future__ import annotations

import asyncio

from core.logging.context import context as log_context
from core.logging.logger import StructuredLogger, traceable
from domain.entities import ProbeResult, ProbeSpec, RemediationOutcome, TickReport
from domain.enums import FailureCause, MonitorStatus, RemediationFailure
from domain.interfaces import IProber, IRemediator
from .monitor_state import MonitorState


class ProbeMonitor:
    """Fixed-interval probe loop and failure-counting state machine for one target.

    Per tick: probe; success resets the counter, failure increments it. Once
    the counter reaches down_times the remediator runs. A successful
    remediation resets the counter; a failed one leaves it where it is, so
    the next failed probe retries remediation straight away.
    """

    def __init__(
        self,
        spec: ProbeSpec,
        prober: IProber,
        remediator: IRemediator,
        logger: StructuredLogger,
        *,
        verbose: bool = False,
    ) -> None:
        self.spec = spec
        self.prober = prober
        self.remediator = remediator
        self.logger = logger
        self.verbose = verbose
        self._state = MonitorState()

    @property
    def name(self) -> str:
        return self.spec.name

    async def run(self, stop: asyncio.Event) -> None:
        """Tick every spec.interval seconds until stop is set.

        stop is only looked at between ticks: a probe or remediation that is
        already running always finishes first.
        """
        loop = asyncio.get_running_loop()
        interval = self.spec.interval
        with log_context(probe=self.name):
            self.logger.info(f"starting server {self.name} probe check", extra={"interval_s": interval})
            try:
                next_tick = loop.time() + interval
                while not stop.is_set():
                    delay = next_tick - loop.time()
                    if delay > 0 and await self._stopped_within(stop, delay):
                        break
                    if stop.is_set():
                        break
                    await self.tick()
                    next_tick += interval
                    now = loop.time()
                    if next_tick < now:
                        # overran the interval: one catch-up tick now, then realign
                        next_tick = now
            finally:
                self.logger.info(f"stopped server {self.name} probe check")

    @staticmethod
    async def _stopped_within(stop: asyncio.Event, delay: float) -> bool:
        try:
            await asyncio.wait_for(stop.wait(), delay)
            return True
        except asyncio.TimeoutError:
            return False

    @traceable
    async def tick(self) -> TickReport:
        """Run one probe/count/remediate cycle and report where it left the monitor."""
        result = await self._probe()
        previous = self._state.counter
        counter = self._state.record(result)

        if result.success:
            if self.verbose:
                suffix = f" after {previous} failure(s)" if previous else ""
                self.logger.success(
                    f"server {self.name} probe check success{suffix}",
                    extra={"latency_ms": result.latency_ms},
                )
        else:
            self.logger.warning(
                f"server {self.name} probe check error: {result.error}",
                extra={"cause": result.cause.value if result.cause else None, "counter": counter},
            )

        if not self._state.tripped(self.spec.down_times):
            return TickReport(
                counter=counter,
                status=self._state.status(self.spec.down_times),
                probe=result,
            )

        outcome = await self._remediate(counter)
        if outcome.success:
            self._state.reset()
        return TickReport(
            counter=self._state.counter,
            status=MonitorStatus.TRIPPED,
            probe=result,
            remediation=outcome,
        )

    async def _probe(self) -> ProbeResult:
        try:
            return await self.prober.check(self.spec)
        except Exception as e:
            self.logger.error(f"server {self.name} prober raised: {e!r}", exc_info=True)
            return ProbeResult.failed(FailureCause.PROBE_ERROR, repr(e))

    async def _remediate(self, counter: int) -> RemediationOutcome:
        target = self.spec.remediation
        self.logger.warning(
            f"resetting server {self.name} ...",
            extra={"counter": counter, "host": target.address},
        )
        try:
            outcome = await self.remediator.remediate(target)
        except Exception as e:
            self.logger.error(f"server {self.name} remediator raised: {e!r}", exc_info=True)
            outcome = RemediationOutcome.failed(RemediationFailure.CONNECTION, repr(e))

        if outcome.output:
            self.logger.info(f"reset output from {target.address}:\n{outcome.output.rstrip()}")
        if outcome.success:
            self.logger.success(f"server {self.name} reset done, counter cleared")
        else:
            self.logger.error(
                f"resetting server {self.name} error: {outcome.error}",
                extra={
                    "failure": outcome.failure.value if outcome.failure else None,
                    "exit_status": outcome.exit_status,
                    "counter": counter,
                },
            )
        return outcome
