"""Shared fixtures and fakes for the watchdog tests."""
from __future__ import annotations

import asyncio
from typing import Iterable, List, Optional, Union

import pytest

from core.logging.logger import get_logger
from domain.entities import ProbeResult, ProbeSpec, RemediationOutcome, RemediationTarget
from domain.enums import FailureCause, ProbeKind, RemediationFailure
from domain.interfaces import IProber, IRemediator


def make_target(**overrides) -> RemediationTarget:
    values = dict(hostname="192.168.1.1", username="root", password="secret", command="reboot")
    values.update(overrides)
    return RemediationTarget(**values)


def make_spec(name: str = "router", *, down_times: int = 3, interval: float = 0.01, **overrides) -> ProbeSpec:
    values = dict(
        name=name,
        kind=ProbeKind.HTTP,
        target="http://probe.test/generate_204",
        timeout=1.0,
        interval=interval,
        down_times=down_times,
        remediation=make_target(),
    )
    values.update(overrides)
    return ProbeSpec(**values)


def ok() -> ProbeResult:
    return ProbeResult.ok(status_code=204, latency_ms=1)


def fail(cause: FailureCause = FailureCause.CONNECTION_ERROR) -> ProbeResult:
    return ProbeResult.failed(cause, "connection refused")


class ScriptedProber(IProber):
    """Returns scripted results; once the script runs out, repeats `then`."""

    def __init__(self, script: Iterable[Union[bool, ProbeResult]] = (), *, then: bool = False) -> None:
        self.script: List[Union[bool, ProbeResult]] = list(script)
        self.then = then
        self.calls: List[ProbeSpec] = []

    async def check(self, spec: ProbeSpec) -> ProbeResult:
        self.calls.append(spec)
        item = self.script.pop(0) if self.script else self.then
        if isinstance(item, ProbeResult):
            return item
        return ok() if item else fail()


class ScriptedRemediator(IRemediator):
    def __init__(self, script: Iterable[bool] = (), *, then: bool = True, block: Optional[asyncio.Event] = None) -> None:
        self.script = list(script)
        self.then = then
        self.block = block
        self.calls: List[RemediationTarget] = []
        self.started = asyncio.Event()

    async def remediate(self, target: RemediationTarget) -> RemediationOutcome:
        self.calls.append(target)
        self.started.set()
        if self.block is not None:
            await self.block.wait()
        success = self.script.pop(0) if self.script else self.then
        if success:
            return RemediationOutcome.ok("rebooting\n")
        return RemediationOutcome.failed(RemediationFailure.CONNECTION, "dial tcp: connection refused")


@pytest.fixture
def logger():
    return get_logger("tests", service="tests")
