"""
Tests for ICMPProber (infrastructure/probes/icmp_prober.py).

The ping subprocess is replaced with a fake; no packets are sent.
"""
import asyncio

import pytest

from domain.enums import FailureCause, ProbeKind
from infrastructure.probes import ICMPProber, parse_ping_summary
from infrastructure.probes import icmp_prober
from tests.conftest import make_spec

IPUTILS_OK = """PING 10.0.0.1 (10.0.0.1) 56(84) bytes of data.
64 bytes from 10.0.0.1: icmp_seq=1 ttl=64 time=0.412 ms
64 bytes from 10.0.0.1: icmp_seq=2 ttl=64 time=0.388 ms
64 bytes from 10.0.0.1: icmp_seq=3 ttl=64 time=0.401 ms

--- 10.0.0.1 ping statistics ---
3 packets transmitted, 3 received, 0% packet loss, time 2003ms
rtt min/avg/max/mdev = 0.388/0.400/0.412/0.010 ms
"""

IPUTILS_LOSS = """PING 10.0.0.1 (10.0.0.1) 56(84) bytes of data.
64 bytes from 10.0.0.1: icmp_seq=1 ttl=64 time=0.412 ms
64 bytes from 10.0.0.1: icmp_seq=3 ttl=64 time=0.401 ms

--- 10.0.0.1 ping statistics ---
3 packets transmitted, 2 received, 33.3333% packet loss, time 2003ms
"""

BUSYBOX_OK = """PING 10.0.0.1 (10.0.0.1): 56 data bytes

--- 10.0.0.1 ping statistics ---
3 packets transmitted, 3 packets received, 0% packet loss
"""


class FakeProcess:
    def __init__(self, stdout="", stderr="", returncode=0, hang=False):
        self._stdout = stdout.encode()
        self._stderr = stderr.encode()
        self._final = returncode
        self.returncode = None
        self.hang = hang
        self.killed = False
        self.reaped = False

    async def communicate(self):
        if self.hang:
            await asyncio.sleep(3600)
        self.returncode = self._final
        return self._stdout, self._stderr

    def kill(self):
        self.killed = True
        self.returncode = -9

    async def wait(self):
        self.reaped = True
        return self.returncode


@pytest.fixture
def spawn(monkeypatch):
    calls = []

    def install(proc=None, error=None):
        async def fake_exec(*argv, **kwargs):
            calls.append(argv)
            if error is not None:
                raise error
            return proc

        monkeypatch.setattr(icmp_prober.asyncio, "create_subprocess_exec", fake_exec)
        return calls

    return install


def _spec():
    return make_spec(kind=ProbeKind.ICMP, target="10.0.0.1")


@pytest.mark.unit
class TestParseSummary:
    def test_iputils(self):
        s = parse_ping_summary(IPUTILS_LOSS)
        assert (s.transmitted, s.received) == (3, 2)
        assert round(s.loss_percent, 1) == 33.3

    def test_busybox(self):
        s = parse_ping_summary(BUSYBOX_OK)
        assert (s.transmitted, s.received) == (3, 3)
        assert s.loss_percent == 0

    def test_no_summary(self):
        assert parse_ping_summary("ping: unknown host nowhere") is None


@pytest.mark.unit
@pytest.mark.asyncio
class TestICMPProber:
    async def test_all_replies_is_success(self, spawn, logger):
        calls = spawn(FakeProcess(IPUTILS_OK))
        result = await ICMPProber(logger, verbose=True).check(_spec())
        assert result.success
        assert (result.packets_sent, result.packets_received) == (3, 3)
        argv = calls[0]
        assert argv[0] == "ping"
        assert argv[-1] == "10.0.0.1"
        assert argv[-2] == "--"
        assert "-c" in argv and argv[argv.index("-c") + 1] == "3"
        assert "-w" in argv and argv[argv.index("-w") + 1] == "5"

    async def test_partial_loss_is_failure(self, spawn, logger):
        spawn(FakeProcess(IPUTILS_LOSS, returncode=0))
        result = await ICMPProber(logger).check(_spec())
        assert not result.success
        assert result.cause is FailureCause.PROBE_UNFINISHED
        assert "ping probe unfinished" in result.error
        assert "33% loss" in result.error
        assert (result.packets_sent, result.packets_received) == (3, 2)

    async def test_total_loss_is_failure(self, spawn, logger):
        out = "--- 10.0.0.1 ping statistics ---\n3 packets transmitted, 0 received, 100% packet loss, time 2040ms\n"
        spawn(FakeProcess(out, returncode=1))
        result = await ICMPProber(logger).check(_spec())
        assert result.cause is FailureCause.PROBE_UNFINISHED

    async def test_unknown_host_is_connection_failure(self, spawn, logger):
        spawn(FakeProcess("", "ping: nowhere.invalid: Name or service not known", returncode=2))
        result = await ICMPProber(logger).check(_spec())
        assert result.cause is FailureCause.CONNECTION_ERROR
        assert "Name or service not known" in result.error

    async def test_missing_binary_is_connection_failure(self, spawn, logger):
        spawn(error=FileNotFoundError(2, "No such file or directory"))
        result = await ICMPProber(logger, binary="/nope/ping").check(_spec())
        assert result.cause is FailureCause.CONNECTION_ERROR
        assert "/nope/ping" in result.error

    async def test_hung_ping_is_killed(self, spawn, logger, monkeypatch):
        monkeypatch.setattr(icmp_prober, "_KILL_SLACK_S", 0.0)
        proc = FakeProcess(hang=True)
        spawn(proc)
        result = await ICMPProber(logger, deadline_s=0.05).check(_spec())
        assert result.cause is FailureCause.TIMEOUT
        assert proc.killed
        assert proc.reaped

    async def test_cancelled_check_kills_and_reaps_ping(self, spawn, logger):
        proc = FakeProcess(hang=True)
        spawn(proc)
        task = asyncio.create_task(ICMPProber(logger).check(_spec()))
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert proc.killed
        assert proc.reaped

    async def test_custom_count(self, spawn, logger):
        calls = spawn(FakeProcess(IPUTILS_OK))
        result = await ICMPProber(logger, count=5).check(_spec())
        assert calls[0][calls[0].index("-c") + 1] == "5"
        # 3 of 5 replies is still loss
        assert result.cause is FailureCause.PROBE_UNFINISHED
