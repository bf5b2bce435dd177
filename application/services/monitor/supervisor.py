from __future__ import annotations

import asyncio
import signal
from typing import Iterable, List, Optional, Sequence, Tuple

import httpx

from config.options import WatchdogOptions
from core.logging.logger import StructuredLogger, get_logger
from domain.entities import ProbeSpec
from domain.exceptions import ConfigurationError
from domain.interfaces import IRemediator
from infrastructure.probes import ProberRegistry, build_http_client
from infrastructure.remote import SSHRemediator
from .probe_monitor import ProbeMonitor

SHUTDOWN_SIGNALS: Tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)


class Supervisor:
    """Runs one ProbeMonitor task per spec and stops them all together.

    Shutdown is a single shared asyncio.Event. Monitors see it between ticks;
    join() gives in-flight probes and resets a bounded amount of time to
    finish before the stragglers are cancelled.
    """

    def __init__(
        self,
        specs: Sequence[ProbeSpec],
        options: Optional[WatchdogOptions] = None,
        *,
        logger: Optional[StructuredLogger] = None,
        registry: Optional[ProberRegistry] = None,
        remediator: Optional[IRemediator] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if not specs:
            raise ConfigurationError("no probes configured")
        self.specs: List[ProbeSpec] = list(specs)
        self.options = options or WatchdogOptions()
        self.logger = logger or get_logger(__name__, service="supervisor")
        self._monitor_logger = get_logger("watchdog.monitor", service="monitor")
        self._client = client
        self._owns_client = client is None
        self._registry = registry
        self._remediator = remediator
        self._stop = asyncio.Event()
        self._tasks: List[asyncio.Task] = []
        self.monitors: List[ProbeMonitor] = []

    @property
    def stop_requested(self) -> bool:
        return self._stop.is_set()

    @property
    def tasks(self) -> List[asyncio.Task]:
        return list(self._tasks)

    def _build_registry(self) -> ProberRegistry:
        if self._registry is None:
            if self._client is None:
                self._client = build_http_client()
            self._registry = ProberRegistry.default(self._client, self._monitor_logger, self.options)
        return self._registry

    def _build_remediator(self) -> IRemediator:
        if self._remediator is None:
            self._remediator = SSHRemediator(
                get_logger("watchdog.remediation", service="remediation"),
                connect_timeout_s=self.options.ssh_connect_timeout_s,
                command_timeout_s=self.options.ssh_command_timeout_s,
            )
        return self._remediator

    async def start(self) -> None:
        """Spawn one monitor task per spec."""
        if self._tasks:
            raise RuntimeError("supervisor already started")
        registry = self._build_registry()
        remediator = self._build_remediator()
        for spec in self.specs:
            monitor = ProbeMonitor(
                spec,
                registry.for_spec(spec),
                remediator,
                self._monitor_logger,
                verbose=self.options.verbose,
            )
            task = asyncio.create_task(monitor.run(self._stop), name=f"monitor:{spec.name}")
            task.add_done_callback(self._on_task_done)
            self.monitors.append(monitor)
            self._tasks.append(task)
        self.logger.info(f"started {len(self._tasks)} monitor(s)")

    def _on_task_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self.logger.error(f"{task.get_name()} crashed: {exc!r}", exc_info=exc)

    def stop(self) -> None:
        """Broadcast shutdown to every monitor. Safe to call more than once."""
        if self._stop.is_set():
            return
        self.logger.info("stopping all monitors")
        self._stop.set()

    async def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for monitors to exit; cancel whatever is left after timeout.

        Returns True if every monitor finished on its own.
        """
        if not self._tasks:
            return True
        _, pending = await asyncio.wait(self._tasks, timeout=timeout)
        if not pending:
            return True
        self.logger.warning(
            f"{len(pending)} monitor(s) still busy after {timeout:g}s, cancelling: "
            + ", ".join(sorted(t.get_name() for t in pending))
        )
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        return False

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "Supervisor":
        await self.start()
        return self

    async def __aexit__(self, *_) -> None:
        self.stop()
        try:
            await self.join(self.options.shutdown_grace_s)
        finally:
            await self.aclose()

    def _on_signal(self, sig: signal.Signals) -> None:
        if self._stop.is_set():
            self.logger.warning(f"received {sig.name} again, already shutting down")
            return
        self.logger.info(f"received {sig.name}")
        self.stop()

    def _install_signal_handlers(
        self,
        loop: asyncio.AbstractEventLoop,
        signals: Iterable[signal.Signals],
    ) -> List[Tuple[signal.Signals, bool, object]]:
        installed: List[Tuple[signal.Signals, bool, object]] = []
        for sig in signals:
            try:
                loop.add_signal_handler(sig, self._on_signal, sig)
                installed.append((sig, True, None))
            except RuntimeError as e:
                self._remove_signal_handlers(loop, installed)
                raise RuntimeError(
                    f"cannot install a {sig.name} handler: run_until_signal must run in the main thread"
                ) from e
            except NotImplementedError:
                # no add_signal_handler on this platform (Windows)
                previous = signal.signal(
                    sig,
                    lambda signum, _frame: loop.call_soon_threadsafe(self._on_signal, signal.Signals(signum)),
                )
                installed.append((sig, False, previous))
        return installed

    @staticmethod
    def _remove_signal_handlers(
        loop: asyncio.AbstractEventLoop,
        installed: List[Tuple[signal.Signals, bool, object]],
    ) -> None:
        for sig, via_loop, previous in installed:
            if via_loop:
                loop.remove_signal_handler(sig)
            else:
                signal.signal(sig, previous if previous is not None else signal.SIG_DFL)

    async def run_until_signal(self, signals: Iterable[signal.Signals] = SHUTDOWN_SIGNALS) -> bool:
        """Start monitoring, block until SIGINT/SIGTERM, then stop and join."""
        loop = asyncio.get_running_loop()
        installed = self._install_signal_handlers(loop, signals)
        try:
            if not self._tasks:
                await self.start()
            await self._stop.wait()
            return await self.join(self.options.shutdown_grace_s)
        finally:
            self._remove_signal_handlers(loop, installed)
