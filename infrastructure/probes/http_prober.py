from __future__ import annotations

import asyncio
import time
from typing import Dict, Optional

import httpx

from core.logging.logger import StructuredLogger
from domain.entities import ProbeResult, ProbeSpec
from domain.enums import FailureCause
from domain.interfaces import IProber

HEALTHY_STATUSES = frozenset({200, 204})
STATUS_ERROR = "response status code is not 204"


def build_http_client(headers: Optional[Dict[str, str]] = None) -> httpx.AsyncClient:
    """Client shared by every HTTP probe; timeouts are set per request."""
    return httpx.AsyncClient(
        headers={"User-Agent": "network-watchdog", **(headers or {})},
        follow_redirects=True,
        http2=False,
    )


class HTTPProber(IProber):
    """GET the probe URL; 200 and 204 are healthy."""

    def __init__(self, client: httpx.AsyncClient, logger: StructuredLogger, *, verbose: bool = False) -> None:
        self.client = client
        self.logger = logger
        self.verbose = verbose

    async def check(self, spec: ProbeSpec) -> ProbeResult:
        start = time.perf_counter()
        try:
            # httpx applies the timeout per connect/read/write step; wait_for caps
            # the whole request, redirects and body included
            resp = await asyncio.wait_for(self.client.get(spec.target, timeout=spec.timeout), spec.timeout)
        except asyncio.TimeoutError:
            return ProbeResult.failed(
                FailureCause.TIMEOUT,
                f"request did not finish within {spec.timeout:g}s",
                latency_ms=self._elapsed(start),
            )
        except httpx.TimeoutException as e:
            return ProbeResult.failed(FailureCause.TIMEOUT, self._describe(e), latency_ms=self._elapsed(start))
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as e:
            return ProbeResult.failed(FailureCause.CONNECTION_ERROR, self._describe(e), latency_ms=self._elapsed(start))

        latency_ms = self._elapsed(start)
        status = resp.status_code
        if self.verbose:
            self.logger.debug(lambda: f"GET {spec.target} -> {status} in {latency_ms}ms")
        if status in HEALTHY_STATUSES:
            return ProbeResult.ok(status_code=status, latency_ms=latency_ms)
        return ProbeResult.failed(
            FailureCause.UNEXPECTED_STATUS,
            f"{STATUS_ERROR} (got {status})",
            status_code=status,
            latency_ms=latency_ms,
        )

    @staticmethod
    def _elapsed(start: float) -> int:
        return int((time.perf_counter() - start) * 1000.0)

    @staticmethod
    def _describe(exc: BaseException) -> str:
        text = str(exc)
        return f"{type(exc).__name__}: {text}" if text else type(exc).__name__
