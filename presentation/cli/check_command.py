from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from config.loader import load_probe_specs
from config.options import WatchdogOptions
from core.logging.logger import StructuredLogger, get_logger
from domain.entities import ProbeResult, ProbeSpec
from infrastructure.probes import ProberRegistry, build_http_client

EXIT_ALL_HEALTHY = 0
EXIT_UNHEALTHY = 3


class CheckCommand:
    """Run every configured probe once and print the results. Never remediates."""

    def __init__(self, options: WatchdogOptions, *, registry: Optional[ProberRegistry] = None) -> None:
        self.options = options
        self.logger: StructuredLogger = get_logger(__name__, service="check")
        self._registry = registry

    async def check_all(self, specs: List[ProbeSpec]) -> List[ProbeResult]:
        client = None
        registry = self._registry
        if registry is None:
            client = build_http_client()
            registry = ProberRegistry.default(client, self.logger, self.options)
        try:
            return list(await asyncio.gather(*(registry.for_spec(s).check(s) for s in specs)))
        finally:
            if client is not None:
                await client.aclose()

    async def run(self, config_path: str | Path, *, json_out: bool = False) -> int:
        specs = load_probe_specs(config_path)
        results = await self.check_all(specs)
        if json_out:
            print(json.dumps([self._as_dict(s, r) for s, r in zip(specs, results)], separators=(",", ":"), ensure_ascii=False))
        else:
            print("Results:")
            for spec, r in zip(specs, results):
                if r.success:
                    print(f"- {spec.name}: healthy ({r.latency_ms}ms)")
                else:
                    print(f"- {spec.name}: unhealthy ({r.describe()})")
        return EXIT_ALL_HEALTHY if all(r.success for r in results) else EXIT_UNHEALTHY

    @staticmethod
    def _as_dict(spec: ProbeSpec, r: ProbeResult) -> Dict[str, Any]:
        return {
            "name": spec.name,
            "kind": spec.kind.value,
            "target": spec.target,
            "healthy": r.success,
            "cause": r.cause.value if r.cause else None,
            "error": r.error,
            "status_code": r.status_code,
            "latency_ms": r.latency_ms,
            "packets_sent": r.packets_sent,
            "packets_received": r.packets_received,
        }
