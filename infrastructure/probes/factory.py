from __future__ import annotations

from typing import Dict, Mapping

import httpx

from config.options import WatchdogOptions
from core.logging.logger import StructuredLogger
from domain.entities import ProbeSpec
from domain.enums import ProbeKind
from domain.interfaces import IProber
from .http_prober import HTTPProber
from .icmp_prober import ICMPProber


class ProberRegistry:
    """Maps each probe kind to the prober that handles it."""

    def __init__(self, probers: Mapping[ProbeKind, IProber]) -> None:
        self._probers: Dict[ProbeKind, IProber] = dict(probers)

    @classmethod
    def default(
        cls,
        client: httpx.AsyncClient,
        logger: StructuredLogger,
        options: WatchdogOptions,
    ) -> "ProberRegistry":
        return cls({
            ProbeKind.HTTP: HTTPProber(client, logger, verbose=options.verbose),
            ProbeKind.ICMP: ICMPProber(
                logger,
                count=options.ping_count,
                deadline_s=options.ping_deadline_s,
                binary=options.ping_binary,
                verbose=options.verbose,
            ),
        })

    def for_kind(self, kind: ProbeKind) -> IProber:
        try:
            return self._probers[kind]
        except KeyError:
            raise LookupError(f"no prober registered for {kind.value}") from None

    def for_spec(self, spec: ProbeSpec) -> IProber:
        return self.for_kind(spec.kind)
