"""Probe file loader.

Reads the YAML probe list and resolves every entry into an immutable
ProbeSpec. Any problem raises ConfigurationError naming the entry and field;
the process must not start monitoring with a partially valid file.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from core.logging.logger import get_logger
from domain.entities import ProbeSpec, RemediationTarget, DEFAULT_PROBE_URL, DEFAULT_SSH_PORT
from domain.enums import ProbeKind
from domain.exceptions import ConfigurationError
from .durations import parse_duration

_log = get_logger(__name__, service="config")

PING_PREFIX = "ping "


def split_host_port(value: str, default_port: int = DEFAULT_SSH_PORT) -> Tuple[str, int]:
    """Split 'host', 'host:port', '[v6]:port' or a bare IPv6 literal."""
    value = value.strip()
    if value.startswith("["):
        end = value.find("]")
        if end < 0:
            raise ValueError(f"unterminated IPv6 literal in {value!r}")
        host, rest = value[1:end], value[end + 1:]
        if not rest:
            return host, default_port
        if not rest.startswith(":"):
            raise ValueError(f"unexpected text after IPv6 literal in {value!r}")
        return host, int(rest[1:])
    if value.count(":") == 1:
        host, port = value.split(":")
        return host, int(port)
    # no colon, or an unbracketed IPv6 address
    return value, default_port


def _resolve_probe(raw: Mapping[str, Any]) -> Tuple[ProbeKind, str]:
    kind = raw.get("kind")
    if kind:
        try:
            parsed = ProbeKind.parse(str(kind))
        except ValueError:
            raise ConfigurationError(f"unknown probe kind {kind!r}", field="kind") from None
        target = str(raw.get("target") or "").strip()
        if not target:
            if parsed is ProbeKind.HTTP:
                return parsed, DEFAULT_PROBE_URL
            raise ConfigurationError("icmp probe needs a target host", field="target")
        if parsed is ProbeKind.ICMP and target.startswith("-"):
            raise ConfigurationError(f"invalid ping host {target!r}", field="target")
        return parsed, target

    url = str(raw.get("probe_url") or "").strip()
    if not url:
        return ProbeKind.HTTP, DEFAULT_PROBE_URL
    if url.startswith(PING_PREFIX) or url == PING_PREFIX.strip():
        host = url[len(PING_PREFIX):].strip()
        if not host or " " in host or host.startswith("-"):
            raise ConfigurationError(f"malformed ping probe url {url!r}", field="probe_url")
        return ProbeKind.ICMP, host
    return ProbeKind.HTTP, url


def _duration(raw: Mapping[str, Any], key: str) -> float:
    if raw.get(key) is None:
        raise ConfigurationError("is required", field=key)
    try:
        return parse_duration(raw[key])
    except ValueError as e:
        raise ConfigurationError(str(e), field=key) from None


def _remediation(server: Any) -> RemediationTarget:
    if not isinstance(server, Mapping):
        raise ConfigurationError("server section is required", field="server")
    hostname = str(server.get("hostname") or "").strip()
    if not hostname:
        raise ConfigurationError("hostname is required", field="server.hostname")
    try:
        host, port = split_host_port(hostname)
    except ValueError as e:
        raise ConfigurationError(str(e), field="server.hostname") from None
    key_file = server.get("key_file") or None
    if key_file:
        key_file = os.path.expanduser(str(key_file))
    return RemediationTarget(
        hostname=host,
        port=port,
        username=str(server.get("username") or ""),
        password=str(server["password"]) if server.get("password") else None,
        key_file=key_file,
        command=str(server.get("reset_command") or ""),
    )


def build_probe_spec(raw: Mapping[str, Any], index: int = 0) -> ProbeSpec:
    """Resolve one raw probe entry, applying defaults."""
    try:
        if not isinstance(raw, Mapping):
            raise ConfigurationError("probe entry must be a mapping")
        remediation = _remediation(raw.get("server"))
        kind, target = _resolve_probe(raw)
        down_times = raw.get("down_times")
        if isinstance(down_times, bool) or not isinstance(down_times, int):
            raise ConfigurationError("invalid down times", field="down_times")
        return ProbeSpec(
            name=str(raw.get("name") or "").strip() or remediation.hostname,
            kind=kind,
            target=target,
            timeout=_duration(raw, "timeout"),
            interval=_duration(raw, "interval"),
            down_times=down_times,
            remediation=remediation,
        )
    except ConfigurationError as e:
        if e.probe is not None:
            raise
        raise ConfigurationError(e.reason, probe=index, field=e.field) from None


def parse_probe_config(document: Any) -> List[ProbeSpec]:
    """Resolve an already-parsed YAML document into probe specs."""
    if not isinstance(document, Mapping):
        raise ConfigurationError("config must be a mapping with a 'probes' list")
    probes = document.get("probes")
    if probes is None or (isinstance(probes, list) and not probes):
        raise ConfigurationError("no probes configured")
    if not isinstance(probes, list):
        raise ConfigurationError("'probes' must be a list")
    specs = [build_probe_spec(raw, i) for i, raw in enumerate(probes)]
    names: Dict[str, int] = {}
    for spec in specs:
        names[spec.name] = names.get(spec.name, 0) + 1
    for name, count in names.items():
        if count > 1:
            _log.warning(f"probe name {name!r} is used by {count} probes; log lines will be ambiguous")
    return specs


def load_probe_specs(path: str | Path) -> List[ProbeSpec]:
    """Read and resolve the probe file at path."""
    p = Path(path).expanduser()
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"cannot read config file {str(p)!r}: {e.strerror or e}") from None
    try:
        document: Optional[Any] = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"invalid YAML in {str(p)!r}: {e}") from None
    specs = parse_probe_config(document)
    _log.debug(lambda: f"loaded {len(specs)} probe(s) from {p}")
    return specs
