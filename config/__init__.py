"""Configuration: environment settings, runtime options and the probe file loader."""
from .settings import Settings, settings
from .options import WatchdogOptions
from .durations import parse_duration
from .loader import load_probe_specs, parse_probe_config, build_probe_spec, split_host_port

__all__ = [
    "Settings",
    "settings",
    "WatchdogOptions",
    "parse_duration",
    "load_probe_specs",
    "parse_probe_config",
    "build_probe_spec",
    "split_host_port",
]
