"""Main CLI entry-point."""
from __future__ import annotations

import argparse
import asyncio
import sys
from typing import List, Optional

from core.logging.config import bootstrap_logging, shutdown_logging
from core.logging.logger import get_logger
from config import settings
from config.options import WatchdogOptions
from domain.exceptions import ConfigurationError

EXIT_USAGE = 1
EXIT_CONFIG = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="network-watchdog",
        description="Probe targets and reset them over SSH after repeated failures.",
    )
    parser.add_argument(
        "command",
        nargs="?",
        choices=("run", "check"),
        default="run",
        help="run: monitor until interrupted (default); check: probe every target once and exit",
    )
    parser.add_argument("-c", "--config", default=settings.CONFIG_PATH, help="probe config file path (YAML)")
    parser.add_argument("-v", "--verbose", action="store_true", default=settings.VERBOSE, help="verbose mode")
    parser.add_argument("--json", action="store_true", help="check: print results as JSON")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.config:
        parser.print_usage(sys.stderr)
        print(f"{parser.prog}: error: a config file is required (--config or WATCHDOG_CONFIG)", file=sys.stderr)
        return EXIT_USAGE

    bootstrap_logging(
        service="watchdog",
        level="DEBUG" if args.verbose else settings.LOG_LEVEL,
        console=settings.LOG_CONSOLE,
        log_dir=settings.LOG_DIR,
        log_file_name="watchdog.jsonl",
    )
    log = get_logger(__name__, service="watchdog")
    options = WatchdogOptions.from_settings(verbose=args.verbose)
    # Lazy imports here
    from presentation.cli import CheckCommand, WatchdogCommand

    try:
        if args.command == "check":
            return asyncio.run(CheckCommand(options).run(args.config, json_out=args.json))
        return asyncio.run(WatchdogCommand(options).run(args.config))
    except ConfigurationError as e:
        log.critical(f"configuration error: {e}")
        return EXIT_CONFIG
    finally:
        shutdown_logging()


def cli() -> None:
    raise SystemExit(main(sys.argv[1:]))


if __name__ == "__main__":
    cli()
