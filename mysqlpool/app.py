"""Command line entry point: resolve configured data sources and report them."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Sequence

from .bootstrap import ResolvedDataSource, resolve_datasource
from .config import CONFIG_FILE, load_config
from .models import MySQLPoolError
from .runtime import default_event_loop_count

LOG = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="mysqlpool", description="Resolve MySQL pool configuration.")
    parser.add_argument("--config", type=Path, default=CONFIG_FILE, help="TOML configuration file")
    parser.add_argument("--datasource", action="append", help="Only resolve the named data source(s)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def format_resolved(resolved: ResolvedDataSource) -> list[str]:
    """Render a resolved data source, never printing the password."""

    lines = [f"[{resolved.name}]"]
    for label, options in (("pool", resolved.pool_options), ("connect", resolved.connect_options)):
        for field in dataclasses.fields(options):
            value = getattr(options, field.name)
            if field.name == "password":
                value = "***" if value else ""
            elif value is None:
                continue
            elif isinstance(value, Enum):
                value = value.value
            elif field.name == "properties":
                value = dict(value)
            lines.append(f"  {label}.{field.name} = {value}")
    return lines


def main(argv: Sequence[str] | None = None) -> int:
    """Resolve every configured data source and print the outcome."""

    args = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    try:
        config = load_config(args.config)
        names = args.datasource or list(config.names)
        for name in names:
            resolved = resolve_datasource(
                name,
                config.settings_for(name),
                default_event_loop_count=default_event_loop_count(),
            )
            print("\n".join(format_resolved(resolved)))
    except MySQLPoolError as exc:
        LOG.debug("Resolution failed", exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
