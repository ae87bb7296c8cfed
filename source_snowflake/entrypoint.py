"""Command-line entrypoint: ``source-snowflake spec|check|discover|read``."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TextIO

import simplejson as json

from source_snowflake.models import (
    ConfiguredAirbyteCatalog,
    catalog_message,
    connection_status_message,
    spec_message,
)
from source_snowflake.run_logger import RunLogger
from source_snowflake.source import SnowflakeSource


def _read_json(path: str) -> Any:
    return json.loads(Path(path).read_text(encoding="utf-8"), use_decimal=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="source-snowflake", description="Snowflake source connector")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("spec", help="Print the connector specification.")

    check = sub.add_parser("check", help="Validate the connection config.")
    check.add_argument("--config", required=True)

    discover = sub.add_parser("discover", help="Print the catalog of available tables.")
    discover.add_argument("--config", required=True)

    read = sub.add_parser("read", help="Read records for a configured catalog.")
    read.add_argument("--config", required=True)
    read.add_argument("--catalog", required=True)
    read.add_argument("--state")
    return parser


def make_writer(out: TextIO) -> Callable[[Dict[str, Any]], None]:
    def write(message: Dict[str, Any]) -> None:
        print(json.dumps(message, use_decimal=True, allow_nan=False, default=str), file=out, flush=True)

    return write


def run(
    argv: Optional[List[str]] = None,
    out: Optional[TextIO] = None,
    source: Optional[SnowflakeSource] = None,
) -> int:
    args = build_parser().parse_args(argv)
    if out is None:
        out = sys.stdout
    write = make_writer(out)
    logger = RunLogger(emit=write)
    if source is None:
        source = SnowflakeSource(logger=logger)
    else:
        source.logger = logger

    if args.command == "spec":
        write(spec_message(source.spec()))
        return 0

    config = _read_json(args.config)
    if args.command == "check":
        write(connection_status_message(source.check(config)))
        return 0
    if args.command == "discover":
        write(catalog_message(source.discover(config)))
        return 0

    catalog = ConfiguredAirbyteCatalog.from_dict(_read_json(args.catalog))
    state = _read_json(args.state) if args.state else None
    try:
        for message in source.read(config, catalog, state):
            write(message)
    except Exception as exc:
        logger.error(f"Read failed: {exc}")
        raise
    return 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
