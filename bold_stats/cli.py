"""Command-line interface for bold-stats."""
from __future__ import annotations

import argparse
import asyncio
import json
import sys

from .config import load_config
from .logging_setup import configure_logging
from .models import SnapshotReference
from .services import StatsService


def parse_block(value: str) -> SnapshotReference:
    """Decimal block numbers become ints; hex numbers, hashes and tags stay strings."""
    return int(value) if value.isdigit() else value


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="bold-stats",
        description="Point-in-time Liquity v2 protocol statistics",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    stats_parser = sub.add_parser("stats", help="Fetch protocol stats at one block")
    stats_parser.add_argument(
        "--block",
        type=parse_block,
        default=None,
        help="Block number, block hash or tag (overrides config)",
    )
    stats_parser.add_argument(
        "--output",
        default=None,
        help="Write JSON to this file instead of stdout (overrides config)",
    )

    sub.add_parser("branches", help="List the deployment's collateral branches")

    return parser


async def _run(args: argparse.Namespace) -> None:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config)
    service = StatsService(config)

    if args.command == "stats":
        result = await service.snapshot(args.block)
        output = args.output or config.stats.output
        if output:
            service.write_output(result, output)
        else:
            print(json.dumps(result.stats, indent=2))
    elif args.command == "branches":
        for i, branch in enumerate(service.deployment.branches):
            print(f"{i}\t{branch.coll_symbol or '?'}\t{branch.coll_token}")
    else:
        build_parser().print_help()
        sys.exit(1)


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    asyncio.run(_run(args))
