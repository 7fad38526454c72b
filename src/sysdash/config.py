"""Command line configuration for sysdash.

There is no config file and no environment variables; everything comes from
the (optional) command line flags.
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from dataclasses import dataclass

from sysdash.ranking import TOP_N

DEFAULT_INTERVAL = 1.0
MIN_INTERVAL = 0.1


@dataclass(slots=True, frozen=True)
class DashboardConfig:
    """Runtime settings."""

    interval: float = DEFAULT_INTERVAL
    top_n: int = TOP_N
    debug: bool = False


def _interval(value: str) -> float:
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}") from None
    if seconds < MIN_INTERVAL:
        raise argparse.ArgumentTypeError(f"interval must be at least {MIN_INTERVAL}s")
    return seconds


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sysdash",
        description="Live terminal dashboard of memory, CPU, network and top processes.",
        epilog="Press ESC to quit.",
    )
    parser.add_argument(
        "--interval",
        type=_interval,
        default=DEFAULT_INTERVAL,
        metavar="SECONDS",
        help=f"Seconds between samples (default: {DEFAULT_INTERVAL})",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Send DEBUG log records to the textual devtools console",
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> DashboardConfig:
    """Parse command line flags into a DashboardConfig."""
    args = build_parser().parse_args(argv)
    return DashboardConfig(interval=args.interval, debug=args.debug)
