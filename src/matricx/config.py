"""Command-line configuration and logging setup for matricx."""

import argparse
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from matricx.gauges import GlyphStyle

DEFAULT_INTERVAL = 1.0
MIN_INTERVAL = 0.1
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(slots=True, frozen=True)
class DashboardConfig:
    """Process-wide settings, fixed for the lifetime of the process."""

    style: GlyphStyle = GlyphStyle.BLOCKS
    interval: float = DEFAULT_INTERVAL
    json_output: bool = False
    log_file: Path | None = None
    log_level: str = "WARNING"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="matricx",
        description="Live terminal dashboard of CPU, memory, network, processes and services.",
    )
    parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Accepted for scripted runs; the dashboard never prompts",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print one metrics snapshot as JSON and exit",
    )
    parser.add_argument(
        "--style",
        choices=[style.value for style in GlyphStyle],
        default=GlyphStyle.BLOCKS.value,
        help="Bar glyphs (default: blocks)",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=DEFAULT_INTERVAL,
        help=f"Seconds between samples (default: {DEFAULT_INTERVAL})",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        metavar="PATH",
        help="Append diagnostic logs to this file",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Log level for --log-file (default: WARNING)",
    )
    return parser


def parse_config(argv: Sequence[str] | None = None) -> DashboardConfig:
    """Build the configuration from command-line arguments."""
    args = build_parser().parse_args(argv)
    return DashboardConfig(
        style=GlyphStyle(args.style),
        interval=max(MIN_INTERVAL, args.interval),
        json_output=args.json,
        log_file=args.log_file,
        log_level=args.log_level,
    )


def configure_logging(config: DashboardConfig) -> None:
    """
    Route package logs to the configured file.

    The dashboard owns the terminal, so without --log-file nothing is written.
    """
    if config.log_file is None:
        return
    handler = logging.FileHandler(config.log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger = logging.getLogger("matricx")
    package_logger.addHandler(handler)
    package_logger.setLevel(config.log_level)
