"""Command line interface.

Gather top-level pool, scan, latency and request-size statistics and print
them in InfluxDB line protocol. To integrate with telegraf use either the
``inputs.execd`` plugin with ``--execd``, or the ``inputs.exec`` plugin with
no options.
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO

from pydantic import ValidationError

from zpool_influxdb import __version__
from zpool_influxdb.config import Settings, get_settings
from zpool_influxdb.config.validation import ConfigurationError, validate_configuration
from zpool_influxdb.errors import SourceUnavailableError
from zpool_influxdb.logging_config import get_logger, setup_logging
from zpool_influxdb.services.sampler import Sampler
from zpool_influxdb.sources import create_source

logger = get_logger(__name__)

EXIT_FAILURE = 1


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="zpool-influxdb",
        description="Print ZFS pool statistics in InfluxDB line protocol",
    )
    parser.add_argument(
        "-e",
        "--execd",
        action="store_true",
        help="telegraf execd mode: print a sample for each line read on stdin",
    )
    parser.add_argument(
        "-n",
        "--no-histograms",
        action="store_true",
        help="don't print histogram data (reduces cardinality)",
    )
    parser.add_argument(
        "-s",
        "--sum-histogram-buckets",
        action="store_true",
        help="print cumulative histogram bucket values",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--source-file",
        type=Path,
        metavar="PATH",
        help="pool configuration document (JSON or YAML)",
    )
    source.add_argument(
        "--source-command",
        metavar="CMD",
        help="command printing a pool configuration document",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        metavar="PATH",
        help="settings file (YAML or TOML)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("pool_name", nargs="?", help="only report this pool")
    return parser


def settings_from_args(args: argparse.Namespace) -> Settings:
    """Load settings and apply command line overrides."""
    settings = get_settings(args.config)

    overrides: Dict[str, Any] = {}
    if args.execd:
        overrides["execd"] = True
    if args.no_histograms:
        overrides["no_histograms"] = True
    if args.sum_histogram_buckets:
        overrides["sum_histogram_buckets"] = True
    if args.pool_name:
        overrides["pool_name"] = args.pool_name
    if args.source_file is not None:
        overrides["source_file"] = args.source_file
        overrides["source_command"] = None
    if args.source_command:
        overrides["source_command"] = args.source_command
        overrides["source_file"] = None
    return settings.model_copy(update=overrides)


def main(
    argv: Optional[List[str]] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> int:
    """Entry point; returns the process exit code."""
    args = build_parser().parse_args(argv)
    stdin = stdin if stdin is not None else sys.stdin
    stdout = stdout if stdout is not None else sys.stdout

    try:
        settings = settings_from_args(args)
    except (ValidationError, ValueError, FileNotFoundError) as e:
        print(f"error: invalid configuration: {e}", file=sys.stderr)
        return EXIT_FAILURE

    setup_logging(settings)

    try:
        validate_configuration(settings)
        source = create_source(settings)
    except (ConfigurationError, SourceUnavailableError) as e:
        logger.error(f"cannot initialize pool source: {e}")
        return EXIT_FAILURE

    with source:
        sampler = Sampler(settings, stream=stdout)
        if not settings.execd:
            result = sampler.sample(source)
            stdout.flush()
            return result
        return sampler.run_execd(source, stdin)


if __name__ == "__main__":
    sys.exit(main())
