"""
top-logs command line entry point

Parses the arguments, feeds every named source through one StatCollector
and prints the report with rich.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from toplogs.config import ConfigError, ReportConfig
from toplogs.models.data_models import LogFormat, Report
from toplogs.services.aggregator import StatCollector
from toplogs.services.parser import LogParser
from toplogs.services.storage import LogStore

logger = logging.getLogger("toplogs")


def positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{value}' is not an integer") from None
    if n < 1:
        raise argparse.ArgumentTypeError(f"'{value}' must be a positive integer")
    return n


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="top-logs",
        description="Parses various access log formats and prints stats helpful for debugging/troubleshooting.",
    )
    parser.add_argument(
        "-t", "--top",
        type=positive_int,
        metavar="NUM",
        help="number of results to display (default 10)",
    )
    parser.add_argument(
        "-f", "--format",
        required=True,
        choices=[f.value for f in LogFormat],
        help="access log format",
    )
    parser.add_argument(
        "-i", "--ignore-parse-errors",
        action="store_true",
        default=None,
        help="Don't log any parsing error",
    )
    parser.add_argument(
        "-m", "--min-response-time-threshold",
        type=positive_int,
        metavar="MIN_THRESHOLD",
        help="Minimum threshold in number of requests for a response time bucket to be displayed. "
        "Smaller buckets are grouped together. (default 100)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument(
        "access_logs",
        nargs="+",
        metavar="ACCESS_LOG",
        help="Access logs to process or '-' (a dash) to read from STDIN",
    )
    return parser


def print_report(report: Report, console: Console) -> None:
    console.print()
    if report.duration:
        start, end = report.duration
        console.print(f"Duration: {start} to {end}", markup=False, emoji=False)
        console.print()

    console.print(f"Total Requests: {report.total_requests}")
    console.print(f"Total Errors  : {report.total_errors}")
    console.print()

    for section in report.sections:
        console.print(section.title, markup=False, emoji=False)
        table = Table(show_header=False, box=box.ASCII, show_lines=False)
        table.add_column("label", overflow="fold")
        table.add_column("count", justify="right")
        for label, count in section.rows:
            table.add_row(Text(label), Text(count))
        console.print(table)
        console.print()


def main(argv: Optional[List[str]] = None, console: Optional[Console] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = ReportConfig.from_env(
            max_results=args.top,
            min_response_time_threshold=args.min_response_time_threshold,
            ignore_parse_errors=args.ignore_parse_errors,
        )
    except ConfigError as err:
        logger.error("%s", err)
        return 2

    log_format = LogFormat(args.format)
    collector = StatCollector(config)
    parser = LogParser()
    failed = False

    for path in args.access_logs:
        logger.debug("processing %s as %s", path, log_format.value)
        try:
            collector.process_lines(LogStore(path).read_lines(), log_format, parser)
        except OSError as err:
            failed = True
            logger.error("Failed parsing file: %s, message: %s", path, err)

    print_report(collector.summarize(), console or Console(highlight=False))
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
