"""
Terminal front-end for diskusage.

Usage:
    diskusage [--group tld] [--sort size] [--count 15] [--reverse] PATH
    diskusage --gui [PATH]
"""

import argparse
import logging
import signal
import sys
import threading
import time
from typing import Dict, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from . import drives, report
from .errors import InvalidArgument
from .logging_config import setup_logging
from .models import (
    AggregateStat, DEFAULT_COUNT, DEFAULT_GROUP, DEFAULT_SORT, GROUP_FIELDS,
    ONLY_FILTERS, SORT_FIELDS, ScanOptions,
)
from .scanner import CancelFlag, scan, validate_args
from .utils import format_bytes, format_count, truncate_path

logger = logging.getLogger(__name__)

PROGRESS_INTERVAL = 0.10
PATH_WIDTH = 60


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="diskusage",
        description="Disk usage utility: totals files and sizes under PATH, grouped and sorted.",
    )
    parser.add_argument("path", nargs="?", help="System path to start scanning")
    parser.add_argument("-g", "--group", default=DEFAULT_GROUP,
                        help=f"Which field the results are grouped by ({', '.join(GROUP_FIELDS)})")
    parser.add_argument("-s", "--sort", default=DEFAULT_SORT,
                        help=f"Which field the results are sorted by ({', '.join(SORT_FIELDS)})")
    parser.add_argument("-c", "--count", type=int, default=DEFAULT_COUNT,
                        help="Number of results to display")
    parser.add_argument("-r", "--reverse", action="store_true", help="Reverse the results")
    parser.add_argument("-o", "--only", choices=ONLY_FILTERS,
                        help="Only show directory groups or file groups (tld/path grouping)")
    parser.add_argument("-e", "--show-errors", action="store_true",
                        help="Print entries that could not be read while scanning")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    parser.add_argument("--log-file", help="Append logs to this file")
    parser.add_argument("--gui", action="store_true", help="Open the desktop window instead")
    return parser


def options_from_args(args: argparse.Namespace) -> ScanOptions:
    return ScanOptions(
        path=args.path or "",
        group=args.group,
        sort=args.sort,
        count=args.count,
        reverse=args.reverse,
        only=args.only,
    )


def render_report(console: Console,
                  stats: Dict[str, AggregateStat],
                  options: ScanOptions,
                  errors: int = 0,
                  partial: bool = False):
    rows = report.process_results(stats, options.sort, options.count, options.reverse, options.only)
    total_size = report.totals(stats, "size")
    total_files = report.totals(stats, "files")
    total_dirs = report.totals(stats, "directories")

    table = Table(show_footer=True, header_style="bold", footer_style="bold")
    table.add_column("Group", footer="Total", overflow="fold", min_width=20)
    table.add_column("Files", footer=format_count(total_files), justify="right")
    table.add_column("Directories", footer=format_count(total_dirs), justify="right")
    table.add_column("Size", footer=format_bytes(total_size), justify="right")
    table.add_column("%", justify="right")

    for stat in rows:
        table.add_row(
            Text(stat.group, style="bold cyan" if stat.is_directory else ""),
            format_count(stat.files),
            format_count(stat.directories),
            format_bytes(stat.size),
            f"{report.share(stat, total_size):.1f}",
        )
    console.print(table)

    if partial:
        console.print("[yellow]Scan cancelled: totals cover only what was visited.[/]")
    if errors:
        console.print(f"[red]{errors} entr{'y' if errors == 1 else 'ies'} could not be read.[/]")
    usage = drives.usage_for(options.path)
    if usage:
        console.print(
            f"Filesystem: {format_bytes(usage['used'])} used of {format_bytes(usage['total'])} "
            f"({usage['percent']:.0f}%), {format_bytes(usage['free'])} free"
        )


def run_scan(console: Console, options: ScanOptions, show_errors: bool = False):
    """Scan with a spinner. Returns (stats, error_messages, cancelled)."""
    cancel_flag = CancelFlag()
    errors: List[str] = []
    last_emit = 0.0

    with console.status("starting..") as status:
        def on_progress(path, _snapshot):
            nonlocal last_emit
            now = time.monotonic()
            if now - last_emit >= PROGRESS_INTERVAL:
                last_emit = now
                status.update(f"scanning: {escape(truncate_path(path, PATH_WIDTH))}..")

        def on_error(message):
            errors.append(message)
            if show_errors:
                console.print(f"[red]error:[/] {escape(message)}")

        # signal handlers can only be installed from the main thread
        on_main = threading.current_thread() is threading.main_thread()
        if on_main:
            previous = signal.signal(signal.SIGINT, lambda *_: cancel_flag.cancel())
        try:
            stats = scan(options.path, options.group,
                         progress=on_progress, on_error=on_error, cancel_flag=cancel_flag)
        finally:
            if on_main:
                signal.signal(signal.SIGINT, previous)

    return stats, errors, cancel_flag()


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(verbose=args.verbose, quiet=args.quiet, log_file=args.log_file)

    if args.gui:
        from .app import run
        return run(args.path)

    if not args.path:
        parser.print_help()
        return 0

    console = Console()
    options = options_from_args(args)
    try:
        validate_args(options)
        stats, errors, cancelled = run_scan(console, options, show_errors=args.show_errors)
    except InvalidArgument as e:
        console.print(f"[red]{escape(e.message)}[/]")
        parser.print_usage()
        return 2

    render_report(console, stats, options, errors=len(errors), partial=cancelled)
    logger.debug("%d groups, %d errors", len(stats), len(errors))
    return 130 if cancelled else 0


if __name__ == "__main__":
    sys.exit(main())
