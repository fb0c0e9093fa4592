"""sqlitetrace.cli

Command line entry point of the demo program.

Exit codes:
- 0: the workload ran to completion
- 1: the database could not be opened
- 3: no database filename was given, nothing was opened

Database errors during the run are not turned into an exit code. They propagate out of
`main` once every open statement, transaction, and the connection have been closed.
"""

from __future__ import annotations

import argparse
import logging
import sys

from sqlitetrace.config import DEFAULT_ROW_COUNT, DemoSettings
from sqlitetrace.demo import DemoRun
from sqlitetrace.drivers import SQLiteDriver, TraceConfig
from sqlitetrace.drivers.exceptions import DriverConnectFailed
from sqlitetrace.logging_utils import build_logger
from sqlitetrace.trace_events import print_trace_event
from sqlitetrace.trace_mask import add_mask_arguments, event_mask, to_long_flags, to_short_string

EXIT_OK = 0
EXIT_OPEN_FAILED = 1
EXIT_NO_FILENAME = 3

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sqlitetrace-demo",
        description="Run inserts and selects through every access path and print SQLite trace events.",
    )
    parser.add_argument("--db", default="", help="SQLite database filename")
    parser.add_argument("--search-pat", default="", help="Search pattern for SELECT")
    parser.add_argument(
        "--nrows",
        type=int,
        default=DEFAULT_ROW_COUNT,
        help="Number of rows to generate (for each approach tested)",
    )
    parser.add_argument(
        "--rollback",
        action="store_true",
        help="Rollback (abort) transactions instead of committing",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="INFO",
        help="Logging level",
    )
    parser.add_argument("--log-dir", default=None, help="Also write a rotating log file into this directory")
    add_mask_arguments(parser)
    return parser


def main(argv: list[str] | None = None) -> int:
    settings = DemoSettings.from_args(build_parser().parse_args(argv))
    build_logger(settings.log_level, settings.log_dir)

    # The mask is the union of the separate flags and the short form. Pick one of them in real use.
    mask = event_mask(settings.trace_mask)
    print(f"Short form of mask: {{{to_short_string(settings.trace_mask)}}}")
    print(f"Long form of mask (separate flags): {{{to_long_flags(settings.trace_mask)}}}")
    print(f"Numeric mask: 0x{int(mask):x}")

    if not settings.db_filename:
        print("SQLite database filename not specified. Use --db=...")
        return EXIT_NO_FILENAME

    return run(settings)


def run(settings: DemoSettings) -> int:
    trace = TraceConfig(callback=print_trace_event, event_mask=event_mask(settings.trace_mask), want_expanded_sql=True)
    try:
        driver = SQLiteDriver.connect({"database": settings.db_filename, "trace": trace})
    except DriverConnectFailed as error:
        print(f"Failed to open database {settings.db_filename!r}: {error!r}")
        return EXIT_OPEN_FAILED

    with driver:
        try:
            driver.ping()
            DemoRun(driver, settings).run()
        except Exception:
            logger.exception("Demo run against %r failed", settings.db_filename)
            raise

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
