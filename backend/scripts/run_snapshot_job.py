#!/usr/bin/env python
"""Run the daily price snapshot job once.

Fetches today's primary-provider price for every tracked card/language
pair and upserts the daily snapshots.

Usage:
    python -m scripts.run_snapshot_job
    python -m scripts.run_snapshot_job --delay 0.5 --log-level DEBUG
"""

import argparse
import asyncio
import logging
import sys

from database import init_db
from logging_config import setup_logging
from services.snapshot_job import SnapshotJobRunner

logger = logging.getLogger("scripts.run_snapshot_job")


def main(argv: list[str] | None = None) -> int:
    """Entry point. Returns the process exit code."""
    parser = argparse.ArgumentParser(description="Run the daily price snapshot job once.")
    parser.add_argument(
        "--delay",
        type=float,
        default=None,
        help="Seconds to wait between provider calls (default: SNAPSHOT_JOB_DELAY_SECONDS)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Override LOG_LEVEL for this run",
    )
    args = parser.parse_args(argv)

    setup_logging()
    if args.log_level:
        logging.getLogger().setLevel(args.log_level)

    init_db()
    runner = SnapshotJobRunner(delay_seconds=args.delay)
    try:
        summary = asyncio.run(runner.run(log=logger))
    except Exception as e:
        print(f"Snapshot job failed: {e}", file=sys.stderr)
        return 1

    print(
        f"Done. success={summary.success} skipped={summary.skipped} "
        f"failed={summary.failed} total={summary.total}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
