#!/usr/bin/env python
"""Evaluate all active price alerts once.

Usage:
    python -m scripts.check_price_alerts
    python -m scripts.check_price_alerts --log-level DEBUG
"""

import argparse
import asyncio
import logging
import sys

from database import init_db
from logging_config import setup_logging
from services.alert_engine import AlertEngine

logger = logging.getLogger("scripts.check_price_alerts")


def main(argv: list[str] | None = None) -> int:
    """Entry point. Returns the process exit code."""
    parser = argparse.ArgumentParser(description="Evaluate all active price alerts once.")
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
    try:
        summary = asyncio.run(AlertEngine().run(log=logger))
    except Exception as e:
        print(f"Alert check failed: {e}", file=sys.stderr)
        return 1

    print(
        f"Done. triggered={summary.triggered} skipped={summary.skipped} "
        f"no_data={summary.no_data} total={summary.total}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
