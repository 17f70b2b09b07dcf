# main.py

"""Entry point for the ticket_hawk price tracking pipeline."""

import argparse
import logging
import sys
from pathlib import Path

from ticket_hawk.config.logging_config import setup_logging

logger = logging.getLogger("ticket_hawk.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="ticket_hawk",
        description=(
            "Search Ticketmaster for events, record their prices "
            "and show recent price snapshots."
        ),
    )
    parser.add_argument(
        "-k",
        "--keyword",
        default="concert",
        help="Search keyword (default: concert).",
    )
    parser.add_argument(
        "-c",
        "--city",
        default="Toronto",
        help="City filter (default: Toronto). Pass '' to search all cities.",
    )
    parser.add_argument(
        "-n",
        "--limit",
        type=int,
        default=5,
        dest="snapshot_limit",
        help="Number of recent snapshots to show (default: 5).",
    )
    parser.add_argument(
        "--db",
        default=None,
        dest="db_path",
        help="Custom database file (default: data/ticket-hawk.db).",
    )
    parser.add_argument(
        "--tracked",
        action="store_true",
        default=False,
        help="List tracked events with their latest price and exit.",
    )
    parser.add_argument(
        "--health",
        action="store_true",
        default=False,
        help="Run a connectivity health check on the Discovery API.",
    )
    return parser


def main() -> None:
    """Route to the pipeline run, tracked listing, or health check."""
    from ticket_hawk.cli.runner import (
        run_demo,
        run_health_check,
        run_tracked,
    )

    log_file = setup_logging()
    logger.info("ticket_hawk starting, log file: %s", log_file)

    args = _build_parser().parse_args()
    db_path = Path(args.db_path) if args.db_path else None

    if args.health:
        exit_code = run_health_check()
    elif args.tracked:
        exit_code = run_tracked(db_path)
    else:
        exit_code = run_demo(
            keyword=args.keyword,
            city=args.city or None,
            snapshot_limit=args.snapshot_limit,
            db_path=db_path,
        )

    logger.info("ticket_hawk finished with exit code %d", exit_code)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
