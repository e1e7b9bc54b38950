#!/usr/bin/env python3
"""
Landing Page Monitor CLI - Command-line interface for link health checks.

Usage:
    python -m landing_monitor.interface.watch --accounts accounts.json
        [--config configs/watch.json] [--dry-run] [-v]

Exit codes:
    0: All landing pages healthy
    2: Warnings or content errors detected
    3: Errors detected or invalid configuration
"""

import argparse
import logging
import sys
from datetime import date
from typing import List, Optional

from landing_monitor.health.runner import run_monitor


def setup_logging(verbose: bool = False) -> None:
    """
    Setup logging configuration.

    Args:
        verbose: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid date {value!r}: {e}") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Check ad landing pages for bad responses and error content",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit codes:
  0  - All landing pages healthy
  2  - Warnings or content errors detected
  3  - Errors detected or invalid configuration

Examples:
  landing-monitor --accounts exports/accounts.json
  landing-monitor --accounts exports/accounts.json --config custom.json
  landing-monitor --accounts exports/accounts.json --dry-run
        """,
    )

    parser.add_argument(
        "--accounts",
        required=True,
        help="Path to the JSON export of accounts and their ads/keywords",
    )

    parser.add_argument(
        "--config",
        default=None,
        help="Path to config file (default: configs/watch.json or configs/watch.example.json)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Don't send email, just print the report",
    )

    parser.add_argument(
        "--today",
        type=_parse_date,
        default=None,
        help="Override today's date (YYYY-MM-DD) for the reassurance check",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging (DEBUG level)",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Exit code: 0 (all clear), 2 (warnings), 3 (errors)
    """
    args = build_parser().parse_args(argv)

    setup_logging(verbose=args.verbose)

    logger = logging.getLogger(__name__)
    logger.info("Starting landing page check for %s", args.accounts)

    try:
        exit_code = run_monitor(
            accounts_path=args.accounts,
            config_path=args.config,
            dry_run=args.dry_run,
            today=args.today,
        )
        logger.info("Landing page check completed with exit code: %d", exit_code)
        return exit_code
    except KeyboardInterrupt:
        logger.error("Landing page check interrupted by user")
        return 130
    except Exception as e:  # pylint: disable=broad-except
        logger.error("Landing page check failed: %s", e, exc_info=True)
        return 3


if __name__ == "__main__":
    sys.exit(main())
