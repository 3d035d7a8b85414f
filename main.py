#!/usr/bin/env python3
"""
AssetLedger -- Financial reports for an IT asset inventory.

Reads assets from the inventory database and prints one of the four financial
reports the REST API serves, using the same report builders.

Usage:
  python main.py current-value
  python main.py current-value --as-of 2025-06-30
  python main.py forecast --start 2025-01-01 --end 2025-12-31
  python main.py depreciation-schedule --assets 1,2,3
  python main.py opex-breakdown --format csv > opex.csv
  python main.py forecast --start 2025-01-01 --end 2027-12-31 --format html > forecast.html

Environment variables:
  DATABASE_URL   SQLAlchemy URL of the inventory database. Defaults to the
                 SQLite file used by the API.
"""

import argparse
import logging
import sys
from datetime import date
from typing import Optional

from core.config import get_settings
from core.formatter import disable_color, print_report, to_csv, to_html, to_json, to_markdown
from core.reports import REPORT_TYPES, ReportParameterError, build_report
from inventory.store import InventoryStore

logger = logging.getLogger("assetledger.cli")

# Largest value an SQLite INTEGER column holds.
_MAX_ID = 2**63 - 1


def _date_arg(value: str) -> date:
    """argparse type for YYYY-MM-DD dates."""
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{value}' is not a date in YYYY-MM-DD format")


def _ids_arg(value: str) -> list[int]:
    """argparse type for a comma-separated list of asset IDs."""
    message = f"'{value}' is not a comma-separated list of asset IDs"
    try:
        ids = [int(part) for part in value.split(",") if part.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(message)
    if any(not 1 <= i <= _MAX_ID for i in ids):
        raise argparse.ArgumentTypeError(message)
    return ids


def _open_store(database_url: Optional[str]) -> InventoryStore:
    url = database_url or get_settings().database_url
    return InventoryStore(url) if url else InventoryStore()


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="assetledger",
        description="Depreciation, OPEX and cost-forecast reports for an IT asset inventory.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py current-value
  python main.py forecast --start 2025-01-01 --end 2025-12-31
  python main.py opex-breakdown --as-of 2025-06-30 --format markdown
  DATABASE_URL=postgresql://user:pw@host/db python main.py depreciation-schedule
        """,
    )
    parser.add_argument(
        "report",
        choices=REPORT_TYPES,
        metavar="REPORT",
        help=f"Report type: {', '.join(REPORT_TYPES)}",
    )
    parser.add_argument("--start", type=_date_arg, metavar="YYYY-MM-DD", help="Forecast range start")
    parser.add_argument("--end", type=_date_arg, metavar="YYYY-MM-DD", help="Forecast range end")
    parser.add_argument(
        "--as-of",
        type=_date_arg,
        metavar="YYYY-MM-DD",
        help="Point-in-time date for current-value, depreciation-schedule and opex-breakdown (default: today)",
    )
    parser.add_argument(
        "--assets",
        type=_ids_arg,
        metavar="IDS",
        help="Comma-separated asset IDs to include (default: all assets)",
    )
    parser.add_argument(
        "--format",
        choices=["terminal", "json", "csv", "html", "markdown"],
        default="terminal",
        metavar="FORMAT",
        help="Output format: terminal (default), json, csv, html, or markdown",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable ANSI color codes in terminal output",
    )
    parser.add_argument(
        "--database-url",
        metavar="URL",
        help="SQLAlchemy database URL (overrides DATABASE_URL)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )

    # Apply color preference before any output
    if args.no_color:
        disable_color()

    store = _open_store(args.database_url)
    try:
        assets = store.get_assets_for_report(args.assets)
        logger.info("Loaded %d asset(s) for %s report", len(assets), args.report)
        report = build_report(
            args.report,
            assets,
            start_date=args.start,
            end_date=args.end,
            target_date=args.as_of,
            max_forecast_months=get_settings().max_forecast_months,
        )
    except ReportParameterError as exc:
        print(f"  [!] {exc}", file=sys.stderr)
        return 2
    finally:
        store.close()

    if args.format == "json":
        print(to_json(report))
    elif args.format == "csv":
        print(to_csv(report), end="")
    elif args.format == "html":
        print(to_html(report), end="")
    elif args.format == "markdown":
        print(to_markdown(report), end="")
    else:
        print_report(report)

    return 0


if __name__ == "__main__":
    sys.exit(main())
