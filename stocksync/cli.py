"""Command-line interface for the stock sync."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

__all__ = ["main", "parse_args", "show_stats", "show_events"]

from stocksync.config import (
    DB_PATH,
    DOWNLOAD_CSV_PATH,
    URLS_CSV_PATH,
    XLSX_PATH,
    ConfigError,
    SyncConfig,
    load_credentials,
    load_ozon_credentials,
)
from stocksync.csv_utils import export_db_to_csv, load_price_table, load_url_lookup
from stocksync.db import get_all_records, get_record_count, init_db
from stocksync.logging_config import LOG_DIR, daily_log_file, get_logger, read_sync_events, setup_logging
from stocksync.pipeline import SKUCardinalityError, process
from stocksync.publishers import StockUpdateError, push_ozon_stocks, push_stocks
from stocksync.spreadsheet import SpreadsheetError, update_spreadsheet_costs
from stocksync.vendor_codes import VendorCodeClassifier

logger = get_logger("cli")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Reconcile marketplace cards with supplier prices and push stocks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Rebuild the product store and update the cost workbook
  python -m stocksync.cli

  # Rebuild the store and push stocks to both marketplaces
  python -m stocksync.cli --push-stocks --push-ozon --skip-xlsx

  # Push stocks from the existing store without scraping
  python -m stocksync.cli --skip-process --push-stocks --skip-xlsx

  # Show store statistics
  python -m stocksync.cli --stats

  # List cards skipped in today's runs
  python -m stocksync.cli --events card_skipped
        """,
    )

    # Steps
    parser.add_argument(
        "--skip-process",
        action="store_true",
        help="Don't rebuild the product store (reuse the previous run's data)",
    )
    parser.add_argument(
        "--push-stocks",
        action="store_true",
        help="Push stock amounts to the marketplace stock API",
    )
    parser.add_argument(
        "--push-ozon",
        action="store_true",
        help="Push stock amounts to the alternate marketplace (needs OZON_* env vars)",
    )
    parser.add_argument(
        "--skip-xlsx",
        action="store_true",
        help="Don't write costs into the workbook",
    )

    # Paths
    parser.add_argument("--db", default=DB_PATH, help=f"SQLite database path (default: {DB_PATH})")
    parser.add_argument("--urls", default=URLS_CSV_PATH, help=f"URL lookup CSV (default: {URLS_CSV_PATH})")
    parser.add_argument(
        "--prices",
        default=DOWNLOAD_CSV_PATH,
        help=f"Fixed price/quantity CSV (default: {DOWNLOAD_CSV_PATH})",
    )
    parser.add_argument("--xlsx", default=XLSX_PATH, help=f"Cost workbook (default: {XLSX_PATH})")

    # Behaviour
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run the browser without a window",
    )
    parser.add_argument(
        "--no-pcs",
        action="store_true",
        help="Ignore the pack size segment of scraped vendor codes",
    )
    parser.add_argument(
        "--lenient-sku",
        action="store_true",
        help="Skip scraped cards with zero or several SKUs instead of aborting",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    # Info commands
    parser.add_argument("--stats", action="store_true", help="Show store statistics and exit")
    parser.add_argument("--export-csv", metavar="PATH", help="Export the store to CSV and exit")
    parser.add_argument(
        "--events",
        metavar="TYPE",
        help="Print today's logged events of TYPE (e.g. card_skipped, batch_failed) and exit",
    )

    return parser.parse_args(argv)


def show_stats(db_path: str, config: SyncConfig) -> None:
    """Display store statistics."""
    init_db(db_path)
    classifier = VendorCodeClassifier(config)

    print(f"\n{'='*50}")
    print(f"Database: {db_path}")
    print(f"{'='*50}")
    print(f"\nTotal records: {get_record_count(db_path)}")

    counts = {}
    for record in get_all_records(db_path):
        kind = classifier.classify(record.vendor_code).value
        counts[kind] = counts.get(kind, 0) + 1

    print("\nRecords by source:")
    for kind, count in sorted(counts.items()):
        print(f"  {kind}: {count}")
    print()


def show_events(event_type: str, log_dir: Path = LOG_DIR) -> int:
    """Print today's events of one type, grouped by run. Returns the count shown."""
    log_file = daily_log_file(log_dir)
    if not log_file.exists():
        print(f"No log file for today: {log_file}")
        return 0

    count = 0
    current_run = None
    for entry in read_sync_events(log_file, event_type=event_type):
        if entry.get("run_id") != current_run:
            current_run = entry.get("run_id")
            print(f"\n--- run {current_run} ---")
        fields = {
            k: v for k, v in entry.items()
            if k not in ("timestamp", "run_id", "level", "logger", "message", "event_type")
        }
        print(f"{entry['timestamp']} [{entry['level']}] {fields}")
        count += 1

    print(f"\n{count} {event_type} event(s)")
    return count


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    load_dotenv()
    args = parse_args(argv)
    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    config = SyncConfig(
        db_path=args.db,
        use_pcs=not args.no_pcs,
        strict_sku_check=not args.lenient_sku,
    )

    if args.stats:
        show_stats(args.db, config)
        return 0

    if args.events:
        show_events(args.events)
        return 0

    if args.export_csv:
        init_db(args.db)
        export_db_to_csv(args.db, args.export_csv)
        return 0

    try:
        credentials = load_credentials()
        ozon_credentials = load_ozon_credentials() if args.push_ozon else None
    except ConfigError as e:
        logger.critical(str(e))
        return 1

    if not args.skip_process:
        try:
            url_table = load_url_lookup(args.urls)
            price_table = load_price_table(args.prices)
        except OSError as e:
            logger.critical(f"Cannot read reference data: {e}")
            return 1

        try:
            process(credentials, config, url_table, price_table, headless=args.headless)
        except SKUCardinalityError as e:
            logger.critical(str(e))
            return 1

    if args.push_stocks:
        push_stocks(credentials.api_key, args.db)

    if ozon_credentials is not None:
        try:
            push_ozon_stocks(ozon_credentials, args.db)
        except StockUpdateError as e:
            logger.error(f"Alternate stock update failed: {e}")

    if not args.skip_xlsx:
        try:
            update_spreadsheet_costs(args.xlsx, args.db)
        except SpreadsheetError as e:
            logger.error(str(e))

    return 0


if __name__ == "__main__":
    sys.exit(main())
