"""CSV import and export utilities.

Two reference files feed the pipeline:

- URL lookup (``urls.csv``): ``key,url`` per line, no header.
- Price/quantity table (``download.csv``): header line, then ``id,price,quantity``.
"""

import csv
import os
from dataclasses import asdict
from typing import Dict, List

from stocksync.logging_config import get_logger
from stocksync.models import PriceQuantity

__all__ = [
    "load_url_lookup",
    "load_price_table",
    "export_db_to_csv",
]

logger = get_logger("csv_utils")

EXPORT_FIELDS = [
    "id", "nm_id", "vendor_code", "pack_size", "product_key",
    "sku", "available_count", "cost",
]


def load_url_lookup(path: str) -> Dict[str, str]:
    """Load the scrape target table. Lines without exactly two fields are ignored."""
    table: Dict[str, str] = {}
    with open(path, "r", newline="", encoding="utf-8") as f:
        for row in csv.reader(f):
            if len(row) != 2:
                continue
            key, url = row[0].strip(), row[1].strip()
            table[key] = url
    logger.info(f"Loaded {len(table)} URLs from {path}")
    return table


def load_price_table(path: str) -> Dict[int, PriceQuantity]:
    """Load the fixed price/quantity table keyed by card id.

    The header line is skipped; malformed lines are logged and skipped.
    """
    table: Dict[int, PriceQuantity] = {}
    with open(path, "r", newline="", encoding="utf-8") as f:
        reader = csv.reader(f)
        next(reader, None)
        for row in reader:
            line = ",".join(row)
            if len(row) < 3:
                logger.warning(f"Malformed line in {path}: {line}")
                continue
            try:
                nm_id, price, quantity = (int(v.strip()) for v in row[:3])
            except ValueError:
                logger.warning(f"Non-integer values in {path}: {line}")
                continue
            table[nm_id] = PriceQuantity(price=price, quantity=quantity)

    logger.info(f"Loaded {len(table)} records from {path}")
    return table


def export_db_to_csv(db_path: str, csv_path: str) -> int:
    """Export the product store to CSV.

    Returns:
        Number of records exported
    """
    from stocksync.db import get_all_records

    records = get_all_records(db_path)
    if not records:
        print("No records to export.")
        return 0

    rows: List[Dict[str, object]] = [asdict(r) for r in records]

    os.makedirs(os.path.dirname(csv_path) or ".", exist_ok=True)
    with open(csv_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=EXPORT_FIELDS, extrasaction="ignore")
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

    print(f"Exported {len(rows)} records to {csv_path}")
    return len(rows)
