"""Push computed stock amounts to the two marketplace stock APIs."""

import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import requests  # type: ignore[import-untyped]

from stocksync.config import (
    BATCH_SIZE,
    DB_PATH,
    OZON_API_TIMEOUT,
    OZON_BATCH_SIZE,
    OZON_STOCKS_API_URL,
    REQUEST_LIMIT,
    STOCKS_API_URL,
    WAREHOUSE_ID,
    OzonCredentials,
)
from stocksync.db import get_stock_rows
from stocksync.logging_config import get_logger, log_sync_event
from stocksync.models import StockItem
from stocksync.pricing import calc_amount

__all__ = [
    "StockUpdateError",
    "PushSummary",
    "build_stock_items",
    "chunked",
    "request_interval",
    "push_stocks",
    "push_ozon_stocks",
]

logger = get_logger("publishers")


class StockUpdateError(Exception):
    """Raised when the alternate stock API rejects an update."""
    pass


@dataclass
class PushSummary:
    batches_sent: int = 0
    batches_failed: int = 0
    items_sent: int = 0


def request_interval(requests_per_minute: int = REQUEST_LIMIT) -> float:
    """Seconds to wait between requests to stay under the rate limit."""
    return 60.0 / requests_per_minute


def chunked(items: Sequence[Any], size: int) -> List[Sequence[Any]]:
    return [items[i:i + size] for i in range(0, len(items), size)]


def build_stock_items(rows: Sequence[Dict[str, Any]]) -> List[StockItem]:
    """Turn store rows into stock items with resolved shippable amounts."""
    return [
        StockItem(
            sku=row.get("sku"),
            vendor=row["vendor_code"],
            amount=calc_amount(row["pack_size"], row["available_count"]),
        )
        for row in rows
    ]


def push_stocks(
    api_key: str,
    db_path: str = DB_PATH,
    session: Optional[requests.Session] = None,
    warehouse_id: int = WAREHOUSE_ID,
) -> PushSummary:
    """Send stock amounts in batches of BATCH_SIZE.

    A failed batch is logged and the push moves on. The rate limit sleep
    follows every batch, whatever its outcome.
    """
    items = build_stock_items(get_stock_rows(db_path))
    interval = request_interval()
    url = STOCKS_API_URL.format(warehouse_id=warehouse_id)
    sess = session or requests.Session()
    summary = PushSummary()

    logger.info(f"Total items to send: {len(items)}")

    for batch in chunked(items, BATCH_SIZE):
        payload = {
            "stocks": [{"sku": i.sku, "vendor": i.vendor, "amount": i.amount} for i in batch]
        }
        try:
            resp = sess.put(
                url,
                json=payload,
                headers={"Authorization": f"Bearer {api_key}"},
            )
        except requests.RequestException as e:
            summary.batches_failed += 1
            logger.error(f"Error sending stock batch: {e}")
            time.sleep(interval)
            continue

        if resp.status_code == 204:
            summary.batches_sent += 1
            summary.items_sent += len(batch)
            logger.info(f"Stocks updated for {len(batch)} items")
        else:
            summary.batches_failed += 1
            logger.error(f"Stock update failed: status {resp.status_code} body: {resp.text}")
            log_sync_event("batch_failed", {
                "status": resp.status_code,
                "body": resp.text,
                "items": len(batch),
            }, logger_name="publishers")
        resp.close()

        time.sleep(interval)

    logger.info("Stock push done.")
    return summary


def push_ozon_stocks(
    credentials: OzonCredentials,
    db_path: str = DB_PATH,
    session: Optional[requests.Session] = None,
) -> PushSummary:
    """Send stock amounts to the alternate marketplace in batches of OZON_BATCH_SIZE.

    Raises:
        StockUpdateError: On a transport error or any status other than 200
    """
    items = build_stock_items(get_stock_rows(db_path))
    sess = session or requests.Session()
    summary = PushSummary()
    headers = {
        "Client-Id": credentials.client_id,
        "Api-Key": credentials.api_key,
    }

    for batch in chunked(items, OZON_BATCH_SIZE):
        payload = {
            "stocks": [
                {"offer_id": i.vendor, "stock": i.amount, "warehouse_id": credentials.warehouse_id}
                for i in batch
            ]
        }
        try:
            resp = sess.post(
                OZON_STOCKS_API_URL,
                json=payload,
                headers=headers,
                timeout=OZON_API_TIMEOUT,
            )
        except requests.RequestException as e:
            raise StockUpdateError(f"Error sending stock batch: {e}") from e

        if resp.status_code != 200:
            raise StockUpdateError(
                f"Stock update failed: status {resp.status_code}, body: {resp.text}"
            )

        summary.batches_sent += 1
        summary.items_sent += len(batch)
        logger.info(f"Stocks updated for {len(batch)} items")

    return summary
