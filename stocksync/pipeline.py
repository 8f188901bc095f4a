"""Per-card reconciliation pipeline."""

import logging
import sqlite3
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from stocksync.browser import BrowserSession
from stocksync.config import Credentials, SyncConfig
from stocksync.content_api import create_session, fetch_all_cards
from stocksync.db import get_connection, reset_db, upsert_product
from stocksync.logging_config import get_logger, log_sync_event
from stocksync.models import PriceQuantity, ProductCard, ProductRecord
from stocksync.pricing import ParseError, compute_cost, fixed_cost
from stocksync.scraper import MissingReferenceError, ScrapeCache, ScrapeError, SourceRouter
from stocksync.vendor_codes import SourceKind, VendorCodeClassifier, VendorCodeError

__all__ = [
    "SKUCardinalityError",
    "RunStats",
    "ReconciliationPipeline",
    "process",
]

logger = get_logger("pipeline")


class SKUCardinalityError(Exception):
    """Raised when a scraped card does not resolve to exactly one SKU."""
    pass


@dataclass
class RunStats:
    cards_seen: int = 0
    saved: int = 0
    skipped: int = 0
    cache_hits: int = 0
    scrapes: int = 0


class ReconciliationPipeline:
    """Classify, price and persist product cards one at a time.

    Reference tables, the scrape cache and the store connection are owned
    by the caller and passed in; the pipeline keeps no module-level state.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        router: SourceRouter,
        config: Optional[SyncConfig] = None,
        classifier: Optional[VendorCodeClassifier] = None,
    ):
        self.conn = conn
        self.router = router
        self.config = config or SyncConfig()
        self.classifier = classifier or VendorCodeClassifier(self.config)
        self.stats = RunStats()

    def _skip(self, card: ProductCard, reason: str) -> None:
        self.stats.skipped += 1
        logger.warning(f"Skipping {card.vendor_code} (nm_id={card.nm_id}): {reason}")
        log_sync_event("card_skipped", {
            "nm_id": card.nm_id,
            "vendor_code": card.vendor_code,
            "reason": reason,
        }, level=logging.WARNING, logger_name="pipeline")

    def _single_sku(self, card: ProductCard, fatal: bool) -> Optional[str]:
        skus = card.skus
        if len(skus) == 1:
            return skus[0]
        message = f"expected exactly one SKU, found {len(skus)}"
        if fatal:
            raise SKUCardinalityError(
                f"{message} for vendor code {card.vendor_code} (nm_id={card.nm_id})"
            )
        self._skip(card, message)
        return None

    def _save(self, record: ProductRecord) -> bool:
        try:
            upsert_product(self.conn, record)
        except sqlite3.Error as e:
            logger.error(f"Failed to save {record.product_key}: {e}")
            return False
        self.stats.saved += 1
        logger.info(
            f"Saved {record.vendor_code}: product_key={record.product_key} "
            f"pack_size={record.pack_size} sku={record.sku} "
            f"available={record.available_count} cost={record.cost}"
        )
        log_sync_event("record_saved", {
            "nm_id": record.nm_id,
            "product_key": record.product_key,
            "pack_size": record.pack_size,
            "cost": record.cost,
        }, level=logging.DEBUG, logger_name="pipeline")
        return True

    def process_card(self, card: ProductCard) -> Optional[ProductRecord]:
        """Reconcile one card. Returns the saved record, or None if skipped.

        Raises:
            SKUCardinalityError: If a scraped card has zero or several SKUs
                and strict SKU checking is enabled
        """
        self.stats.cards_seen += 1

        kind = self.classifier.classify(card.vendor_code)
        if kind is SourceKind.UNCLASSIFIED:
            self._skip(card, "vendor code matches no known family")
            return None

        try:
            identity = self.classifier.extract(kind, card.vendor_code, card.nm_id)
        except VendorCodeError as e:
            self._skip(card, str(e))
            return None

        if kind is SourceKind.FIXED_PRICE:
            logger.info(f"Fixed-price product: {card.vendor_code} pack_size={identity.pack_size}")
            try:
                row: PriceQuantity = self.router.fixed_price(card.nm_id)
            except MissingReferenceError as e:
                self._skip(card, str(e))
                return None
            sku = self._single_sku(card, fatal=False)
            if sku is None:
                return None
            available_count = row.quantity
            cost = fixed_cost(row.price, identity.pack_size)
        else:
            sku = self._single_sku(card, fatal=self.config.strict_sku_check)
            if sku is None:
                return None
            try:
                result, from_cache = self.router.scraped(identity)
                cost = compute_cost(result.price, identity.pack_size)
            except (ScrapeError, MissingReferenceError, ParseError) as e:
                self._skip(card, str(e))
                return None
            if from_cache:
                self.stats.cache_hits += 1
            else:
                self.stats.scrapes += 1
            available_count = result.available_count

        record = ProductRecord(
            nm_id=card.nm_id,
            vendor_code=card.vendor_code,
            pack_size=identity.pack_size,
            product_key=identity.product_key,
            sku=sku,
            available_count=available_count,
            cost=cost,
        )
        if not self._save(record):
            return None
        return record

    def run(self, cards: Iterable[ProductCard]) -> RunStats:
        for card in cards:
            self.process_card(card)

        logger.info(
            f"Processing complete: {self.stats.saved} saved, {self.stats.skipped} skipped, "
            f"{self.stats.scrapes} scraped, {self.stats.cache_hits} from cache"
        )
        log_sync_event("run_complete", {
            "cards_seen": self.stats.cards_seen,
            "saved": self.stats.saved,
            "skipped": self.stats.skipped,
            "scrapes": self.stats.scrapes,
            "cache_hits": self.stats.cache_hits,
        }, logger_name="pipeline")
        return self.stats


def process(
    credentials: Credentials,
    config: SyncConfig,
    url_table: Dict[str, str],
    price_table: Dict[int, PriceQuantity],
    headless: bool = False,
) -> RunStats:
    """Full reconciliation run: recreate the store, fetch cards, price and save them.

    Raises:
        SKUCardinalityError: See ReconciliationPipeline.process_card
    """
    reset_db(config.db_path)

    session = create_session(credentials.api_key)
    try:
        cards = fetch_all_cards(session, config.object_ids)
    finally:
        session.close()
    logger.info(f"Loaded {len(cards)} cards in total.")
    log_sync_event("run_start", {
        "cards": len(cards),
        "db_path": config.db_path,
        "object_ids": len(config.object_ids),
    }, logger_name="pipeline")

    with BrowserSession(headless=headless) as browser, get_connection(config.db_path) as conn:
        router = SourceRouter(price_table, url_table, browser, ScrapeCache())
        pipeline = ReconciliationPipeline(conn, router, config)
        return pipeline.run(cards)
