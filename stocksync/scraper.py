"""Source routing and scrape strategies.

Each classified card gets its price and availability level from one of
three places: the fixed price table, a catalog page addressed by the
product key (strategy A) or a bag supplier page looked up in the URL
table (strategy B). Scraped results are cached per product key for the
lifetime of the run.
"""

from typing import Callable, Dict, Optional, Protocol, Set, Tuple
from urllib.parse import urlparse

from playwright.sync_api import Error as PlaywrightError

from stocksync.config import CATALOG_BASE_URL
from stocksync.html_utils import PageStructureError, extract_bag_quote, extract_catalog_quote
from stocksync.logging_config import get_logger
from stocksync.models import PriceQuantity, RawScrape, ScrapeResult
from stocksync.pricing import parse_scrape
from stocksync.url_validation import URLValidationError, validate_url
from stocksync.vendor_codes import SourceKind, VendorIdentity

__all__ = [
    "ScrapeError",
    "MissingReferenceError",
    "PageSource",
    "ScrapeCache",
    "SourceRouter",
    "catalog_url",
    "scrape_catalog_product",
    "scrape_bag_product",
]

logger = get_logger("scraper")

# Strategy A only ever navigates to the catalog host
CATALOG_HOSTS: Set[str] = {urlparse(CATALOG_BASE_URL).hostname or ""}


class ScrapeError(Exception):
    """Raised when a page cannot be loaded or read."""
    pass


class MissingReferenceError(LookupError):
    """Raised when a reference table has no entry for a product."""
    pass


class PageSource(Protocol):
    """What the strategies need from a browser."""

    def catalog_page_html(self, url: str) -> str: ...

    def bag_page_html(self, url: str) -> str: ...


def catalog_url(product_key: str) -> str:
    return f"{CATALOG_BASE_URL}{product_key}/"


def _load(
    fetch: Callable[[str], str],
    url: str,
    allowed_domains: Optional[Set[str]] = None,
) -> str:
    try:
        url = validate_url(url, allowed_domains)
    except URLValidationError as e:
        raise ScrapeError(f"Invalid target URL {url!r}: {e}") from e
    try:
        return fetch(url)
    except PlaywrightError as e:
        raise ScrapeError(f"Failed to load page {url}: {e}") from e


def scrape_catalog_product(source: PageSource, product_key: str) -> RawScrape:
    """Strategy A: read price and store availability from the catalog page."""
    url = catalog_url(product_key)
    html = _load(source.catalog_page_html, url, CATALOG_HOSTS)
    try:
        return extract_catalog_quote(html)
    except PageStructureError as e:
        raise ScrapeError(f"Unexpected page layout at {url}: {e}") from e


def scrape_bag_product(
    source: PageSource,
    lookup_key: str,
    url_table: Dict[str, str],
) -> RawScrape:
    """Strategy B: read price and stock label from the URL table's target page."""
    url = url_table.get(lookup_key)
    if url is None:
        raise MissingReferenceError(f"No URL for {lookup_key} in the URL table")
    html = _load(source.bag_page_html, url)
    try:
        return extract_bag_quote(html)
    except PageStructureError as e:
        raise ScrapeError(f"Unexpected page layout at {url}: {e}") from e


class ScrapeCache:
    """Scrape results by product key, written once per key per run."""

    def __init__(self) -> None:
        self._entries: Dict[str, ScrapeResult] = {}

    def get(self, product_key: str) -> Optional[ScrapeResult]:
        return self._entries.get(product_key)

    def put(self, product_key: str, result: ScrapeResult) -> None:
        self._entries.setdefault(product_key, result)


class SourceRouter:
    """Pick the acquisition strategy for a classified product."""

    def __init__(
        self,
        price_table: Dict[int, PriceQuantity],
        url_table: Dict[str, str],
        source: PageSource,
        cache: Optional[ScrapeCache] = None,
    ):
        self.price_table = price_table
        self.url_table = url_table
        self.source = source
        self.cache = cache if cache is not None else ScrapeCache()

    def fixed_price(self, nm_id: int) -> PriceQuantity:
        row = self.price_table.get(nm_id)
        if row is None:
            raise MissingReferenceError(f"No price table entry for nm_id={nm_id}")
        return row

    def _scrape(self, identity: VendorIdentity) -> RawScrape:
        if identity.kind is SourceKind.SCRAPED_B:
            return scrape_bag_product(self.source, identity.lookup_key or "", self.url_table)
        if identity.kind in (SourceKind.SCRAPED_A, SourceKind.LEGACY):
            return scrape_catalog_product(self.source, identity.product_key)
        raise ValueError(f"{identity.kind.value} products are not scraped")

    def scraped(self, identity: VendorIdentity) -> Tuple[ScrapeResult, bool]:
        """Price and availability for a scraped product.

        Returns:
            (result, from_cache)

        Raises:
            ScrapeError: If the page could not be read
            MissingReferenceError: If the bag URL is unknown
            ParseError: If the scraped price is not numeric
        """
        cached = self.cache.get(identity.product_key)
        if cached is not None:
            logger.info(f"Using cached data for product {identity.product_key}")
            return cached, True

        logger.info(f"Scraping page for product {identity.product_key}")
        result = parse_scrape(self._scrape(identity))
        self.cache.put(identity.product_key, result)
        return result, False
