"""HTML extraction for the two scraped supplier page layouts."""

from typing import Optional

from bs4 import BeautifulSoup

from stocksync.config import IN_STOCK_LABEL, SCRAPE_SELECTORS
from stocksync.models import RawScrape

__all__ = [
    "PageStructureError",
    "clean_catalog_price",
    "clean_bag_price",
    "availability_from_stock_label",
    "extract_catalog_quote",
    "extract_bag_quote",
]

# Availability level reported when a bag page says the item is in stock
BAG_IN_STOCK_LEVEL = 5


class PageStructureError(ValueError):
    """Raised when an expected element is missing from a page."""
    pass


def _select_text(soup: BeautifulSoup, selector: str) -> Optional[str]:
    el = soup.select_one(selector)
    if el is None:
        return None
    return el.get_text(" ", strip=True)


def clean_catalog_price(text: str) -> str:
    """'1 250 p' -> '1250'. Drops whitespace and the currency letter."""
    cleaned = text.strip()
    for junk in ("p", "р", "\xa0", " "):
        cleaned = cleaned.replace(junk, "")
    return cleaned


def clean_bag_price(text: str) -> str:
    """Keep the first token of '23 руб.' and drop the numero sign."""
    tokens = text.split()
    if not tokens:
        return ""
    return tokens[0].replace("№", "").strip()


def availability_from_stock_label(text: str) -> int:
    return BAG_IN_STOCK_LEVEL if IN_STOCK_LABEL in text else 0


def extract_catalog_quote(html: str) -> RawScrape:
    """Price and number of stores with stock from a catalog product page.

    Expects the page after the pickup tab has been opened.
    """
    selectors = SCRAPE_SELECTORS["catalog"]
    soup = BeautifulSoup(html, "html.parser")

    price_text = _select_text(soup, selectors["price"])
    if price_text is None:
        raise PageStructureError(f"price element not found: {selectors['price']}")

    stores = len(soup.select(selectors["available_store"]))
    return RawScrape(price=clean_catalog_price(price_text), available_count=str(stores))


def extract_bag_quote(html: str) -> RawScrape:
    """Price and in-stock level from a bag supplier product page."""
    selectors = SCRAPE_SELECTORS["bag"]
    soup = BeautifulSoup(html, "html.parser")

    stock_text = _select_text(soup, selectors["stock"])
    if stock_text is None:
        raise PageStructureError(f"stock element not found: {selectors['stock']}")
    price_text = _select_text(soup, selectors["price"])
    if price_text is None:
        raise PageStructureError(f"price element not found: {selectors['price']}")

    return RawScrape(
        price=clean_bag_price(price_text),
        available_count=str(availability_from_stock_label(stock_text)),
    )
