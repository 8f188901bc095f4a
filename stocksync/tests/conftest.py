"""Shared fixtures for the stocksync test suite."""

from typing import Dict, List, Optional

import pytest

from stocksync.db import get_connection, init_db
from stocksync.models import ProductCard


CATALOG_PAGE = """
<html><body>
  <ul class="tabs">
    <li class="tabs-item"><a href="#samovivoz-tabs">Pickup</a></li>
  </ul>
  <ul class="prices">
    <li data-min="1"><span class="price-val">{price}</span></li>
    <li data-min="10"><span class="price-val">12.00 p</span></li>
  </ul>
  <div class="avail">
    {stores}
    <span class="avail-item-status">empty</span>
  </div>
</body></html>
"""

BAG_PAGE = """
<html><body>
  <div class="quantity"><span class="stock">{stock}</span></div>
  <button data-count="1"><span class="col_left">1 pcs</span><span class="col_right">{price}</span></button>
  <button data-count="100"><span class="col_right">19 руб.</span></button>
</body></html>
"""


def catalog_html(price: str = "15.50 p", stores: int = 3) -> str:
    store_html = '<span class="avail-item-status avail">in stock</span>' * stores
    return CATALOG_PAGE.format(price=price, stores=store_html)


def bag_html(price: str = "23 руб.", stock: str = "В наличии") -> str:
    return BAG_PAGE.format(price=price, stock=stock)


def make_card(
    nm_id: int,
    vendor_code: str,
    skus: Optional[List[str]] = None,
) -> ProductCard:
    if skus is None:
        skus = [f"sku-{nm_id}"]
    return ProductCard(nm_id=nm_id, vendor_code=vendor_code, sizes=[skus])


class FakePageSource:
    """Serves canned HTML by URL and records every page load."""

    def __init__(self, pages: Optional[Dict[str, str]] = None):
        self.pages = pages or {}
        self.loaded: List[str] = []

    def _get(self, url: str) -> str:
        self.loaded.append(url)
        return self.pages[url]

    def catalog_page_html(self, url: str) -> str:
        return self._get(url)

    def bag_page_html(self, url: str) -> str:
        return self._get(url)


@pytest.fixture
def temp_db(tmp_path):
    """Path to an initialized temporary database."""
    db_path = str(tmp_path / "products.db")
    init_db(db_path)
    return db_path


@pytest.fixture
def db_conn(temp_db):
    with get_connection(temp_db) as conn:
        yield conn


@pytest.fixture
def page_source():
    return FakePageSource()
