"""Tests for supplier page extraction."""

import pytest

from conftest import bag_html, catalog_html
from stocksync.html_utils import (
    PageStructureError,
    availability_from_stock_label,
    clean_bag_price,
    clean_catalog_price,
    extract_bag_quote,
    extract_catalog_quote,
)


class TestCatalogQuote:

    def test_price_and_store_count(self):
        quote = extract_catalog_quote(catalog_html(price="15.50 p", stores=3))
        assert quote.price == "15.50"
        assert quote.available_count == "3"

    def test_reads_single_unit_tier_only(self):
        quote = extract_catalog_quote(catalog_html(price="9.90 p", stores=1))
        assert quote.price == "9.90"

    def test_no_stores_in_stock(self):
        quote = extract_catalog_quote(catalog_html(stores=0))
        assert quote.available_count == "0"

    def test_missing_price_element(self):
        with pytest.raises(PageStructureError):
            extract_catalog_quote("<html><body><p>Not found</p></body></html>")


class TestBagQuote:

    def test_in_stock(self):
        quote = extract_bag_quote(bag_html(price="23 руб.", stock="В наличии"))
        assert quote.price == "23"
        assert quote.available_count == "5"

    def test_out_of_stock(self):
        quote = extract_bag_quote(bag_html(stock="Нет в наличии"))
        assert quote.available_count == "0"

    def test_missing_stock_element(self):
        html = '<button data-count="1"><span class="col_right">23 руб.</span></button>'
        with pytest.raises(PageStructureError):
            extract_bag_quote(html)

    def test_missing_price_element(self):
        html = '<div class="quantity"><span class="stock">В наличии</span></div>'
        with pytest.raises(PageStructureError):
            extract_bag_quote(html)


class TestCleaning:

    @pytest.mark.parametrize("text,expected", [
        ("15.50 p", "15.50"),
        ("1 250 p", "1250"),
        ("1\xa0250р", "1250"),
        ("  7 ", "7"),
    ])
    def test_clean_catalog_price(self, text, expected):
        assert clean_catalog_price(text) == expected

    @pytest.mark.parametrize("text,expected", [
        ("23 руб.", "23"),
        ("№12.5 руб.", "12.5"),
        ("", ""),
    ])
    def test_clean_bag_price(self, text, expected):
        assert clean_bag_price(text) == expected

    def test_stock_label(self):
        assert availability_from_stock_label("Товар В наличии") == 5
        assert availability_from_stock_label("Под заказ") == 0
