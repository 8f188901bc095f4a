"""Tests for source routing, scrape strategies and the scrape cache."""

import pytest
from playwright.sync_api import Error as PlaywrightError

from conftest import FakePageSource, bag_html, catalog_html
from stocksync.config import SyncConfig
from stocksync.models import PriceQuantity, ScrapeResult
from stocksync.pricing import ParseError
from stocksync.scraper import (
    MissingReferenceError,
    ScrapeCache,
    ScrapeError,
    SourceRouter,
    catalog_url,
    scrape_bag_product,
    scrape_catalog_product,
)
from stocksync.vendor_codes import VendorCodeClassifier

BAG_URL = "https://packio.ru/product/paket-19336/"


class FailingPageSource(FakePageSource):
    def _get(self, url):
        self.loaded.append(url)
        raise PlaywrightError("net::ERR_CONNECTION_RESET")


@pytest.fixture
def classifier():
    return VendorCodeClassifier(SyncConfig())


class TestStrategies:

    def test_catalog_url(self):
        assert catalog_url("77") == "https://sp.cargo-avto.ru/catalog/77/"

    def test_catalog_strategy(self):
        source = FakePageSource({catalog_url("77"): catalog_html("15.50 p", 3)})

        raw = scrape_catalog_product(source, "77")

        assert raw.price == "15.50"
        assert raw.available_count == "3"
        assert source.loaded == [catalog_url("77")]

    def test_bag_strategy(self):
        source = FakePageSource({BAG_URL: bag_html("23 руб.")})

        raw = scrape_bag_product(source, "bubblebags_19336", {"bubblebags_19336": BAG_URL})

        assert raw.price == "23"
        assert raw.available_count == "5"

    def test_bag_strategy_without_url(self, page_source):
        with pytest.raises(MissingReferenceError):
            scrape_bag_product(page_source, "bubblebags_1", {})
        assert page_source.loaded == []

    def test_invalid_url_is_not_loaded(self, page_source):
        with pytest.raises(ScrapeError):
            scrape_bag_product(page_source, "bubblebags_1", {"bubblebags_1": "javascript:alert(1)"})
        assert page_source.loaded == []

    def test_browser_error_becomes_scrape_error(self):
        with pytest.raises(ScrapeError):
            scrape_catalog_product(FailingPageSource(), "77")

    def test_unexpected_layout_becomes_scrape_error(self):
        source = FakePageSource({catalog_url("77"): "<html><body></body></html>"})
        with pytest.raises(ScrapeError):
            scrape_catalog_product(source, "77")


class TestScrapeCache:

    def test_put_then_get(self):
        cache = ScrapeCache()
        result = ScrapeResult(price=15.5, available_count=3)

        assert cache.get("77") is None
        cache.put("77", result)

        assert cache.get("77") == result

    def test_first_write_is_kept(self):
        cache = ScrapeCache()
        cache.put("77", ScrapeResult(price=1.0, available_count=1))
        cache.put("77", ScrapeResult(price=2.0, available_count=2))
        assert cache.get("77").price == 1.0


class TestSourceRouter:

    def test_fixed_price_lookup(self, page_source):
        router = SourceRouter({500: PriceQuantity(40, 12)}, {}, page_source)
        assert router.fixed_price(500) == PriceQuantity(40, 12)
        with pytest.raises(MissingReferenceError):
            router.fixed_price(501)

    def test_box_routes_to_catalog(self, classifier):
        source = FakePageSource({catalog_url("77"): catalog_html("15.50 p", 3)})
        router = SourceRouter({}, {}, source)

        result, from_cache = router.scraped(classifier.identify("box_77_20", nm_id=1))

        assert result == ScrapeResult(price=15.5, available_count=3)
        assert from_cache is False

    def test_legacy_routes_to_catalog(self, classifier):
        source = FakePageSource({catalog_url("9120"): catalog_html("4 p", 2)})
        router = SourceRouter({}, {}, source)

        result, _ = router.scraped(classifier.identify("bubblebags_9120_50", nm_id=1))

        assert result.price == 4.0
        assert source.loaded == [catalog_url("9120")]

    def test_bag_routes_to_url_table(self, classifier):
        source = FakePageSource({BAG_URL: bag_html("23 руб.")})
        router = SourceRouter({}, {"bubblebags_19336": BAG_URL}, source)

        result, _ = router.scraped(classifier.identify("bubblebags_19336_100", nm_id=1))

        assert result == ScrapeResult(price=23.0, available_count=5)
        assert source.loaded == [BAG_URL]

    def test_second_pack_size_uses_cache(self, classifier):
        source = FakePageSource({catalog_url("77"): catalog_html("15.50 p", 3)})
        router = SourceRouter({}, {}, source)

        router.scraped(classifier.identify("box_77_10", nm_id=1))
        result, from_cache = router.scraped(classifier.identify("box_77_20", nm_id=2))

        assert from_cache is True
        assert result.price == 15.5
        assert source.loaded == [catalog_url("77")]

    def test_failed_scrape_is_not_cached(self, classifier):
        router = SourceRouter({}, {}, FailingPageSource())
        identity = classifier.identify("box_77_20", nm_id=1)

        with pytest.raises(ScrapeError):
            router.scraped(identity)

        assert router.cache.get("77") is None

    def test_empty_price_raises_parse_error(self, classifier):
        source = FakePageSource({catalog_url("77"): catalog_html(" p", 3)})
        router = SourceRouter({}, {}, source)

        with pytest.raises(ParseError):
            router.scraped(classifier.identify("box_77_20", nm_id=1))

    def test_fixed_price_identity_is_not_scraped(self, classifier, page_source):
        router = SourceRouter({}, {}, page_source)
        with pytest.raises(ValueError):
            router.scraped(classifier.identify("f_500_3", nm_id=500))
