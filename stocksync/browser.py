"""Playwright browser session shared by all scrapes in a run."""

from typing import Any, Optional

from playwright.sync_api import Browser, Page, Playwright, sync_playwright

from stocksync.config import PAGE_SETTLE_SECONDS, SCRAPE_SELECTORS
from stocksync.logging_config import get_logger

__all__ = ["BrowserSession"]

logger = get_logger("browser")

NAVIGATION_TIMEOUT_MS = 60000


class BrowserSession:
    """One Chromium browser and one page, reused for every scrape.

    Usage:
        with BrowserSession(headless=True) as browser:
            html = browser.catalog_page_html(url)
    """

    def __init__(self, headless: bool = False, settle_seconds: float = PAGE_SETTLE_SECONDS):
        self.headless = headless
        self.settle_ms = int(settle_seconds * 1000)
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._page: Optional[Page] = None

    def start(self) -> "BrowserSession":
        if self._page is not None:
            return self
        logger.info(f"Starting Chromium (headless={self.headless})")
        self._playwright = sync_playwright().start()
        self._browser = self._playwright.chromium.launch(
            headless=self.headless,
            args=["--disable-gpu"],
        )
        self._page = self._browser.new_page()
        self._page.set_default_timeout(NAVIGATION_TIMEOUT_MS)
        return self

    def close(self) -> None:
        if self._browser is not None:
            self._browser.close()
        if self._playwright is not None:
            self._playwright.stop()
        self._page = None
        self._browser = None
        self._playwright = None

    def __enter__(self) -> "BrowserSession":
        return self.start()

    def __exit__(self, *exc: Any) -> None:
        self.close()

    @property
    def page(self) -> Page:
        if self._page is None:
            raise RuntimeError("Browser session not started")
        return self._page

    def _open(self, url: str) -> Page:
        page = self.page
        page.goto(url, wait_until="domcontentloaded")
        page.wait_for_timeout(self.settle_ms)
        return page

    def catalog_page_html(self, url: str) -> str:
        """Open a catalog product page, switch to the pickup tab, return its HTML."""
        page = self._open(url)
        page.click(SCRAPE_SELECTORS["catalog"]["pickup_tab"])
        page.wait_for_timeout(self.settle_ms)
        return page.content()

    def bag_page_html(self, url: str) -> str:
        """Open a bag supplier product page and return its HTML."""
        return self._open(url).content()
