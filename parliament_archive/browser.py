"""Playwright session for the click-driven report listing."""

import logging
from typing import List, Optional

from playwright.sync_api import Error as PWError
from playwright.sync_api import Page, sync_playwright

from .config import CrawlConfig
from .errors import NavigationOrExtractionFailure

logger = logging.getLogger("parliament_archive")

_LINKS_JS = """(els, label) => els
    .filter(el => el.textContent === label)
    .map(el => el.href)"""


class PortalBrowser:
    """One listing tab plus one tab for meeting detail pages."""

    def __init__(self, config: CrawlConfig):
        self.config = config
        self._playwright = None
        self._browser = None
        self._listing: Optional[Page] = None
        self._detail: Optional[Page] = None

    def start(self):
        if self._browser is not None:
            return
        self._playwright = sync_playwright().start()
        self._browser = self._playwright.chromium.launch(
            headless=self.config.headless,
            slow_mo=self.config.slow_mo_ms,
        )
        context = self._browser.new_context()
        context.set_default_timeout(self.config.navigation_timeout_ms)
        self._listing = context.new_page()
        self._detail = context.new_page()
        logger.debug("Browser started")

    def close(self):
        if self._browser is not None:
            self._browser.close()
            self._browser = None
        if self._playwright is not None:
            self._playwright.stop()
            self._playwright = None
        self._listing = self._detail = None

    @property
    def listing(self) -> Page:
        self.start()
        return self._listing

    @property
    def detail(self) -> Page:
        self.start()
        return self._detail

    def _wait_for_content(self, page: Page):
        page.wait_for_selector(f"{self.config.content_selector} > tbody")

    def open_listing(self, url: str):
        try:
            self.listing.goto(url)
            self._wait_for_content(self.listing)
        except PWError as e:
            raise NavigationOrExtractionFailure(url, str(e)) from e

    def detail_links(self) -> List[str]:
        """hrefs of every anchor whose text is exactly the detail-link label."""
        try:
            return self.listing.eval_on_selector_all("a", _LINKS_JS, self.config.link_label)
        except PWError as e:
            raise NavigationOrExtractionFailure(self.listing.url, str(e)) from e

    def fetch_detail(self, url: str) -> str:
        """Open a meeting page and return the outer HTML of its metadata table."""
        try:
            self.detail.goto(url)
            self._wait_for_content(self.detail)
            return self.detail.eval_on_selector(self.config.content_selector, "el => el.outerHTML")
        except PWError as e:
            raise NavigationOrExtractionFailure(url, str(e)) from e

    def continuation_token(self) -> Optional[str]:
        """Script bound to the "next" anchor, or None on the last page."""
        try:
            anchor = self.listing.query_selector(self.config.next_selector)
            if anchor is None:
                return None
            return anchor.get_attribute("onclick") or None
        except PWError as e:
            raise NavigationOrExtractionFailure(self.listing.url, str(e)) from e

    def apply_continuation(self, token: str):
        """Replay a captured "next" script on the listing page."""
        try:
            self.listing.eval_on_selector(
                self.config.next_selector, "(el, code) => eval(code)", token
            )
            self._wait_for_content(self.listing)
        except PWError as e:
            raise NavigationOrExtractionFailure(self.listing.url, str(e)) from e

    def advance(self):
        try:
            self.listing.eval_on_selector(self.config.next_selector, "el => el.click()")
            self._wait_for_content(self.listing)
        except PWError as e:
            raise NavigationOrExtractionFailure(self.listing.url, str(e)) from e
