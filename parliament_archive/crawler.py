"""Resumable crawl of the paginated report listing.

One run walks at most ``max_pages_per_run`` listing pages of the current
search category. After every listing page the "next" script is captured as
the continuation token, so the next run replays it and resumes at the same
position instead of paging through from the start. When a category has no
"next" anchor left, the state rotates to the following category.
"""

import logging
import time
from collections import defaultdict
from enum import Enum
from urllib.parse import urlencode

from .archive import HtmlArchive
from .config import AppConfig
from .errors import NavigationOrExtractionFailure
from .models import ReportUrl
from .state import CrawlState

logger = logging.getLogger("parliament_archive")


class CrawlPhase(Enum):
    LISTING = "listing"
    DISCOVERING = "discovering"
    FETCHING = "fetching"
    PAGINATING = "paginating"
    EXHAUSTED = "exhausted"
    ROTATING = "rotating"
    DONE = "done"


def listing_url(base_url: str, year: str, category: str, submit_label: str) -> str:
    """Search URL for one year scope ("all" for every year) and category.

    The portal expects TIS-620 percent-encoding for Thai query values.
    """
    params = [
        ("as_q", ""), ("as_epq", ""), ("as_oq", ""), ("as_eq", ""), ("ids", ""),
        ("yearno", "" if year == "all" else year),
        ("year", ""), ("num", ""), ("session_id", ""), ("as_filetype", ""),
        ("as_type", category),
        ("Submit", submit_label),
        ("filename", "index"), ("type", "6"), ("formtype", "advancedS"),
    ]
    return f"{base_url}?{urlencode(params, encoding='tis_620')}"


class ListingCrawler:
    def __init__(self, config: AppConfig, state: CrawlState, archive: HtmlArchive,
                 browser, year: str = "all", sleep=time.sleep):
        self.config = config
        self.crawl = config.crawl
        self.state = state
        self.archive = archive
        self.browser = browser
        self.year = year
        self.sleep = sleep
        self.phase = CrawlPhase.LISTING
        self.stats = defaultdict(int)

    def current_url(self) -> str:
        category = self.crawl.categories[self.state.category_index]
        return listing_url(self.crawl.base_url, self.year, category, self.crawl.submit_label)

    def run(self) -> dict:
        """Crawl up to the page budget and return summary counts."""
        try:
            self._crawl_pages()
        except NavigationOrExtractionFailure as e:
            # The listing itself is unreachable; resume from saved state next run.
            logger.error(f"Listing failed, stopping run: {e}")
            self.stats["listing_errors"] += 1
        finally:
            self.phase = CrawlPhase.DONE
            self.state.save()

        summary = dict(self.state.summary())
        summary.update(self.stats)
        return summary

    def _open_listing(self):
        self.phase = CrawlPhase.LISTING
        url = self.current_url()
        logger.info(f"Opening listing (category {self.state.category_index}): {url}")
        self.browser.open_listing(url)

        token = self.state.continuation_token
        if token:
            logger.info(f"Resuming with continuation: {token}")
            self.browser.apply_continuation(token)

    def _crawl_pages(self):
        budget = self.crawl.max_pages_per_run
        self._open_listing()

        while self.stats["pages"] < budget:
            self.phase = CrawlPhase.DISCOVERING
            links = self.browser.detail_links()
            pending = [
                url for url in dict.fromkeys(links)
                if not self.state.is_visited(url) and not self.state.is_error(url)
            ]
            logger.info(
                f"Page {self.stats['pages'] + 1}/{budget}: "
                f"{len(links)} links, {len(pending)} new"
            )

            if pending:
                self.phase = CrawlPhase.FETCHING
                for url in pending:
                    self._fetch(url)
                self.state.save()
                self.sleep(self.crawl.fetch_delay)
            else:
                self.sleep(self.crawl.idle_delay)

            self.stats["pages"] += 1

            token = self.browser.continuation_token()
            if token is None:
                self.phase = CrawlPhase.EXHAUSTED
                logger.info(f"Category {self.state.category_index} exhausted")
                self.phase = CrawlPhase.ROTATING
                self.state.rotate_category()
                self.state.save()
                self.stats["rotations"] += 1
                if self.stats["pages"] < budget:
                    self._open_listing()
                continue

            self.phase = CrawlPhase.PAGINATING
            self.state.set_continuation(token)
            self.state.save()
            if self.stats["pages"] < budget:
                self.browser.advance()

    def _fetch(self, url: str):
        """Archive one meeting page. Failures are recorded, never raised."""
        try:
            logger.debug(f"Visiting {url}")
            content = self.browser.fetch_detail(url)
            path, written = self.archive.save(content, url)
            self.state.upsert_report(ReportUrl(source_url=url, file_path=path))
            self.state.record_visited(url)
            self.state.clear_error(url)
            self.stats["fetched"] += 1
            if not written:
                self.stats["already_archived"] += 1
        except (NavigationOrExtractionFailure, OSError) as e:
            logger.error(f"Failed: {url}: {e}")
            self.state.record_error(url)
            self.stats["failed"] += 1
        finally:
            self.state.save()
