"""JSON-file ledger of crawl progress for one category scope.

The file keeps the key names of earlier crawls so existing state carries
over::

    {"fileType": 0, "lastClickFunction": "...",
     "allMeetingReportUrls": [{"sourceUrl": ..., "filePath": ...}],
     "visitedUrls": [...], "hasErrorUrls": [...]}

Nothing is flushed automatically; callers ``save()`` after every unit of
crawl work.
"""

import json
import logging
import os
import tempfile
from typing import Dict, List

from .errors import StateCorruption
from .models import ReportUrl

logger = logging.getLogger("parliament_archive")


class CrawlState:
    def __init__(self, path: str, category_count: int = 1):
        if category_count < 1:
            raise ValueError("category_count must be at least 1")
        self.path = path
        self.category_count = category_count
        self.visited_urls: List[str] = []
        self.error_urls: List[str] = []
        self.continuation_token = ""
        self.category_index = 0
        self.reports: List[ReportUrl] = []
        self._visited = set()
        self._errors = set()

    @classmethod
    def open(cls, path: str, category_count: int = 1) -> "CrawlState":
        state = cls(path, category_count)
        state.load()
        return state

    def load(self):
        """Reload from disk. A missing file leaves an empty state."""
        self.visited_urls, self.error_urls, self.reports = [], [], []
        self.continuation_token = ""
        self.category_index = 0

        if os.path.exists(self.path):
            with open(self.path, encoding="utf-8") as f:
                try:
                    raw = json.load(f)
                except (json.JSONDecodeError, UnicodeDecodeError) as e:
                    raise StateCorruption(f"{self.path}: {e}") from e
            self._apply(raw)

        self._visited = set(self.visited_urls)
        self._errors = set(self.error_urls)

    def _apply(self, raw):
        if not isinstance(raw, dict):
            raise StateCorruption(f"{self.path}: expected a JSON object")
        try:
            self.category_index = int(raw.get("fileType", 0)) % self.category_count
            self.continuation_token = raw.get("lastClickFunction") or ""
            self.reports = [ReportUrl.from_dict(r) for r in raw.get("allMeetingReportUrls", [])]
            self.visited_urls = [str(u) for u in raw.get("visitedUrls", [])]
            self.error_urls = [str(u) for u in raw.get("hasErrorUrls", [])]
        except (KeyError, TypeError, ValueError) as e:
            raise StateCorruption(f"{self.path}: {e!r}") from e

    def to_dict(self) -> dict:
        return {
            "fileType": self.category_index,
            "lastClickFunction": self.continuation_token,
            "allMeetingReportUrls": [r.to_dict() for r in self.reports],
            "visitedUrls": list(self.visited_urls),
            "hasErrorUrls": list(self.error_urls),
        }

    def save(self):
        """Rewrite the whole file atomically."""
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".state-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self.to_dict(), f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise

    # -- visited / error ledgers ------------------------------------------

    def record_visited(self, url: str):
        if url not in self._visited:
            self._visited.add(url)
            self.visited_urls.append(url)

    def is_visited(self, url: str) -> bool:
        return url in self._visited

    def record_error(self, url: str):
        if url not in self._errors:
            self._errors.add(url)
            self.error_urls.append(url)

    def clear_error(self, url: str):
        if url in self._errors:
            self._errors.discard(url)
            self.error_urls = [u for u in self.error_urls if u != url]

    def is_error(self, url: str) -> bool:
        return url in self._errors

    # -- reports ------------------------------------------------------------

    def upsert_report(self, report: ReportUrl) -> bool:
        """Append unless an identical entry exists. Returns True if added."""
        if report in self.reports:
            return False
        self.reports.append(report)
        return True

    def unique_reports(self) -> List[ReportUrl]:
        """One report per source URL; the last occurrence wins."""
        latest: Dict[str, ReportUrl] = {}
        for report in self.reports:
            latest.pop(report.source_url, None)
            latest[report.source_url] = report
        return list(latest.values())

    def summary(self) -> dict:
        return {"total": len(self.reports), "unique": len(self.unique_reports())}

    # -- pagination ---------------------------------------------------------

    def set_continuation(self, token: str):
        self.continuation_token = token or ""

    def rotate_category(self) -> int:
        """Move to the next search category and reset its pagination."""
        self.category_index = (self.category_index + 1) % self.category_count
        self.visited_urls, self.error_urls = [], []
        self._visited, self._errors = set(), set()
        self.continuation_token = ""
        logger.info(f"Rotated to category {self.category_index}")
        return self.category_index
