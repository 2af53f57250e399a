"""Content-addressed store for archived meeting-detail fragments.

Files live at ``{root}/{hash % 100}/{hash}.html`` where ``hash`` is the
absolute value of a 32-bit polynomial string hash of the fragment. The hash
matches the one used by earlier crawls, so their archives keep their paths.
"""

import logging
import os
import re
import tempfile
from datetime import datetime, timezone
from typing import Iterator, Optional, Tuple

from .models import ReportUrl

logger = logging.getLogger("parliament_archive")

BUCKETS = 100

_HEADER_RE = re.compile(
    r"\A<!--\s*source:\s*(?P<source>\S+)\s*(?:date:\s*(?P<date>\S+)\s*)?-->",
)


def content_hash(text: str) -> int:
    h = 0
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h & 0x80000000:
        h -= 1 << 32
    return abs(h)


def archive_header(source_url: str, archived_at: Optional[datetime] = None) -> str:
    when = (archived_at or datetime.now(timezone.utc)).isoformat()
    return f"<!--\n  source: {source_url}\n  date: {when}\n-->\n"


class HtmlArchive:
    def __init__(self, root: str):
        self.root = root

    def path_for(self, content: str) -> str:
        h = content_hash(content)
        return os.path.join(self.root, str(h % BUCKETS), f"{h}.html")

    def save(self, content: str, source_url: Optional[str] = None) -> Tuple[str, bool]:
        """Store content. Returns (path, written); a complete copy is left alone."""
        path = self.path_for(content)
        if os.path.exists(path):
            if self._holds(path, content):
                logger.debug(f"HTML already exists at {path}")
                return path, False
            logger.warning(f"Replacing incomplete archive file {path}")

        directory = os.path.dirname(path)
        os.makedirs(directory, exist_ok=True)
        header = archive_header(source_url) if source_url else ""
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".html-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(header + content)
            os.replace(tmp_path, path)
        except BaseException:
            os.unlink(tmp_path)
            raise
        logger.debug(f"Saved HTML to {path}")
        return path, True

    @staticmethod
    def _holds(path: str, content: str) -> bool:
        with open(path, encoding="utf-8", errors="replace") as f:
            return f.read().endswith(content)

    @staticmethod
    def read_header(path: str) -> Tuple[Optional[str], Optional[str]]:
        """Return (source_url, archived_at) from the file's comment header."""
        with open(path, encoding="utf-8") as f:
            head = f.read(2048)
        m = _HEADER_RE.match(head)
        if not m:
            return None, None
        return m.group("source"), m.group("date")

    def iter_files(self) -> Iterator[str]:
        if not os.path.isdir(self.root):
            return
        for bucket in sorted(os.listdir(self.root)):
            bucket_dir = os.path.join(self.root, bucket)
            if not os.path.isdir(bucket_dir):
                continue
            for name in sorted(os.listdir(bucket_dir)):
                if name.endswith(".html"):
                    yield os.path.join(bucket_dir, name)

    def iter_reports(self) -> Iterator[ReportUrl]:
        """Reports recoverable from archive headers alone."""
        for path in self.iter_files():
            source, _ = self.read_header(path)
            if source:
                yield ReportUrl(source_url=source, file_path=path)
