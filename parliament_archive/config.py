"""YAML config loader."""

import os
from dataclasses import dataclass, field
from typing import List

import yaml

DEFAULT_CATEGORIES = [
    "รายงานการประชุม",
    "บันทึกการประชุม",
    "บันทึกการออกเสียงและการลงมติ",
    "สรุปผลการประชุม",
]


@dataclass
class CrawlConfig:
    base_url: str = "https://msbis.parliament.go.th/ewtadmin/ewt/parliament_report/main_warehouse.php"
    max_pages_per_run: int = 10
    fetch_delay: float = 3.0
    idle_delay: float = 5.0
    headless: bool = True
    slow_mo_ms: int = 10
    navigation_timeout_ms: int = 60000
    link_label: str = "ดูเอกสารที่เกี่ยวข้องทั้งหมด"
    content_selector: str = "#show_datawarehouse > table"
    next_selector: str = "a[href='##S']"
    submit_label: str = "ค้นหา.."
    categories: List[str] = field(default_factory=lambda: list(DEFAULT_CATEGORIES))


@dataclass
class ParseConfig:
    include_orphans: bool = True


@dataclass
class AppConfig:
    data_dir: str = "."
    html_dir: str = "downloaded-html"
    state_file: str = "html-scraper-states-{year}.json"
    sessions_file: str = "meeting-sessions.json"
    log_dir: str = "logs"
    crawl: CrawlConfig = field(default_factory=CrawlConfig)
    parse: ParseConfig = field(default_factory=ParseConfig)

    def path(self, name: str) -> str:
        return os.path.join(self.data_dir, name)

    def state_path(self, year: str = "all") -> str:
        return self.path(self.state_file.format(year=year))


def load_config(config_path: str = "config.yaml") -> AppConfig:
    with open(config_path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    crawl_raw = raw.get("crawl", {})
    crawl = CrawlConfig(**{k: v for k, v in crawl_raw.items() if k in CrawlConfig.__dataclass_fields__})

    parse_raw = raw.get("parse", {})
    parse = ParseConfig(**{k: v for k, v in parse_raw.items() if k in ParseConfig.__dataclass_fields__})

    headless = os.environ.get("ARCHIVE_HEADLESS")
    if headless is not None:
        crawl.headless = headless not in ("0", "false", "no")

    return AppConfig(
        data_dir=os.environ.get("ARCHIVE_DATA_DIR", raw.get("data_dir", ".")),
        html_dir=raw.get("html_dir", "downloaded-html"),
        state_file=raw.get("state_file", "html-scraper-states-{year}.json"),
        sessions_file=raw.get("sessions_file", "meeting-sessions.json"),
        log_dir=raw.get("log_dir", "logs"),
        crawl=crawl,
        parse=parse,
    )
