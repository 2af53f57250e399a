"""CLI entry point and orchestrator."""

import argparse
import logging
import sys
from collections import Counter

from dotenv import load_dotenv

from .archive import HtmlArchive
from .browser import PortalBrowser
from .config import load_config
from .crawler import ListingCrawler
from .dataset import load_sessions, write_sessions
from .errors import StateCorruption
from .logger import setup_logger
from .models import AssemblySession, UnresolvedRecord
from .parser import parse_reports
from .resolver import resolve_sessions
from .state import CrawlState

logger = logging.getLogger("parliament_archive")


def open_state(config, year):
    return CrawlState.open(config.state_path(year), len(config.crawl.categories))


def run_crawl(config, year="all"):
    """Crawl one page budget of the listing and archive new meetings."""
    state = open_state(config, year)
    archive = HtmlArchive(config.path(config.html_dir))
    browser = PortalBrowser(config.crawl)

    try:
        crawler = ListingCrawler(config, state, archive, browser, year=year)
        summary = crawler.run()
    finally:
        browser.close()

    print(f"\n{'Report URLs':<20} {'Count':>8}")
    print("-" * 29)
    for key in ("total", "unique", "fetched", "failed", "pages", "rotations"):
        print(f"{key:<20} {summary.get(key, 0):>8}")
    return summary


def collect_reports(config, year="all"):
    """Unique reports from the state file, plus archive files it does not list."""
    state = open_state(config, year)
    reports = state.unique_reports()

    if config.parse.include_orphans:
        known = {r.source_url for r in reports}
        archive = HtmlArchive(config.path(config.html_dir))
        orphans = [r for r in archive.iter_reports() if r.source_url not in known]
        if orphans:
            logger.info(f"Found {len(orphans)} archived files missing from the state file")
        reports.extend(orphans)
    return reports


def run_parse(config, year="all"):
    """Parse every archived report and rewrite the session dataset."""
    sessions_path = config.path(config.sessions_file)
    reports = collect_reports(config, year)
    logger.info(f"Parsing {len(reports)} meeting report files")

    records = parse_reports(reports)
    previous = load_sessions(sessions_path)
    resolved = resolve_sessions(records, previous)
    write_sessions(sessions_path, resolved)

    unresolved = sum(1 for r in resolved if isinstance(r, UnresolvedRecord))
    logger.info(
        f"Wrote {len(resolved)} records to {sessions_path} "
        f"({len(resolved) - unresolved} resolved, {unresolved} unresolved)"
    )
    return resolved


def show_stats(config, year="all"):
    state = open_state(config, year)
    summary = state.summary()

    print("\n" + "=" * 50)
    print(f"  CRAWL STATE ({year})")
    print("=" * 50)
    print(f"{'Reports (total)':<30} {summary['total']:>8}")
    print(f"{'Reports (unique)':<30} {summary['unique']:>8}")
    print(f"{'Visited URLs':<30} {len(state.visited_urls):>8}")
    print(f"{'Failed URLs':<30} {len(state.error_urls):>8}")
    print(f"{'Category index':<30} {state.category_index:>8}")

    records = load_sessions(config.path(config.sessions_file))
    if records:
        by_assembly = Counter(r.essemble.english_name for r in records
                              if isinstance(r, AssemblySession))
        unresolved = sum(1 for r in records if isinstance(r, UnresolvedRecord))

        print("\n" + "=" * 50)
        print("  SESSIONS")
        print("=" * 50)
        for name, count in sorted(by_assembly.items()):
            print(f"{name:<40} {count:>8}")
        print("-" * 50)
        print(f"{'Unresolved':<40} {unresolved:>8}")
    print()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Thai parliament meeting archive")
    parser.add_argument("year", nargs="?", default="all",
                        help="Buddhist-era year to crawl, or 'all' (default)")
    parser.add_argument("--parse", action="store_true",
                        help="Parse archived files and rebuild the session dataset")
    parser.add_argument("--stats", action="store_true",
                        help="Show crawl and dataset statistics")
    parser.add_argument("--config", type=str, default="config.yaml",
                        help="Path to config file")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    load_dotenv()
    config = load_config(args.config)
    setup_logger(config.path(config.log_dir),
                 logging.DEBUG if args.verbose else logging.INFO)

    try:
        if args.stats:
            show_stats(config, args.year)
        elif args.parse:
            run_parse(config, args.year)
        else:
            run_crawl(config, args.year)
    except StateCorruption as e:
        logger.error(f"Saved state is corrupt, refusing to continue: {e}")
        sys.exit(2)


if __name__ == "__main__":
    main()
