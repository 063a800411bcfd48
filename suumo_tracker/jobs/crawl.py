"""
Crawl Job Module.

Runs one crawl: clears cached listings, collects detail links, fetches and
extracts every listing, stores it, then writes today's metrics.
"""

from datetime import datetime, timezone
from typing import TypedDict

from loguru import logger

from config.settings import CrawlerSettings
from suumo_tracker.aggregation import aggregate, metrics_date
from suumo_tracker.crawler.extractors import extract_detail_fields
from suumo_tracker.crawler.fetcher import ThrottledFetcher
from suumo_tracker.crawler.link_collector import LinkCollector, detail_url_for
from suumo_tracker.crawler.types import DetailLink
from suumo_tracker.errors import ConfigError, FetchError
from suumo_tracker.modules.listings import Listing, ListingRepository
from suumo_tracker.modules.metrics import DailyMetrics, MetricsRepository

crawl_log = logger.bind(module="Crawl")


class CrawlResult(TypedDict):
    """Summary of a crawl run."""

    links: int
    saved: int
    failed: int
    metrics: DailyMetrics


class CrawlJob:
    """
    Sequential crawl run.

    Workflow:
    1. Reset the request counter and clear cached listings
    2. Walk pagination and collect detail links
    3. Fetch each overview page, extract fields, save the listing
    4. Aggregate stored listings into today's DailyMetrics record
    """

    def __init__(
        self,
        settings: CrawlerSettings,
        categories: dict[str, str],
        listings: ListingRepository,
        metrics: MetricsRepository,
        fetcher: ThrottledFetcher | None = None,
        collector: LinkCollector | None = None,
        echo=print,
    ):
        """
        Initialize the crawl job.

        Args:
            settings: Crawler settings (start URL, page ceiling, throttling)
            categories: Metrics category table (name -> location substring)
            listings: Listing repository
            metrics: Daily metrics repository
            fetcher: Throttled fetcher (created from settings if not provided)
            collector: Link collector (created around the fetcher if not provided)
            echo: Output function for per-listing lines (unused when quiet)
        """
        if not settings.start_url:
            raise ConfigError("CRAWLER_START_URL is required")

        self._settings = settings
        self._categories = categories
        self._listings = listings
        self._metrics = metrics
        self._fetcher = fetcher or ThrottledFetcher(
            window=settings.throttle_window,
            delay=settings.throttle_delay,
            timeout=settings.timeout,
        )
        self._collector = collector or LinkCollector(self._fetcher)
        self._echo = echo

    def run(
        self,
        max_page: int | None = None,
        sample_rate: float | None = None,
        quiet: bool | None = None,
        now: datetime | None = None,
    ) -> CrawlResult:
        """
        Run the crawl.

        Args:
            max_page: Page ceiling (defaults to settings, <= 0 = all pages)
            sample_rate: Per-page sampling rate (defaults to settings)
            quiet: Suppress per-listing output (defaults to settings)
            now: Run start time, used for the metrics date

        Returns:
            CrawlResult summary
        """
        start = now or datetime.now(timezone.utc)
        day = metrics_date(start)
        max_page = self._settings.max_page if max_page is None else max_page
        sample_rate = self._settings.sample_rate if sample_rate is None else sample_rate
        quiet = self._settings.quiet if quiet is None else quiet

        crawl_log.info("Init...")
        self._fetcher.reset()
        self._listings.clear()

        crawl_log.info("Scanning all item links...")
        links = self._collector.collect(
            self._settings.start_url, max_page=max_page, sample_rate=sample_rate
        )
        crawl_log.info(f"Detail links ({len(links)} found)")

        saved = 0
        failed = 0
        for link in links:
            listing = self.fetch_listing(link)
            if listing is None:
                failed += 1
                continue
            self._listings.save(listing)
            saved += 1
            if not quiet:
                self._echo(str(listing))

        result = aggregate(self._listings.iter_all(), self._categories, day)
        self._metrics.save(result)

        crawl_log.info(f"Crawl finished: {saved} saved, {failed} failed, {len(links)} links")
        return {"links": len(links), "saved": saved, "failed": failed, "metrics": result}

    def fetch_listing(self, link: DetailLink) -> Listing | None:
        """
        Fetch one overview page and build its Listing.

        Args:
            link: Collected detail link

        Returns:
            Listing, or None if the page could not be fetched
        """
        url = detail_url_for(link["href"], self._settings.start_url)
        try:
            soup = self._fetcher.fetch(url)
        except FetchError as e:
            crawl_log.warning(str(e))
            return None

        fields = extract_detail_fields(soup)
        return Listing(
            url=url,
            title=link["text"] or link["title"] or None,
            **fields,
        )
