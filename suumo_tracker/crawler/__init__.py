"""Crawler modules."""

from suumo_tracker.crawler.fetcher import ThrottledFetcher
from suumo_tracker.crawler.link_collector import LinkCollector, detail_url_for
from suumo_tracker.crawler.types import DetailFields, DetailLink

__all__ = [
    # Types
    "DetailLink",
    "DetailFields",
    # Fetching
    "ThrottledFetcher",
    "LinkCollector",
    "detail_url_for",
]
