"""Jobs module."""

from suumo_tracker.jobs.crawl import CrawlJob, CrawlResult

__all__ = [
    "CrawlJob",
    "CrawlResult",
]
