"""
Breadth-first pagination walker for SUUMO listing index pages.

Collects detail page anchors across numbered result pages, visiting each
page once, with an optional page ceiling and per-page sampling.
"""

import math
import random
import re
from collections import deque
from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup, Tag
from loguru import logger

from suumo_tracker.crawler.fetcher import ThrottledFetcher
from suumo_tracker.crawler.types import DetailLink
from suumo_tracker.errors import FetchError

collector_log = logger.bind(module="Collector")

# Anchors pointing at listing detail pages
DETAIL_LINK_SELECTOR = ".property_unit-title a"

# Anchors that may be numbered pagination links
PAGINATION_SELECTOR = ".pagination_set-nav a, .pagination_set a, a"

PAGE_NUMBER_PATTERN = re.compile(r"^\d+$")

# Listing overview page, relative to a detail page
OVERVIEW_PATH = "bukkengaiyo/"


def normalize_url(url: str) -> str:
    """Normalize a page URL for the visited set (fragment removed)."""
    return urldefrag(url)[0]


def resolve_href(base_url: str, href: str) -> str | None:
    """
    Resolve an href against a page URL.

    Args:
        base_url: URL of the page containing the anchor
        href: Raw href attribute

    Returns:
        Absolute http(s) URL, or None if the href cannot be resolved
    """
    try:
        url = urljoin(base_url, href.strip())
        scheme = urlparse(url).scheme
    except ValueError:
        return None
    if scheme not in ("http", "https"):
        return None
    return normalize_url(url)


def detail_url_for(href: str, base_url: str) -> str:
    """
    Build the overview page URL for a detail anchor.

    Args:
        href: Raw href of the detail anchor
        base_url: Listing index URL the anchor was found under

    Returns:
        Absolute overview URL (".../bukkengaiyo/")
    """
    try:
        detail = urljoin(base_url, href)
        return urljoin(detail, OVERVIEW_PATH)
    except ValueError:
        return f"{href}{OVERVIEW_PATH}"


def sample_size(total: int, rate: float) -> int:
    """Number of anchors to keep from a page: ceil(total * rate) clamped to [0, total]."""
    return max(0, min(total, math.ceil(total * rate)))


def to_detail_link(anchor: Tag) -> DetailLink | None:
    """Convert an anchor into a DetailLink (None if it has no href)."""
    href = anchor.get("href")
    if href is None:
        return None
    return {
        "href": href,
        "text": anchor.get_text(strip=True),
        "title": (anchor.get("title") or "").strip(),
    }


def find_detail_anchors(soup: BeautifulSoup) -> list[Tag]:
    """Find detail page anchors on an index page."""
    return soup.select(DETAIL_LINK_SELECTOR)


def find_page_links(soup: BeautifulSoup, page_url: str) -> list[str]:
    """
    Find numbered pagination links on an index page.

    Args:
        soup: Parsed index page
        page_url: URL of that page, used to resolve relative hrefs

    Returns:
        Absolute page URLs in document order (duplicates removed)
    """
    urls: list[str] = []
    seen: set[str] = set()
    for anchor in soup.select(PAGINATION_SELECTOR):
        href = anchor.get("href")
        if not href or not PAGE_NUMBER_PATTERN.match(anchor.get_text(strip=True)):
            continue
        url = resolve_href(page_url, href)
        if url is None or url in seen:
            continue
        seen.add(url)
        urls.append(url)
    return urls


class LinkCollector:
    """
    Collects detail page links by walking pagination breadth-first.

    The visited set and collected anchors live only for one collect() call.
    """

    def __init__(self, fetcher: ThrottledFetcher, rng: random.Random | None = None):
        """
        Initialize the collector.

        Args:
            fetcher: Throttled fetcher shared with the detail loop
            rng: Random generator used for sampling
        """
        self._fetcher = fetcher
        self._rng = rng or random.Random()

    def collect(
        self,
        start_url: str,
        max_page: int | None = None,
        sample_rate: float = 1.0,
    ) -> list[DetailLink]:
        """
        Walk pagination from a start page and collect detail links.

        Args:
            start_url: First listing index page
            max_page: Maximum number of pages to process (None or <= 0 = all)
            sample_rate: Fraction of detail links kept per page, in [0, 1]

        Returns:
            Detail links deduplicated by raw href (first occurrence wins)
        """
        if max_page is not None and max_page <= 0:
            max_page = None

        visited: set[str] = set()
        queue: deque[str] = deque([normalize_url(start_url)])
        collected: list[Tag] = []
        pages = 0
        processed = 0

        while queue:
            current = queue.popleft()
            if current in visited:
                continue
            visited.add(current)

            pages += 1
            if max_page is not None and pages > max_page:
                collector_log.info(f"Reached max pages limit: {max_page}")
                break
            processed = pages

            try:
                soup = self._fetcher.fetch(current)
            except FetchError as e:
                collector_log.warning(f"Skipping index page: {e}")
                continue

            anchors = self._sample(find_detail_anchors(soup), sample_rate)
            collected.extend(anchors)

            next_pages = [url for url in find_page_links(soup, current) if url not in visited]
            queue.extend(next_pages)

            collector_log.debug(
                f"Page {pages}: {len(anchors)} links, {len(next_pages)} pages queued"
            )

        links = self._dedupe(collected)
        collector_log.info(f"Collected {len(links)} detail links from {processed} pages")
        return links

    def _sample(self, anchors: list[Tag], rate: float) -> list[Tag]:
        """Keep a random subset of a page's anchors, preserving document order."""
        if rate >= 1.0:
            return anchors
        size = sample_size(len(anchors), rate)
        picked = sorted(self._rng.sample(range(len(anchors)), size))
        return [anchors[i] for i in picked]

    def _dedupe(self, anchors: list[Tag]) -> list[DetailLink]:
        """Drop anchors without href and repeated hrefs."""
        links: list[DetailLink] = []
        seen: set[str] = set()
        for anchor in anchors:
            link = to_detail_link(anchor)
            if link is None or link["href"] in seen:
                continue
            seen.add(link["href"])
            links.append(link)
        return links
