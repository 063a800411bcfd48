"""
Throttled page fetcher using requests + BeautifulSoup.

Every `window`-th request is followed by a fixed delay. The request
counter belongs to the fetcher instance and is reset at the start of
each crawl run.
"""

import time
from collections.abc import Callable
from typing import Optional

import requests
from bs4 import BeautifulSoup
from loguru import logger

from suumo_tracker.errors import FetchError

fetcher_log = logger.bind(module="Fetcher")


class ThrottledFetcher:
    """
    Sequential HTML fetcher with a static client-side rate limit.

    Shared by the link collector and the detail page loop.
    """

    # HTTP headers to mimic browser request
    DEFAULT_HEADERS = {
        "User-Agent": (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
            "AppleWebKit/605.1.15 (KHTML, like Gecko) "
            "Version/17.3.1 Safari/605.1.15"
        ),
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "ja,en-US;q=0.9,en;q=0.8",
    }

    def __init__(
        self,
        window: int = 10,
        delay: float = 10.0,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the fetcher.

        Args:
            window: Sleep after every `window` requests (<= 0 disables throttling)
            delay: Seconds to sleep when the window is reached
            timeout: Request timeout in seconds
            session: Optional requests session (creates new if not provided)
            sleep: Sleep function, replaceable in tests
        """
        self._window = window
        self._delay = delay
        self._timeout = timeout
        self._session = session
        self._sleep = sleep
        self._request_count = 0

    @property
    def request_count(self) -> int:
        """Number of requests made since the last reset."""
        return self._request_count

    @property
    def session(self) -> requests.Session:
        """Get (or lazily create) the HTTP session."""
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update(self.DEFAULT_HEADERS)
        return self._session

    def reset(self) -> None:
        """Reset the request counter (call at the start of each run)."""
        self._request_count = 0

    def close(self) -> None:
        """Close session."""
        if self._session:
            self._session.close()
            self._session = None

    def fetch_html(self, url: str) -> str:
        """
        Fetch a page and return its decoded HTML.

        Args:
            url: Page URL

        Returns:
            HTML text

        Raises:
            FetchError: On transport errors, timeouts or non-2xx status
        """
        try:
            fetcher_log.debug(f"GET {url}")
            try:
                resp = self.session.get(url, timeout=self._timeout)
            except requests.RequestException as e:
                raise FetchError(url, str(e)) from e

            if not 200 <= resp.status_code < 300:
                raise FetchError(url, f"HTTP {resp.status_code}", status=resp.status_code)

            # requests falls back to ISO-8859-1 when the header has no charset
            if resp.encoding is None or resp.encoding.lower() == "iso-8859-1":
                resp.encoding = resp.apparent_encoding
            return resp.text
        finally:
            self._throttle()

    def fetch(self, url: str) -> BeautifulSoup:
        """
        Fetch a page and parse it.

        Args:
            url: Page URL

        Returns:
            Parsed document

        Raises:
            FetchError: On transport errors, timeouts or non-2xx status
        """
        return BeautifulSoup(self.fetch_html(url), "html.parser")

    def _throttle(self) -> None:
        """Count the request and sleep when the window is reached."""
        self._request_count += 1
        if self._window > 0 and self._request_count % self._window == 0:
            fetcher_log.debug(
                f"{self._request_count} requests made, waiting {self._delay:.1f}s..."
            )
            self._sleep(self._delay)
