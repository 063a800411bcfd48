"""
Error types.

Per-item failures (FetchError, ParseError) are logged and skipped by callers.
ConfigError is fatal at startup.
"""


class TrackerError(Exception):
    """Base error for the tracker."""


class FetchError(TrackerError):
    """HTTP request failed (transport error, timeout or non-2xx status)."""

    def __init__(self, url: str, reason: str, status: int | None = None):
        self.url = url
        self.reason = reason
        self.status = status
        super().__init__(f"Failed to fetch {url}: {reason}")


class ParseError(TrackerError):
    """Stored record or href could not be parsed."""


class ConfigError(TrackerError):
    """Required configuration is missing or invalid."""
