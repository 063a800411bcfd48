"""
Redis Connection Module.

Manages the Redis connection used as a key-value store for listings and
daily metrics records.
"""

import hashlib
import json
from collections.abc import Iterator
from typing import Optional

import redis
from loguru import logger

from config.settings import get_settings
from suumo_tracker.errors import ParseError

redis_log = logger.bind(module="Redis")

# Key prefixes
LISTING_PREFIX = "real_state"
METRICS_PREFIX = "daily_metrics"


def listing_key(url: str) -> str:
    """Generate key for a listing (stable hash of its URL)."""
    return f"{LISTING_PREFIX}:{hashlib.sha256(url.encode()).hexdigest()}"


def metrics_key(date: str) -> str:
    """Generate key for a daily metrics record (e.g. daily_metrics:2024_01_15)."""
    return f"{METRICS_PREFIX}:{date}"


def decode_record(raw: str | None) -> dict:
    """
    Decode a stored JSON payload.

    Raises:
        ParseError: If the payload is not a JSON object
    """
    if raw is None:
        raise ParseError("empty payload")
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise ParseError(f"invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ParseError(f"expected object, got {type(data).__name__}")
    return data


class RedisConnection:
    """Redis connection manager."""

    # Keys deleted per round trip in delete_all
    DELETE_BATCH = 500

    def __init__(self, client: redis.Redis | None = None, scan_count: int | None = None):
        """
        Initialize Redis connection.

        Args:
            client: Existing client to use instead of connecting from settings
            scan_count: COUNT hint for SCAN (defaults to settings)
        """
        self.settings = get_settings().redis
        self._client: Optional[redis.Redis] = client
        self._scan_count = scan_count or self.settings.scan_count

    def connect(self) -> None:
        """Connect to Redis."""
        redis_log.info(f"Connecting to Redis at {self.settings.safe_dsn}")
        self._client = redis.Redis.from_url(self.settings.dsn, decode_responses=True)
        # Test connection
        self._client.ping()
        redis_log.info("Redis connected successfully")

    def close(self) -> None:
        """Close Redis connection."""
        if self._client:
            self._client.close()
            self._client = None
            redis_log.info("Redis connection closed")

    @property
    def client(self) -> redis.Redis:
        """Get Redis client."""
        if not self._client:
            raise RuntimeError("Redis not connected. Call connect() first.")
        return self._client

    # ========== Record Operations ==========

    def put(self, key: str, record: dict) -> None:
        """
        Serialize a record and write it, overwriting any previous value.

        Args:
            key: Redis key
            record: JSON-serializable dictionary
        """
        self.client.set(key, json.dumps(record, ensure_ascii=False, default=str))
        redis_log.debug(f"Saved {key}")

    def get(self, key: str) -> Optional[dict]:
        """
        Read a record.

        Args:
            key: Redis key

        Returns:
            Record dictionary, or None if missing or malformed
        """
        raw = self.client.get(key)
        if raw is None:
            return None
        try:
            return decode_record(raw)
        except ParseError as e:
            redis_log.warning(f"Ignoring malformed record {key}: {e}")
            return None

    def get_many(self, keys: list[str]) -> list[Optional[dict]]:
        """
        Read several records in one round trip.

        Args:
            keys: Redis keys

        Returns:
            Records in key order (None for missing or malformed entries)
        """
        if not keys:
            return []

        records: list[Optional[dict]] = []
        for key, raw in zip(keys, self.client.mget(keys)):
            if raw is None:
                records.append(None)
                continue
            try:
                records.append(decode_record(raw))
            except ParseError as e:
                redis_log.warning(f"Ignoring malformed record {key}: {e}")
                records.append(None)
        return records

    def scan(self, prefix: str) -> Iterator[str]:
        """
        Iterate keys under a prefix using incremental SCAN.

        Args:
            prefix: Key prefix (e.g. "real_state:")

        Yields:
            Matching keys
        """
        yield from self.client.scan_iter(match=f"{prefix}*", count=self._scan_count)

    def delete_all(self, prefix: str) -> int:
        """
        Delete every key under a prefix.

        An empty prefix deletes nothing.

        Args:
            prefix: Key prefix

        Returns:
            Number of deleted keys (0 when nothing matched)
        """
        if not prefix:
            return 0

        deleted = 0
        batch: list[str] = []
        for key in self.scan(prefix):
            batch.append(key)
            if len(batch) >= self.DELETE_BATCH:
                deleted += self.client.delete(*batch)
                batch = []
        if batch:
            deleted += self.client.delete(*batch)

        if deleted:
            redis_log.info(f"Deleted {deleted} keys under {prefix}")
        return deleted


# Singleton instance
_redis: Optional[RedisConnection] = None


def get_redis() -> RedisConnection:
    """Get Redis connection singleton."""
    global _redis
    if _redis is None:
        _redis = RedisConnection()
        _redis.connect()
    return _redis


def close_redis() -> None:
    """Close Redis connection."""
    global _redis
    if _redis:
        _redis.close()
        _redis = None
