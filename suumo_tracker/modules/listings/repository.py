"""
Listing Repository.

Data access layer for listings stored in Redis.
"""

from collections.abc import Iterator

from loguru import logger
from pydantic import ValidationError

from suumo_tracker.connections.redis import LISTING_PREFIX, RedisConnection, listing_key
from suumo_tracker.modules.listings.models import Listing

listings_log = logger.bind(module="Listings")


class ListingRepository:
    """Repository for listing records."""

    # Keys fetched per MGET when reading all listings
    BATCH_SIZE = 200

    def __init__(self, redis: RedisConnection):
        """
        Initialize repository with a Redis connection.

        Args:
            redis: Connected RedisConnection
        """
        self._redis = redis
        self._prefix = f"{LISTING_PREFIX}:"

    def save(self, listing: Listing) -> str:
        """
        Save a listing, overwriting any record for the same URL.

        Args:
            listing: Listing to store

        Returns:
            Redis key the listing was written to
        """
        key = listing_key(listing.url)
        self._redis.put(key, listing.to_record())
        return key

    def get(self, url: str) -> Listing | None:
        """Get a listing by URL (None if missing or invalid)."""
        return self._validate(self._redis.get(listing_key(url)))

    def iter_all(self) -> Iterator[Listing]:
        """
        Iterate over all stored listings.

        Keys are scanned incrementally and read in batches; invalid
        records are skipped. SCAN may return a key more than once, so
        each key is read once.
        """
        batch: list[str] = []
        for key in self._unique_keys():
            batch.append(key)
            if len(batch) >= self.BATCH_SIZE:
                yield from self._load(batch)
                batch = []
        if batch:
            yield from self._load(batch)

    def all(self) -> list[Listing]:
        """Get all stored listings."""
        return list(self.iter_all())

    def count(self) -> int:
        """Count stored listings."""
        return sum(1 for _ in self._unique_keys())

    def clear(self) -> int:
        """
        Delete every stored listing.

        Returns:
            Number of deleted listings
        """
        deleted = self._redis.delete_all(self._prefix)
        listings_log.info(f"Cleared {deleted} cached listings")
        return deleted

    def _unique_keys(self) -> Iterator[str]:
        """Scan listing keys, skipping repeats."""
        seen: set[str] = set()
        for key in self._redis.scan(self._prefix):
            if key in seen:
                continue
            seen.add(key)
            yield key

    def _load(self, keys: list[str]) -> Iterator[Listing]:
        """Read and validate a batch of keys."""
        for record in self._redis.get_many(keys):
            listing = self._validate(record)
            if listing is not None:
                yield listing

    def _validate(self, record: dict | None) -> Listing | None:
        """Convert a raw record into a Listing, or None if its shape is invalid."""
        if record is None:
            return None
        try:
            return Listing.model_validate(record)
        except ValidationError as e:
            listings_log.warning(f"Skipping invalid listing {record.get('url', '?')}: {e}")
            return None
