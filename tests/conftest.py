"""
Shared pytest fixtures for all tests.
"""

import fnmatch

import pytest

from suumo_tracker.connections.redis import RedisConnection
from suumo_tracker.modules.listings import Listing, ListingRepository
from suumo_tracker.modules.metrics import MetricsRepository


# ============================================================
# In-memory Redis
# ============================================================


class FakeRedisClient:
    """Minimal in-memory stand-in for the redis.Redis calls used by RedisConnection."""

    def __init__(self):
        self.data: dict[str, str] = {}
        self.scan_counts: list[int] = []
        # Yield every matching key twice, as SCAN may during a rehash
        self.repeat_scan = False
        self.closed = False

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        self.closed = True

    def set(self, key: str, value: str) -> bool:
        self.data[key] = value
        return True

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def mget(self, keys: list[str]) -> list[str | None]:
        return [self.data.get(key) for key in keys]

    def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed

    def scan_iter(self, match: str = "*", count: int | None = None):
        self.scan_counts.append(count)
        for key in list(self.data):
            if fnmatch.fnmatchcase(key, match):
                yield key
                if self.repeat_scan:
                    yield key


@pytest.fixture
def fake_redis_client() -> FakeRedisClient:
    """Empty in-memory Redis client."""
    return FakeRedisClient()


@pytest.fixture
def redis_conn(fake_redis_client) -> RedisConnection:
    """RedisConnection backed by the in-memory client."""
    return RedisConnection(client=fake_redis_client, scan_count=10)


@pytest.fixture
def listing_repo(redis_conn) -> ListingRepository:
    """Listing repository on the in-memory store."""
    return ListingRepository(redis_conn)


@pytest.fixture
def metrics_repo(redis_conn) -> MetricsRepository:
    """Metrics repository on the in-memory store."""
    return MetricsRepository(redis_conn)


# ============================================================
# Sample Data Fixtures
# ============================================================


@pytest.fixture
def sample_listing() -> Listing:
    """Sample listing in Koto ward."""
    return Listing(
        url="https://suumo.jp/ms/chuko/tokyo/sc_koto/nc_75709932/bukkengaiyo/",
        title="ライオンズマンション亀戸",
        price=35_000_000,
        size=70.0,
        completed="2005年3月",
        location="東京都江東区亀戸６",
    )


@pytest.fixture
def sample_listings() -> list[Listing]:
    """Listings across categories, including ones without a usable ratio."""
    return [
        Listing(url="https://suumo.jp/a/", price=3000, size=30.0, location="東京都江東区亀戸１"),
        Listing(url="https://suumo.jp/b/", price=6000, size=60.0, location="東京都江東区大島２"),
        Listing(url="https://suumo.jp/c/", price=9000, size=30.0, location="東京都品川区南大井３"),
        Listing(url="https://suumo.jp/d/", price=5000, size=0.0, location="東京都江東区亀戸２"),
        Listing(url="https://suumo.jp/e/", price=None, size=40.0, location="東京都目黒区目黒本町１"),
    ]
