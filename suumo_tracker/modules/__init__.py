"""Modules package - Domain modules with repository pattern."""

from suumo_tracker.modules.listings import Listing, ListingRepository
from suumo_tracker.modules.metrics import DailyMetrics, MetricsRepository

__all__ = [
    # Listings
    "Listing",
    "ListingRepository",
    # Metrics
    "DailyMetrics",
    "MetricsRepository",
]
