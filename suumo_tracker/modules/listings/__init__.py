"""Listings module."""

from suumo_tracker.modules.listings.models import Listing
from suumo_tracker.modules.listings.repository import ListingRepository

__all__ = [
    "Listing",
    "ListingRepository",
]
