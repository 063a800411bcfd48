"""
Daily metrics aggregation.

Computes the average price per m² of the listings stored by a crawl run,
overall and for each configured location category.
"""

from collections.abc import Iterable
from datetime import datetime, timezone

from loguru import logger

from suumo_tracker.modules.listings import Listing
from suumo_tracker.modules.metrics import DailyMetrics, format_date

aggregator_log = logger.bind(module="Aggregator")

# Category every listing with a ratio belongs to
ALL_CATEGORY = "all"


def price_per_size(listing: Listing) -> float | None:
    """
    Price per m² of a listing.

    Returns:
        price / size, or None when either is missing or size is not positive
    """
    price = listing.price
    size = listing.size
    if not isinstance(price, (int, float)) or isinstance(price, bool):
        return None
    if not isinstance(size, (int, float)) or isinstance(size, bool) or size <= 0:
        return None
    return float(price) / float(size)


def average(values: list[float]) -> float | None:
    """Arithmetic mean, or None for an empty list (never 0)."""
    if not values:
        return None
    return sum(values) / len(values)


def in_category(listing: Listing, substring: str | None) -> bool:
    """Check if a listing's location contains the category substring (None = all)."""
    if substring is None:
        return True
    return bool(listing.location) and substring in listing.location


def category_table(categories: dict[str, str]) -> dict[str, str | None]:
    """Prepend the "all" category to a name -> substring table."""
    table: dict[str, str | None] = {ALL_CATEGORY: None}
    for name, substring in categories.items():
        if name != ALL_CATEGORY:
            table[name] = substring
    return table


def metrics_date(now: datetime | None = None) -> str:
    """UTC calendar day of a run as YYYY_MM_DD."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return format_date(now.date())


def aggregate(
    listings: Iterable[Listing],
    categories: dict[str, str],
    day: str,
) -> DailyMetrics:
    """
    Build the daily metrics record for a set of listings.

    Args:
        listings: Listings written during the crawl run
        categories: Ordered name -> location substring table
        day: Record date (YYYY_MM_DD)

    Returns:
        DailyMetrics with per-category averages and counts
    """
    table = category_table(categories)
    ratios: dict[str, list[float]] = {name: [] for name in table}

    for listing in listings:
        ratio = price_per_size(listing)
        if ratio is None:
            continue
        for name, substring in table.items():
            if in_category(listing, substring):
                ratios[name].append(ratio)

    metrics = DailyMetrics(
        date=day,
        avgs={name: average(values) for name, values in ratios.items()},
        counts={name: len(values) for name, values in ratios.items()},
    )

    for name in table:
        aggregator_log.info(
            f"Average price/size ({name}): {metrics.avgs[name]} ({metrics.counts[name]} items)"
        )
    return metrics
