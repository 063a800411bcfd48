"""Metrics aggregation logic for stored listings."""

from suumo_tracker.aggregation.aggregator import (
    ALL_CATEGORY,
    aggregate,
    average,
    category_table,
    in_category,
    metrics_date,
    price_per_size,
)

__all__ = [
    "ALL_CATEGORY",
    "aggregate",
    "average",
    "category_table",
    "in_category",
    "metrics_date",
    "price_per_size",
]
