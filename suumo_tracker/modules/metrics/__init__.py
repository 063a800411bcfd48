"""Daily metrics module."""

from suumo_tracker.modules.metrics.models import DailyMetrics, format_date, parse_date
from suumo_tracker.modules.metrics.repository import MetricsRepository, utc_today

__all__ = [
    "DailyMetrics",
    "MetricsRepository",
    "format_date",
    "parse_date",
    "utc_today",
]
