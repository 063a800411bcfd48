"""
Daily Metrics Repository.

Write-once-per-day metrics records with ranged reads by date.
"""

from datetime import date, datetime, timedelta, timezone

from loguru import logger
from pydantic import ValidationError

from suumo_tracker.connections.redis import RedisConnection, metrics_key
from suumo_tracker.modules.metrics.models import DailyMetrics, format_date

metrics_log = logger.bind(module="Metrics")


def utc_today() -> date:
    """Current UTC calendar day."""
    return datetime.now(timezone.utc).date()


class MetricsRepository:
    """Repository for daily metrics records."""

    def __init__(self, redis: RedisConnection):
        """
        Initialize repository with a Redis connection.

        Args:
            redis: Connected RedisConnection
        """
        self._redis = redis

    def save(self, metrics: DailyMetrics) -> str:
        """
        Save metrics for a day, replacing any record for the same date.

        Args:
            metrics: DailyMetrics record

        Returns:
            Redis key the record was written to
        """
        key = metrics_key(metrics.date)
        self._redis.put(key, metrics.to_record())
        metrics_log.info(f"Saved daily metrics for {metrics.date}")
        return key

    def get(self, day: date | str) -> DailyMetrics | None:
        """
        Get metrics for one day.

        Args:
            day: date or YYYY_MM_DD string

        Returns:
            DailyMetrics, or None if missing or invalid
        """
        date_str = format_date(day) if isinstance(day, date) else day
        record = self._redis.get(metrics_key(date_str))
        if record is None:
            return None
        try:
            return DailyMetrics.model_validate(record)
        except ValidationError as e:
            metrics_log.warning(f"Ignoring invalid metrics for {date_str}: {e}")
            return None

    def today(self, today: date | None = None) -> DailyMetrics | None:
        """Get metrics for today (UTC)."""
        return self.get(today or utc_today())

    def last_days(
        self, days: int, today: date | None = None
    ) -> list[tuple[date, DailyMetrics]]:
        """
        Get metrics for the last N days, today included.

        Args:
            days: Number of days in the range
            today: Last day of the range (defaults to today, UTC)

        Returns:
            (date, DailyMetrics) pairs in ascending date order; days
            without a record are omitted
        """
        end = today or utc_today()
        entries: list[tuple[date, DailyMetrics]] = []
        for offset in range(days - 1, -1, -1):
            day = end - timedelta(days=offset)
            metrics = self.get(day)
            if metrics is not None:
                entries.append((day, metrics))
        return entries
