"""
Daily Metrics Models.

Pydantic model for the per-day aggregate of price/size ratios.
"""

import re
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from suumo_tracker.modules.listings.models import utc_now

DATE_FORMAT = "%Y_%m_%d"
DATE_PATTERN = re.compile(r"^\d{4}_\d{2}_\d{2}$")


def format_date(day: date) -> str:
    """Format a day as a metrics key date (e.g. 2024_01_15)."""
    return day.strftime(DATE_FORMAT)


def parse_date(value: str) -> date:
    """Parse a metrics key date back into a date."""
    return datetime.strptime(value, DATE_FORMAT).date()


class DailyMetrics(BaseModel):
    """Average price per m² and listing counts by category for one UTC day."""

    date: str = Field(description="Calendar day, YYYY_MM_DD")
    avgs: dict[str, float | None] = Field(default_factory=dict)
    counts: dict[str, int] = Field(default_factory=dict)
    cached_at: datetime = Field(default_factory=utc_now)

    @model_validator(mode="before")
    @classmethod
    def upgrade_flat_averages(cls, data: Any) -> Any:
        """
        Accept records written with flat "<category>_avg" fields.

        Older records look like {"all_avg": 1.0, "koto_avg": 2.0, "counts": {...}}.
        """
        if not isinstance(data, dict) or "avgs" in data:
            return data
        flat = {k[: -len("_avg")]: v for k, v in data.items() if k.endswith("_avg")}
        if not flat:
            return data
        upgraded = {k: v for k, v in data.items() if not k.endswith("_avg")}
        upgraded["avgs"] = flat
        return upgraded

    @field_validator("date", mode="before")
    @classmethod
    def parse_day(cls, v: Any) -> Any:
        """Accept date objects and validate the YYYY_MM_DD form."""
        if isinstance(v, date):
            return format_date(v)
        if not isinstance(v, str) or not DATE_PATTERN.match(v):
            raise ValueError(f"date must be YYYY_MM_DD, got {v!r}")
        parse_date(v)
        return v

    @property
    def day(self):
        """Record date as a date object."""
        return parse_date(self.date)

    def to_record(self) -> dict:
        """Serialize to a JSON-ready dictionary."""
        return self.model_dump(mode="json")
