"""
Listing Models.

Pydantic model for a scraped SUUMO listing.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, field_validator


def utc_now() -> datetime:
    """Current UTC time."""
    return datetime.now(timezone.utc)


class Listing(BaseModel):
    """One scraped property, identified by its detail page URL."""

    url: str
    title: str | None = None

    # None means the price could not be extracted
    price: int | None = Field(default=None, ge=0, description="価格 (円)")
    size: float | None = Field(default=None, description="専有面積 (m²)")
    completed: str | None = Field(default=None, description="築年月 (raw text)")
    location: str | None = Field(default=None, description="所在地 (raw text)")

    cached_at: datetime = Field(default_factory=utc_now)

    @field_validator("price", mode="before")
    @classmethod
    def parse_price(cls, v: Any) -> Any:
        """Map the legacy "-" marker and empty values to unknown."""
        if v is None or v == "" or v == "-":
            return None
        return v

    @field_validator("title", "completed", "location", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """Empty strings are stored as missing."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def to_record(self) -> dict:
        """Serialize to a JSON-ready dictionary."""
        return self.model_dump(mode="json")

    def __str__(self) -> str:
        """String representation for console output."""
        price = self.price if self.price is not None else "-"
        return (
            f"- {self.title or '[no text]'} | 価格: {price} | 専有面積: {self.size} | "
            f"築年月: {self.completed} | 所在地: {self.location} | {self.url}"
        )
