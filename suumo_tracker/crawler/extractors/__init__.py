"""
Extractors for the SUUMO crawler.

Pure functions that read listing fields from parsed detail pages.
"""

from suumo_tracker.crawler.extractors.detail_extractor import (
    FIELD_LABELS,
    PRICE_STRATEGIES,
    cell_text,
    extract_completed,
    extract_detail_fields,
    extract_location,
    extract_price,
    extract_size,
    parse_amount,
)

__all__ = [
    "FIELD_LABELS",
    "PRICE_STRATEGIES",
    "cell_text",
    "parse_amount",
    "extract_price",
    "extract_size",
    "extract_completed",
    "extract_location",
    "extract_detail_fields",
]
