"""
Raw data type definitions for the SUUMO crawler.

These TypedDicts define the structure of data extracted from SUUMO pages.
Values are kept as close to the HTML as possible.
"""

from typing import TypedDict


class DetailLink(TypedDict):
    """
    Detail page anchor collected from a listing index page.

    Attributes:
        href: Raw href attribute (unresolved)
        text: Stripped anchor text
        title: Anchor title attribute (empty if missing)
    """

    href: str
    text: str
    title: str


class DetailFields(TypedDict):
    """
    Fields extracted from a listing overview (bukkengaiyo) page.

    Attributes:
        price: Price in yen, or None if no strategy matched
        size: Exclusive area in m² (専有面積), or None
        completed: Completion date text (築年月), or None
        location: Address text (所在地), or None
    """

    price: int | None
    size: float | None
    completed: str | None
    location: str | None
