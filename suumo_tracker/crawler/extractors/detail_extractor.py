"""
Detail page field extractor for the SUUMO crawler.

Extracts price, exclusive area, completion date and address from listing
overview pages. Markup differs between listings, so each field is read
through an ordered chain of strategies; the first one returning a value
wins. All functions are pure and never modify the document.
"""

import re
from collections.abc import Callable
from functools import partial

from bs4 import BeautifulSoup

from suumo_tracker.crawler.types import DetailFields

# Row labels in the overview table
FIELD_LABELS = {
    "price": "価格",
    "size": "専有面積",
    "completed": "築年月",
    "location": "所在地",
}

# Hidden loan simulator input holding the price in yen
LOAN_AMOUNT_SELECTOR = "#jsiLoanAmount"

# Cell marking the payment simulation block; the price sits in the same table
PAYMENT_SIMULATION_MARKER = "支払シミュレーション"

MAN = 10_000  # 万
OKU = 100_000_000  # 億

_WHITESPACE = re.compile(r"\s+")
_NUMBER = re.compile(r"[0-9][0-9,.]*")
_OKU_AMOUNT = re.compile(r"([0-9][0-9,.]*)\s*億(?:\s*([0-9][0-9,.]*)\s*万)?")
_PAGE_MAN_YEN = re.compile(r"([0-9][0-9,.]*)万円")
_DECIMAL = re.compile(r"\d+(?:\.\d+)?")

PriceStrategy = Callable[[BeautifulSoup], int | None]


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace into single spaces and strip."""
    return _WHITESPACE.sub(" ", text).strip()


def parse_number(text: str) -> float | None:
    """Parse a number with thousands separators ("3,500" -> 3500.0)."""
    try:
        return float(text.replace(",", ""))
    except ValueError:
        return None


def parse_amount(text: str | None) -> int | None:
    """
    Parse a price text into yen.

    Args:
        text: Price text (e.g. "3,500万円", "1億2,000万円", "35000000")

    Returns:
        Amount in yen, or None if the text holds no number

    Examples:
        >>> parse_amount("3,500万円")
        35000000
        >>> parse_amount("1億2000万円")
        120000000
    """
    if not text:
        return None

    oku = _OKU_AMOUNT.search(text)
    if oku:
        total = (parse_number(oku.group(1)) or 0) * OKU
        if oku.group(2):
            total += (parse_number(oku.group(2)) or 0) * MAN
        return int(round(total))

    match = _NUMBER.search(text)
    if not match:
        return None
    value = parse_number(match.group(0))
    if value is None:
        return None
    if "万" in text:
        value *= MAN
    return int(round(value))


def cell_text(soup: BeautifulSoup, label: str) -> str | None:
    """
    Read the data cell next to a labelled header cell.

    Args:
        soup: Parsed detail page
        label: Substring of the header text (e.g. "専有面積")

    Returns:
        Whitespace-collapsed text of the adjacent <td>, or None if no
        header contains the label
    """
    for th in soup.find_all("th"):
        if label not in collapse_whitespace(th.get_text()):
            continue
        td = th.find_next_sibling("td")
        if td is None:
            continue
        return collapse_whitespace(td.get_text())
    return None


# ============================================================
# Price strategies (in priority order)
# ============================================================


def price_from_loan_field(soup: BeautifulSoup) -> int | None:
    """Price from the hidden loan simulator input."""
    field = soup.select_one(LOAN_AMOUNT_SELECTOR)
    if field is None:
        return None
    value = parse_number((field.get("value") or "").strip())
    if value is None or value < 0:
        return None
    return int(value)


def price_from_payment_simulation(soup: BeautifulSoup) -> int | None:
    """Price from the 3rd row, 1st cell of the table holding the payment simulation."""
    marker = soup.find(
        "td", string=lambda s: s is not None and PAYMENT_SIMULATION_MARKER in s
    )
    if marker is None:
        # Marker text may be split across child elements
        for td in soup.find_all("td"):
            if PAYMENT_SIMULATION_MARKER in collapse_whitespace(td.get_text()):
                marker = td
                break
    if marker is None:
        return None

    table = marker.find_parent("table")
    if table is None:
        return None
    rows = table.find_all("tr")
    if len(rows) < 3:
        return None
    cell = rows[2].find("td")
    if cell is None:
        return None
    return parse_amount(cell.get_text(strip=True))


def price_from_price_row(soup: BeautifulSoup, label: str = FIELD_LABELS["price"]) -> int | None:
    """Price from the cell next to the 価格 header."""
    return parse_amount(cell_text(soup, label))


def price_from_page_text(soup: BeautifulSoup) -> int | None:
    """Price from the first "<number>万円" anywhere in the page source."""
    match = _PAGE_MAN_YEN.search(str(soup))
    if not match:
        return None
    value = parse_number(match.group(1))
    if value is None:
        return None
    return int(round(value * MAN))


PRICE_STRATEGIES: list[PriceStrategy] = [
    price_from_loan_field,
    price_from_payment_simulation,
    price_from_price_row,
    price_from_page_text,
]


def extract_price(
    soup: BeautifulSoup, strategies: list[PriceStrategy] | None = None
) -> int | None:
    """
    Extract the price by trying each strategy in order.

    Args:
        soup: Parsed detail page
        strategies: Strategy chain (defaults to PRICE_STRATEGIES)

    Returns:
        Price in yen, or None if every strategy failed
    """
    for strategy in strategies or PRICE_STRATEGIES:
        price = strategy(soup)
        if price is not None:
            return price
    return None


# ============================================================
# Other fields
# ============================================================


def extract_size(soup: BeautifulSoup, label: str = FIELD_LABELS["size"]) -> float | None:
    """Exclusive area in m² (leading decimal of the 専有面積 cell)."""
    text = cell_text(soup, label)
    if not text:
        return None
    match = _DECIMAL.search(text)
    if not match:
        return None
    return float(match.group(0))


def extract_completed(
    soup: BeautifulSoup, label: str = FIELD_LABELS["completed"]
) -> str | None:
    """Completion date text (築年月)."""
    return cell_text(soup, label) or None


def extract_location(
    soup: BeautifulSoup, label: str = FIELD_LABELS["location"]
) -> str | None:
    """Address text (所在地)."""
    return cell_text(soup, label) or None


def extract_detail_fields(
    soup: BeautifulSoup, labels: dict[str, str] | None = None
) -> DetailFields:
    """
    Extract all listing fields from a detail page.

    Args:
        soup: Parsed detail page
        labels: Overrides for FIELD_LABELS

    Returns:
        DetailFields dictionary (missing fields are None)
    """
    table = {**FIELD_LABELS, **(labels or {})}

    strategies = [
        partial(price_from_price_row, label=table["price"])
        if strategy is price_from_price_row
        else strategy
        for strategy in PRICE_STRATEGIES
    ]

    return {
        "price": extract_price(soup, strategies),
        "size": extract_size(soup, table["size"]),
        "completed": extract_completed(soup, table["completed"]),
        "location": extract_location(soup, table["location"]),
    }
