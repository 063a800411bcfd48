"""
Unit tests for suumo_tracker/crawler/extractors/detail_extractor.py
"""

import pytest
from bs4 import BeautifulSoup

from suumo_tracker.crawler.extractors import (
    cell_text,
    extract_detail_fields,
    extract_price,
    extract_size,
    parse_amount,
)
from suumo_tracker.crawler.extractors.detail_extractor import (
    price_from_loan_field,
    price_from_page_text,
    price_from_payment_simulation,
    price_from_price_row,
)
from tests.fixtures.pages import overview_page

pytest_plugins = ["tests.fixtures.pages"]


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


# ============================================================
# parse_amount tests
# ============================================================


class TestParseAmount:
    """Tests for parse_amount function."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("3,500万円", 35_000_000),
            ("4280万円", 42_800_000),
            ("1億2,000万円", 120_000_000),
            ("2億円", 200_000_000),
            ("35000000", 35_000_000),
            ("3,500万円～3,900万円", 35_000_000),
            ("1億円～1億2000万円", 100_000_000),
            ("1億2,000万円～1億5,000万円", 120_000_000),
        ],
    )
    def test_amounts(self, text, expected):
        assert parse_amount(text) == expected

    @pytest.mark.parametrize("text", [None, "", "未定", "価格応談"])
    def test_no_number(self, text):
        assert parse_amount(text) is None


# ============================================================
# cell_text tests
# ============================================================


class TestCellText:
    """Tests for cell_text function."""

    def test_collapses_whitespace(self):
        soup = _soup(overview_page({"所在地": "東京都江東区\n   亀戸６"}))
        assert cell_text(soup, "所在地") == "東京都江東区 亀戸６"

    def test_label_substring_match(self):
        soup = _soup(overview_page({"専有面積（壁芯）": "50m2"}))
        assert cell_text(soup, "専有面積") == "50m2"

    def test_header_without_cell_is_skipped(self):
        soup = _soup(
            "<table><tr><th>価格</th></tr><tr><th>価格</th><td>3,000万円</td></tr></table>"
        )
        assert cell_text(soup, "価格") == "3,000万円"

    def test_missing_label(self):
        assert cell_text(_soup(overview_page({"価格": "1万円"})), "所在地") is None


# ============================================================
# Price strategy tests
# ============================================================


class TestPriceStrategies:
    """Tests for each price strategy and the chain order."""

    def test_price_row(self, price_row_only_html):
        assert price_from_price_row(_soup(price_row_only_html)) == 35_000_000

    def test_loan_field(self, loan_field_html):
        assert price_from_loan_field(_soup(loan_field_html)) == 34_800_000

    def test_loan_field_non_numeric(self):
        soup = _soup('<input id="jsiLoanAmount" value="">')
        assert price_from_loan_field(soup) is None

    @pytest.mark.parametrize("value", ["34800000.0", "34,800,000"])
    def test_loan_field_formatted_value(self, value):
        soup = _soup(
            overview_page(
                {"価格": "3,500万円"},
                extra=f'<input type="hidden" id="jsiLoanAmount" value="{value}">',
            )
        )
        assert price_from_loan_field(soup) == 34_800_000
        assert extract_price(soup) == 34_800_000

    def test_payment_simulation(self, payment_simulation_html):
        assert price_from_payment_simulation(_soup(payment_simulation_html)) == 42_800_000

    def test_payment_simulation_short_table(self):
        soup = _soup("<table><tr><td>支払シミュレーション</td></tr></table>")
        assert price_from_payment_simulation(soup) is None

    def test_page_text(self, page_text_only_html):
        assert price_from_page_text(_soup(page_text_only_html)) == 29_800_000

    def test_loan_field_wins_over_price_row(self, loan_field_html):
        assert extract_price(_soup(loan_field_html)) == 34_800_000

    def test_payment_simulation_wins_over_price_row(self, payment_simulation_html):
        assert extract_price(_soup(payment_simulation_html)) == 42_800_000

    def test_price_row_only(self, price_row_only_html):
        assert extract_price(_soup(price_row_only_html)) == 35_000_000

    def test_falls_back_to_page_text(self, page_text_only_html):
        assert extract_price(_soup(page_text_only_html)) == 29_800_000

    def test_no_price(self):
        assert extract_price(_soup("<html><body>価格未定</body></html>")) is None

    def test_custom_strategies(self, loan_field_html):
        assert extract_price(_soup(loan_field_html), [price_from_price_row]) == 35_000_000


# ============================================================
# Field extraction tests
# ============================================================


class TestExtractDetailFields:
    """Tests for extract_detail_fields function."""

    def test_full_page(self, full_overview_html):
        fields = extract_detail_fields(_soup(full_overview_html))
        assert fields == {
            "price": 59_800_000,
            "size": 70.25,
            "completed": "2005年3月",
            "location": "東京都江東区 亀戸６",
        }

    def test_missing_fields_are_none(self, page_text_only_html):
        fields = extract_detail_fields(_soup(page_text_only_html))
        assert fields["price"] == 29_800_000
        assert fields["size"] is None
        assert fields["completed"] is None
        assert fields["location"] is None

    def test_size_without_number(self):
        assert extract_size(_soup(overview_page({"専有面積": "-"}))) is None

    def test_label_override(self):
        soup = _soup(overview_page({"販売価格": "1,000万円", "面積": "20.5m2"}))
        fields = extract_detail_fields(soup, labels={"price": "販売価格", "size": "面積"})
        assert fields["price"] == 10_000_000
        assert fields["size"] == 20.5

    def test_document_not_modified(self, full_overview_html):
        soup = _soup(full_overview_html)
        before = str(soup)
        extract_detail_fields(soup)
        assert str(soup) == before
