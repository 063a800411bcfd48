"""
Unit tests for suumo_tracker/crawler/link_collector.py
"""

import random

import pytest
from bs4 import BeautifulSoup

from suumo_tracker.crawler.fetcher import ThrottledFetcher
from suumo_tracker.crawler.link_collector import (
    LinkCollector,
    detail_url_for,
    find_page_links,
    resolve_href,
    sample_size,
)
from tests.fixtures.fakes import FakeSession
from tests.fixtures.pages import index_page

pytest_plugins = ["tests.fixtures.fakes"]

BASE = "https://suumo.jp/ms/chuko/tokyo/sc_koto/"
PAGE2 = BASE + "?page=2"
PAGE3 = BASE + "?page=3"


def _collector(pages: dict[str, str], sleep, errors=None, seed=0):
    session = FakeSession(pages, errors=errors)
    fetcher = ThrottledFetcher(window=0, session=session, sleep=sleep)
    return LinkCollector(fetcher, rng=random.Random(seed)), session


@pytest.fixture
def three_pages() -> dict[str, str]:
    """Three index pages linking to each other, two links each."""
    nav = [("1", BASE), ("2", "?page=2"), ("3", "?page=3")]
    return {
        BASE: index_page(["/ms/chuko/tokyo/sc_koto/nc_1/", "/ms/chuko/tokyo/sc_koto/nc_2/"], nav),
        PAGE2: index_page(["/ms/chuko/tokyo/sc_koto/nc_3/", "/ms/chuko/tokyo/sc_koto/nc_4/"], nav),
        PAGE3: index_page(["/ms/chuko/tokyo/sc_koto/nc_5/", "/ms/chuko/tokyo/sc_koto/nc_6/"], nav),
    }


# ============================================================
# Helper function tests
# ============================================================


class TestHelpers:
    """Tests for URL and sampling helpers."""

    def test_detail_url_for_relative_href(self):
        assert (
            detail_url_for("/ms/chuko/tokyo/sc_koto/nc_75709932/", BASE)
            == "https://suumo.jp/ms/chuko/tokyo/sc_koto/nc_75709932/bukkengaiyo/"
        )

    def test_detail_url_for_absolute_href(self):
        href = "https://suumo.jp/ms/chuko/tokyo/sc_koto/nc_1/"
        assert detail_url_for(href, BASE) == href + "bukkengaiyo/"

    def test_resolve_href_drops_fragment(self):
        assert resolve_href(BASE, "?page=2#top") == PAGE2

    @pytest.mark.parametrize("href", ["javascript:void(0)", "mailto:a@example.com"])
    def test_resolve_href_rejects_non_http(self, href):
        assert resolve_href(BASE, href) is None

    @pytest.mark.parametrize(
        "total,rate,expected",
        [(10, 0.0, 0), (10, 1.0, 10), (10, 0.25, 3), (3, 0.1, 1), (0, 0.5, 0)],
    )
    def test_sample_size(self, total, rate, expected):
        assert sample_size(total, rate) == expected

    def test_find_page_links_numeric_only(self):
        soup = BeautifulSoup(
            index_page([], [("2", "?page=2"), ("次へ", "?page=2"), ("3", "?page=3"), ("2", "?page=2")]),
            "html.parser",
        )
        assert find_page_links(soup, BASE) == [PAGE2, PAGE3]


# ============================================================
# LinkCollector tests
# ============================================================


class TestLinkCollector:
    """Tests for LinkCollector.collect."""

    def test_collects_all_pages_once(self, three_pages, sleep_recorder):
        collector, session = _collector(three_pages, sleep_recorder)

        links = collector.collect(BASE)

        assert sorted(session.calls) == sorted([BASE, PAGE2, PAGE3])
        assert [link["href"] for link in links] == [
            f"/ms/chuko/tokyo/sc_koto/nc_{i}/" for i in range(1, 7)
        ]

    def test_link_fields(self, three_pages, sleep_recorder):
        collector, _ = _collector(three_pages, sleep_recorder)
        first = collector.collect(BASE, max_page=1)[0]
        assert first == {"href": "/ms/chuko/tokyo/sc_koto/nc_1/", "text": "物件0", "title": ""}

    def test_max_page_one(self, three_pages, sleep_recorder):
        collector, session = _collector(three_pages, sleep_recorder)

        links = collector.collect(BASE, max_page=1)

        assert session.calls == [BASE]
        assert len(links) == 2

    def test_max_page_two(self, three_pages, sleep_recorder):
        collector, session = _collector(three_pages, sleep_recorder)
        collector.collect(BASE, max_page=2)
        assert session.calls == [BASE, PAGE2]

    @pytest.mark.parametrize("max_page", [None, 0, -1])
    def test_non_positive_max_page_is_unlimited(self, three_pages, sleep_recorder, max_page):
        collector, session = _collector(three_pages, sleep_recorder)
        collector.collect(BASE, max_page=max_page)
        assert len(session.calls) == 3

    def test_zero_rate_still_paginates(self, three_pages, sleep_recorder):
        collector, session = _collector(three_pages, sleep_recorder)

        assert collector.collect(BASE, sample_rate=0.0) == []
        assert len(session.calls) == 3

    def test_sampling_keeps_document_order(self, sleep_recorder):
        hrefs = [f"/nc_{i}/" for i in range(20)]
        collector, _ = _collector({BASE: index_page(hrefs)}, sleep_recorder, seed=42)

        links = collector.collect(BASE, sample_rate=0.25)

        picked = [link["href"] for link in links]
        assert len(picked) == 5
        assert picked == sorted(picked, key=hrefs.index)

    def test_duplicate_hrefs_first_wins(self, sleep_recorder):
        pages = {
            BASE: index_page(["/nc_1/", "/nc_2/", "/nc_1/"], [("2", "?page=2")]),
            PAGE2: index_page(["/nc_2/", "/nc_3/"]),
        }
        collector, _ = _collector(pages, sleep_recorder)

        links = collector.collect(BASE)

        assert [link["href"] for link in links] == ["/nc_1/", "/nc_2/", "/nc_3/"]
        assert links[0]["text"] == "物件0"

    def test_anchor_without_href_dropped(self, sleep_recorder):
        collector, _ = _collector({BASE: index_page(["/nc_1/", None, "/nc_2/"])}, sleep_recorder)
        assert [link["href"] for link in collector.collect(BASE)] == ["/nc_1/", "/nc_2/"]

    def test_failed_page_is_skipped(self, three_pages, sleep_recorder):
        collector, session = _collector(three_pages, sleep_recorder, errors={PAGE2})

        links = collector.collect(BASE)

        assert PAGE3 in session.calls
        assert len(links) == 4

    def test_failed_start_page(self, sleep_recorder):
        collector, session = _collector({}, sleep_recorder)
        assert collector.collect(BASE) == []
        assert session.calls == [BASE]

    def test_fragment_variants_visited_once(self, sleep_recorder):
        pages = {BASE: index_page(["/nc_1/"], [("1", BASE + "#top"), ("1", BASE)])}
        collector, session = _collector(pages, sleep_recorder)
        collector.collect(BASE)
        assert session.calls == [BASE]
