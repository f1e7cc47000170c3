"""Tests for the regex funding extractor and the RSS feed parser."""

from datetime import date

import pytest

from cyberintel.parsers.funding_extractor import (
    ArticleText,
    clean_company_name,
    extract_amount,
    extract_article,
    extract_funding_data,
    extract_investors,
    extract_round_type,
    extract_valuation,
    normalize_round_type,
)
from cyberintel.parsers.news import clean_xml_text, looks_like_funding, parse_feed


# ── Helpers ─────────────────────────────────────────────────────────


def _article(text, url="https://news.example.com/a", published="2024-01-15"):
    return ArticleText(title=text[:40], url=url, source="TestWire", raw_text=text, published_date=published)


FULL_TEXT = (
    "CyberShield AI raises $25 million Series A funding led by Ballistic Ventures, "
    "with participation from Kleiner Perkins and Accel."
)


# ── Field extraction ────────────────────────────────────────────────


@pytest.mark.parametrize("text,expected", [
    ("raised $25 million in new funding", 25_000_000),
    ("a $1.2B round", 1_200_000_000),
    ("secured 40 million dollars from investors", 40_000_000),
    ("closed $3,500,000 in seed money", 3_500_000),
    ("no money mentioned", 0),
])
def test_extract_amount(text, expected):
    assert extract_amount(text) == pytest.approx(expected)


def test_round_type_normalisation():
    assert extract_round_type("closed a Series C funding") == "Series C"
    assert extract_round_type("a pre-seed round from angels") == "Pre-Seed"
    assert extract_round_type("its seed round") == "Seed"
    assert extract_round_type("filed for an IPO") == "IPO"
    assert extract_round_type("nothing here") is None
    assert normalize_round_type("b") == "Series B"
    assert normalize_round_type("bridge") == "Bridge"


def test_extract_investors_splits_lead_and_participants():
    lead, participating = extract_investors(
        "The round was led by Sequoia Capital, with participation from Accel and Lightspeed Venture Partners."
    )
    assert lead == ["Sequoia Capital"]
    assert participating == ["Accel", "Lightspeed Venture Partners"]


def test_extract_valuation():
    assert extract_valuation("now valued at $1.5 billion") == pytest.approx(1_500_000_000)
    assert extract_valuation("at a valuation of $300M") == pytest.approx(300_000_000)
    assert extract_valuation("undisclosed") is None


def test_clean_company_name_drops_legal_suffix():
    assert clean_company_name("Acme Security Inc.") == "Acme Security"
    assert clean_company_name("Blue Fox LLC") == "Blue Fox"


# ── Whole articles ──────────────────────────────────────────────────


def test_extract_article_full_confidence():
    result = extract_article(_article(FULL_TEXT))
    assert result.company_name == "CyberShield AI"
    assert result.funding_amount == 25_000_000
    assert result.round_type == "Series A"
    assert result.lead_investors == ["Ballistic Ventures"]
    assert result.participating_investors == ["Kleiner Perkins", "Accel"]
    assert result.announced_date == date(2024, 1, 15)
    assert result.confidence == 1.0
    assert result.to_dict()["announced_date"] == "2024-01-15"


def test_extract_article_requires_amount():
    assert extract_article(_article("Acme raises money from friends.")) is None


def test_extract_article_parses_feed_dates():
    result = extract_article(_article(FULL_TEXT, published="Mon, 15 Jan 2024 10:00:00 +0000"))
    assert result.announced_date == date(2024, 1, 15)


def test_low_confidence_results_are_dropped():
    articles = [
        _article("Acme raises $5 million."),  # company + amount only: 0.6
        _article(FULL_TEXT, url="https://news.example.com/b"),
    ]
    results = extract_funding_data(articles)
    assert [r.company_name for r in results] == ["CyberShield AI"]


def test_content_hash_depends_on_event_fields():
    a = extract_article(_article(FULL_TEXT))
    b = extract_article(_article(FULL_TEXT, url="https://elsewhere.example.com"))
    c = extract_article(_article(FULL_TEXT.replace("$25", "$26")))
    assert a.content_hash == b.content_hash
    assert a.content_hash != c.content_hash


# ── RSS parsing ─────────────────────────────────────────────────────


RSS = """<?xml version="1.0"?>
<rss><channel>
<item>
  <title><![CDATA[ZeroTrust Labs raises $30 million Series B funding]]></title>
  <link>https://news.example.com/zerotrust</link>
  <pubDate>Tue, 20 Feb 2024 08:00:00 +0000</pubDate>
  <description><![CDATA[<p>The round was led by Index Ventures.</p>]]></description>
</item>
<item>
  <title>Patch Tuesday roundup</title>
  <link>https://news.example.com/patch</link>
  <description>Microsoft fixes 70 vulnerabilities.</description>
</item>
</channel></rss>"""


def test_parse_feed_keeps_funding_items_only():
    articles = parse_feed(RSS, "ExampleNews")
    assert len(articles) == 1
    article = articles[0]
    assert article.url == "https://news.example.com/zerotrust"
    assert article.source == "ExampleNews"
    assert "led by Index Ventures" in article.raw_text
    assert article.published_date.startswith("Tue, 20 Feb 2024")

    extracted = extract_article(article)
    assert extracted.company_name == "ZeroTrust Labs"
    assert extracted.lead_investors == ["Index Ventures"]
    assert extracted.announced_date == date(2024, 2, 20)


def test_clean_xml_text_and_keyword_filter():
    assert clean_xml_text("<![CDATA[<b>Acme</b> &amp; Co]]>") == "Acme & Co"
    assert looks_like_funding("Acme raises $10M")
    assert not looks_like_funding("Acme raises awareness")
