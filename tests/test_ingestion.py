"""Tests for funding news ingestion: dedup rules, the ingest endpoint and the scheduler."""

from datetime import date

from sqlalchemy import func, select

from cyberintel.models import Company, FundingRound, Investor, ScrapedArticle
from cyberintel.parsers import scheduler as scheduler_module
from cyberintel.parsers.funding_extractor import ArticleText, ExtractedFunding
from cyberintel.parsers.scheduler import IngestionScheduler, run_news_ingestion
from cyberintel.services.ingestion import ingest_articles, ingest_funding_data


# ── Helpers ─────────────────────────────────────────────────────────


ARTICLE_TEXT = (
    "Sentra Labs raises $40 million Series B funding led by Bessemer Venture Partners, "
    "with participation from Accel."
)


def _article(url="https://news.example.com/sentra", text=ARTICLE_TEXT, published="2024-02-01"):
    return ArticleText(title="Sentra funding", url=url, source="TestWire", raw_text=text, published_date=published)


def _event(amount=40_000_000, announced=date(2024, 2, 1), url="https://news.example.com/other"):
    return ExtractedFunding(
        company_name="Sentra Labs",
        funding_amount=amount,
        currency="USD",
        round_type="Series B",
        lead_investors=["Bessemer Venture Partners"],
        announced_date=announced,
        confidence=0.8,
        source="OtherWire",
        url=url,
    )


async def _count(session, model):
    return (await session.execute(select(func.count(model.id)))).scalar()


# ── Service ─────────────────────────────────────────────────────────


async def test_ingest_article_creates_company_round_and_investors(session):
    result = await ingest_articles(session, [_article()])
    await session.commit()

    assert result.received == 1
    assert result.processed == 1
    assert result.duplicates == 0
    assert len(result.round_ids) == 1

    company = (await session.execute(select(Company).where(Company.name == "Sentra Labs"))).scalar_one()
    assert company.total_funding == 40_000_000
    assert company.current_stage == "series-b"

    fr = await session.get(FundingRound, result.round_ids[0])
    assert fr.lead_investor == "Bessemer Venture Partners"
    assert fr.source == "TestWire"
    assert fr.confidence_score == 1.0
    assert await _count(session, Investor) == 2
    assert await _count(session, ScrapedArticle) == 1


async def test_same_article_twice_is_a_duplicate(session):
    await ingest_articles(session, [_article()])
    result = await ingest_articles(session, [_article()])
    assert result.processed == 0
    assert result.duplicates == 1
    assert await _count(session, FundingRound) == 1


async def test_similar_round_from_another_source_is_a_duplicate(session):
    await ingest_articles(session, [_article()])
    # +5% amount, 3 days later, different URL
    result = await ingest_funding_data(session, [_event(amount=42_000_000, announced=date(2024, 2, 4))])
    assert result.duplicates == 1
    assert await _count(session, FundingRound) == 1


async def test_rounds_outside_tolerance_are_new(session):
    await ingest_articles(session, [_article()])
    result = await ingest_funding_data(session, [
        _event(amount=60_000_000, url="https://a.example.com"),
        _event(announced=date(2024, 3, 1), url="https://b.example.com"),
    ])
    assert result.processed == 2
    assert await _count(session, FundingRound) == 3
    company = (await session.execute(select(Company).where(Company.name == "Sentra Labs"))).scalar_one()
    assert company.total_funding == 140_000_000


async def test_articles_without_funding_are_rejected(session):
    result = await ingest_articles(session, [
        _article(url="https://news.example.com/x", text="Vendor publishes annual threat report."),
        _article(),
    ])
    assert result.received == 2
    assert result.rejected == 1
    assert result.processed == 1


async def test_invalid_events_are_rejected(session):
    result = await ingest_funding_data(session, [_event(amount=0)])
    assert result.rejected == 1
    assert result.processed == 0


async def test_overlong_company_names_are_rejected(session):
    event = _event()
    event.company_name = "Sentra " * 50
    result = await ingest_funding_data(session, [event])
    assert result.rejected == 1
    assert await _count(session, Company) == 0


# ── Endpoints ───────────────────────────────────────────────────────


async def test_ingest_endpoint(client):
    payload = {"articles": [{
        "title": "Sentra funding",
        "url": "https://news.example.com/sentra",
        "source": "TestWire",
        "published_date": "2024-02-01",
        "raw_text": ARTICLE_TEXT,
    }]}
    resp = await client.post("/ingest/articles", json=payload)
    assert resp.status_code == 200
    body = resp.json()
    assert body["processed"] == 1

    resp = await client.post("/ingest/articles", json=payload)
    assert resp.json()["duplicates"] == 1

    rounds = (await client.get("/funding-rounds/", params={"search": "sentra"})).json()
    assert rounds["pagination"]["total"] == 1
    assert rounds["data"][0]["source"] == "TestWire"


async def test_ingest_endpoint_keeps_article_words(client):
    payload = {"articles": [{
        "title": "<b>Transcript Security</b> funding",
        "url": "https://news.example.com/transcript",
        "raw_text": "Transcript Security raised $20 million in a Series A round led by Acme Ventures.",
    }]}
    resp = await client.post("/ingest/articles", json=payload)
    assert resp.json()["processed"] == 1

    names = [c["name"] for c in (await client.get("/companies/")).json()]
    assert names == ["Transcript Security"]


async def test_ingested_company_joins_loaded_search_index(client, seeded):
    init = (await client.get("/rag-search/", params={"action": "init"})).json()
    assert init["data"]["companies_loaded"] == 8

    payload = {"articles": [{"url": "https://news.example.com/sentra", "raw_text": ARTICLE_TEXT}]}
    assert (await client.post("/ingest/articles", json=payload)).json()["processed"] == 1

    stats = (await client.get("/rag-search/", params={"action": "stats"})).json()["data"]
    assert stats["total_companies"] == 9


async def test_ingest_endpoint_validates_body(client):
    resp = await client.post("/ingest/articles", json={"articles": []})
    assert resp.status_code == 422


async def test_ingest_status(client):
    resp = await client.get("/ingest/status")
    assert resp.status_code == 200
    assert resp.json()["scheduler_running"] is False


# ── Scheduler ───────────────────────────────────────────────────────


async def test_run_news_ingestion_uses_fetched_articles(db, monkeypatch):
    async def fake_fetch():
        return [_article()]

    monkeypatch.setattr(scheduler_module, "fetch_funding_articles", fake_fetch)
    result = await run_news_ingestion()
    assert result.processed == 1


async def test_scheduler_start_stop(db):
    sched = IngestionScheduler()
    assert sched.is_running is False
    sched.start(interval_hours=1)
    assert sched.is_running is True
    sched.stop()
    assert sched.is_running is False
