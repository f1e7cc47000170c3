"""Ingestion endpoint -- push articles in, or trigger an RSS pass."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cyberintel.database import get_session
from cyberintel.parsers.funding_extractor import ArticleText
from cyberintel.parsers.news import fetch_funding_articles
from cyberintel.parsers.scheduler import get_ingestion_scheduler
from cyberintel.schemas import IngestRequest, IngestResult
from cyberintel.security import sanitize_text, sanitize_url, strip_markup
from cyberintel.services.ingestion import index_ingested, ingest_articles

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ingest", tags=["ingest"])


@router.post("/articles", response_model=IngestResult)
async def ingest_article_batch(body: IngestRequest, session: AsyncSession = Depends(get_session)):
    articles = [
        ArticleText(
            title=strip_markup(a.title),
            url=sanitize_url(a.url) or a.url.strip(),
            source=sanitize_text(a.source) or "manual",
            raw_text=strip_markup(a.raw_text),
            published_date=a.published_date,
        )
        for a in body.articles
    ]
    result = await ingest_articles(session, articles)
    await session.commit()
    await index_ingested(session, result)
    logger.info("Article batch: %d received, %d new rounds", result.received, result.processed)
    return result


@router.post("/run", response_model=IngestResult)
async def run_feed_ingestion(session: AsyncSession = Depends(get_session)):
    """Fetch the RSS feeds now and ingest whatever funding news they carry."""
    articles = await fetch_funding_articles()
    result = await ingest_articles(session, articles)
    await session.commit()
    await index_ingested(session, result)
    return result


@router.get("/status")
async def ingestion_status():
    scheduler = get_ingestion_scheduler()
    last = scheduler.last_result
    return {
        "scheduler_running": scheduler.is_running,
        "last_result": last.model_dump() if last else None,
    }
