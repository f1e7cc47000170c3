"""
Background scheduler for funding news ingestion.

Runs inside the FastAPI process when ENABLE_INGESTION is on. APScheduler
periodically fetches the RSS feeds, extracts funding events and stores the
new ones.
"""

from __future__ import annotations

import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from cyberintel.database import async_session
from cyberintel.parsers.news import fetch_funding_articles
from cyberintel.schemas import IngestResult
from cyberintel.services.ingestion import index_ingested, ingest_articles

logger = logging.getLogger(__name__)


async def run_news_ingestion() -> IngestResult:
    """One full pass: fetch feeds, extract, ingest, commit."""
    articles = await fetch_funding_articles()
    async with async_session() as session:
        result = await ingest_articles(session, articles)
        await session.commit()
        await index_ingested(session, result)
    logger.info(
        "News ingestion: %d articles, %d new rounds, %d duplicates",
        result.received, result.processed, result.duplicates,
    )
    return result


class IngestionScheduler:
    """Wraps an AsyncIOScheduler with a single interval job."""

    def __init__(self):
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._running = False
        self.last_result: Optional[IngestResult] = None

    def start(self, interval_hours: int = 6):
        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self._run,
            IntervalTrigger(hours=interval_hours),
            id="ingest_news",
            name="Funding news ingestion",
            replace_existing=True,
        )
        self._scheduler.start()
        self._running = True
        logger.info("Ingestion scheduler started (every %dh)", interval_hours)

    def stop(self):
        if self._scheduler:
            self._scheduler.shutdown(wait=False)
            self._running = False
            logger.info("Ingestion scheduler stopped")

    @property
    def is_running(self) -> bool:
        return self._running

    async def _run(self):
        try:
            self.last_result = await run_news_ingestion()
        except Exception as e:
            logger.error("Scheduled ingestion failed: %s", e)


_scheduler: Optional[IngestionScheduler] = None


def get_ingestion_scheduler() -> IngestionScheduler:
    global _scheduler
    if _scheduler is None:
        _scheduler = IngestionScheduler()
    return _scheduler
