"""
Funding news ingestion -- turns extracted funding events into rows.

Pipeline per event:
    1. skip if the article hash or URL was already ingested
    2. skip if the same company already has a round of similar size
       (+-10%) announced within +-7 days
    3. create-or-get the company and its investors, insert the round
    4. remember the article in `scraped_articles`
"""

from __future__ import annotations

import logging
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cyberintel.embeddings import index_companies
from cyberintel.models import Company, FundingRound, ScrapedArticle
from cyberintel.parsers.funding_extractor import ArticleText, ExtractedFunding, extract_funding_data
from cyberintel.schemas import IngestResult
from cyberintel.services.funding import create_round, upsert_company
from cyberintel.utils import normalize_name

logger = logging.getLogger(__name__)

AMOUNT_TOLERANCE = 0.10
MAX_NAME_LENGTH = 256
DATE_TOLERANCE_DAYS = 7


async def is_duplicate(session: AsyncSession, item: ExtractedFunding) -> bool:
    stmt = select(ScrapedArticle.id).where(ScrapedArticle.content_hash == item.content_hash)
    if item.url:
        stmt = select(ScrapedArticle.id).where(
            (ScrapedArticle.content_hash == item.content_hash) | (ScrapedArticle.url == item.url)
        )
    if (await session.execute(stmt.limit(1))).first():
        return True

    window = timedelta(days=DATE_TOLERANCE_DAYS)
    similar = (
        select(FundingRound.id)
        .join(Company, Company.id == FundingRound.company_id)
        .where(
            Company.normalized_name == normalize_name(item.company_name),
            FundingRound.amount_usd >= item.funding_amount * (1 - AMOUNT_TOLERANCE),
            FundingRound.amount_usd <= item.funding_amount * (1 + AMOUNT_TOLERANCE),
            FundingRound.announced_date >= item.announced_date - window,
            FundingRound.announced_date <= item.announced_date + window,
        )
        .limit(1)
    )
    return (await session.execute(similar)).first() is not None


async def ingest_funding_data(session: AsyncSession, items: list[ExtractedFunding]) -> IngestResult:
    """Store extracted events; the caller commits."""
    result = IngestResult(received=len(items), extracted=len(items))

    for item in items:
        if not item.company_name or len(item.company_name) > MAX_NAME_LENGTH or item.funding_amount <= 0:
            result.rejected += 1
            continue

        if await is_duplicate(session, item):
            logger.debug("Duplicate funding event skipped: %s %s", item.company_name, item.round_type)
            result.duplicates += 1
            continue

        company = await upsert_company(session, item.company_name)
        fr = await create_round(
            session,
            company,
            announced_date=item.announced_date,
            round_type=item.round_type,
            amount_usd=item.funding_amount,
            valuation_usd=item.valuation,
            lead_investors=[(name, "VC Firm") for name in item.lead_investors],
            participants=[(name, "VC Firm") for name in item.participating_investors],
            source=item.source or "news",
            source_url=item.url,
            confidence_score=item.confidence,
        )
        session.add(
            ScrapedArticle(
                url=item.url or f"hash:{item.content_hash}",
                title=item.title,
                source=item.source,
                content_hash=item.content_hash,
                published_date=item.announced_date,
                processed=True,
            )
        )
        await session.flush()

        result.processed += 1
        result.round_ids.append(fr.id)
        logger.info(
            "Ingested %s %s $%.0f (confidence=%.2f)",
            item.company_name, item.round_type, item.funding_amount, item.confidence,
        )

    return result


async def ingest_articles(session: AsyncSession, articles: list[ArticleText]) -> IngestResult:
    """Extract funding events from raw articles and ingest them."""
    extracted = extract_funding_data(articles)
    result = await ingest_funding_data(session, extracted)
    result.received = len(articles)
    result.rejected += len(articles) - len(extracted)
    return result


async def index_ingested(session: AsyncSession, result: IngestResult) -> int:
    """Push the companies behind newly ingested rounds into the search index."""
    if not result.round_ids:
        return 0
    company_ids = (
        await session.execute(
            select(FundingRound.company_id).where(FundingRound.id.in_(result.round_ids)).distinct()
        )
    ).scalars().all()
    return await index_companies(session, list(company_ids))
