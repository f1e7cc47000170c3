"""Semantic search endpoint over the in-memory company vector store."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cyberintel.database import get_session
from cyberintel.embeddings import get_vector_store, load_companies
from cyberintel.models import Company
from cyberintel.schemas import CompanyBrief
from cyberintel.utils import iso_now

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rag-search", tags=["search"])

ACTIONS = ("init", "search", "category", "stats")


async def _ensure_loaded(session: AsyncSession):
    store = get_vector_store()
    if store.count() == 0:
        await load_companies(store, session)
    return store


@router.get("/")
async def rag_search(
    action: str = "search",
    query: str = "",
    limit: int = Query(5, ge=1, le=50),
    category: str = "",
    session: AsyncSession = Depends(get_session),
):
    if action not in ACTIONS:
        raise HTTPException(status_code=400, detail="Invalid action")

    store = get_vector_store()

    if action == "init":
        loaded = await load_companies(store, session)
        return {
            "success": True,
            "message": "Vector store initialized",
            "data": {"companies_loaded": loaded, "timestamp": iso_now()},
        }

    store = await _ensure_loaded(session)

    if action == "category":
        matches = store.search_by_category(category)
        return {
            "success": True,
            "data": {
                "category": category,
                "companies": [cv.to_dict() for cv in matches],
                "count": len(matches),
                "timestamp": iso_now(),
            },
        }

    if action == "stats":
        return {
            "success": True,
            "data": {
                "total_companies": store.count(),
                "categories": store.category_distribution(),
                "embedding_dim": store.dim,
                "timestamp": iso_now(),
            },
        }

    hits = store.search(query, limit=limit)
    ids = [h.company.id for h in hits]
    companies = {}
    if ids:
        rows = (
            await session.execute(
                select(Company).options(selectinload(Company.funding_rounds)).where(Company.id.in_(ids))
            )
        ).scalars().all()
        companies = {c.id: c for c in rows}

    results = []
    for hit in hits:
        company = companies.get(hit.company.id)
        details = None
        if company is not None:
            details = CompanyBrief.model_validate(company).model_dump()
            details["description"] = company.description or ""
            latest = company.funding_rounds[0] if company.funding_rounds else None
            details["latest_round"] = (
                {
                    "id": latest.id,
                    "round_type": latest.round_type,
                    "amount_usd": latest.amount_usd or 0,
                    "announced_date": latest.announced_date.isoformat(),
                }
                if latest else None
            )
        results.append({
            "company": hit.company.to_dict(),
            "score": hit.score,
            "relevance": hit.relevance,
            "company_details": details,
            "match_score": round(hit.score * 100),
        })

    return {
        "success": True,
        "data": {
            "query": query,
            "results": results,
            "total_results": len(results),
            "search_type": "semantic",
            "timestamp": iso_now(),
        },
    }
