"""Funding rounds endpoint -- paginated list, create, detail, CSV export."""

from __future__ import annotations

import logging
import math
from datetime import date
from typing import Optional

import pandas as pd
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import Response
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cyberintel.database import get_session
from cyberintel.embeddings import index_companies
from cyberintel.models import Company, FundingRound, FundingRoundInvestor, Investor
from cyberintel.schemas import FundingRoundCreate, FundingRoundList, FundingRoundOut, Pagination
from cyberintel.security import audit_log, client_ip, sanitize_text, sanitize_url, validate_company_data
from cyberintel.services.funding import (
    create_round,
    find_company,
    load_round,
    round_load_options,
    round_to_schema,
    upsert_company,
)
from cyberintel.utils import split_list

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/funding-rounds", tags=["funding-rounds"])


def _filtered_query(
    search: Optional[str],
    round_type: Optional[str],
    country: Optional[str],
    investor: Optional[str],
    min_amount: Optional[float],
    max_amount: Optional[float],
    start_date: Optional[date],
    end_date: Optional[date],
):
    stmt = select(FundingRound).join(Company, Company.id == FundingRound.company_id)
    if search:
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(Company.name.ilike(pattern) | FundingRound.lead_investor.ilike(pattern))
    if round_type and round_type != "all":
        stmt = stmt.where(FundingRound.round_type == round_type)
    if country and country != "all":
        stmt = stmt.where(Company.country == country)
    if investor:
        stmt = stmt.where(
            FundingRound.investor_links.any(
                FundingRoundInvestor.investor.has(Investor.name.ilike(f"%{investor.strip()}%"))
            )
        )
    if min_amount is not None:
        stmt = stmt.where(FundingRound.amount_usd >= min_amount)
    if max_amount is not None:
        stmt = stmt.where(FundingRound.amount_usd <= max_amount)
    if start_date:
        stmt = stmt.where(FundingRound.announced_date >= start_date)
    if end_date:
        stmt = stmt.where(FundingRound.announced_date <= end_date)
    return stmt


@router.get("/", response_model=FundingRoundList)
async def list_funding_rounds(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    round_type: Optional[str] = None,
    country: Optional[str] = None,
    investor: Optional[str] = None,
    min_amount: Optional[float] = Query(None, ge=0),
    max_amount: Optional[float] = Query(None, ge=0),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    session: AsyncSession = Depends(get_session),
):
    stmt = _filtered_query(search, round_type, country, investor, min_amount, max_amount, start_date, end_date)
    total = (await session.execute(select(func.count()).select_from(stmt.subquery()))).scalar() or 0

    rows = (
        await session.execute(
            stmt.options(*round_load_options())
            .order_by(FundingRound.announced_date.desc(), FundingRound.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
    ).scalars().all()

    return FundingRoundList(
        data=[round_to_schema(r) for r in rows],
        pagination=Pagination(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit)),
    )


@router.get("/export")
async def export_funding_rounds(
    search: Optional[str] = None,
    round_type: Optional[str] = None,
    country: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    """CSV download, one row per round."""
    stmt = _filtered_query(search, round_type, country, None, None, None, None, None)
    rows = (
        await session.execute(
            stmt.options(*round_load_options()).order_by(FundingRound.announced_date.desc(), FundingRound.id.desc())
        )
    ).scalars().all()

    frame = pd.DataFrame(
        [
            {
                "company": r.company.name,
                "country": r.company.country or "",
                "category": r.company.primary_category or "",
                "round_type": r.round_type,
                "amount_usd": r.amount_usd or 0,
                "announced_date": r.announced_date.isoformat(),
                "lead_investor": r.lead_investor or "",
                "investors": "; ".join(sorted(link.investor.name for link in r.investor_links)),
                "source": r.source or "",
            }
            for r in rows
        ],
        columns=[
            "company", "country", "category", "round_type", "amount_usd",
            "announced_date", "lead_investor", "investors", "source",
        ],
    )
    return Response(
        content=frame.to_csv(index=False),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="funding-rounds-{date.today().isoformat()}.csv"'},
    )


@router.get("/{round_id}", response_model=FundingRoundOut)
async def get_funding_round(round_id: int, session: AsyncSession = Depends(get_session)):
    fr = await load_round(session, round_id)
    if fr is None:
        raise HTTPException(status_code=404, detail="Funding round not found")
    return round_to_schema(fr)


@router.post("/", response_model=FundingRoundOut, status_code=201)
async def create_funding_round(
    body: FundingRoundCreate,
    request: Request,
    session: AsyncSession = Depends(get_session),
):
    is_valid, errors, clean = validate_company_data({
        "name": body.company_name,
        "website": body.website,
        "description": body.description,
        "country": body.country,
        "city": body.city,
        "founded": body.founded_year,
    })
    if not is_valid:
        audit_log.record(
            "validation", "Rejected funding round input",
            ip=client_ip(request), severity="medium", path=request.url.path, method="POST",
            status=400, details={"errors": errors},
        )
        raise HTTPException(status_code=400, detail={"message": "Invalid company data", "errors": errors})

    existing = await find_company(session, clean["name"])
    if existing is not None:
        duplicate = (
            await session.execute(
                select(FundingRound.id).where(
                    FundingRound.company_id == existing.id,
                    FundingRound.announced_date == body.announced_date,
                    FundingRound.round_type == body.round_type,
                )
            )
        ).first()
        if duplicate:
            raise HTTPException(status_code=409, detail="Funding round already exists")

    company = await upsert_company(
        session,
        clean["name"],
        website=clean.get("website"),
        description=clean.get("description"),
        country=clean.get("country"),
        city=clean.get("city"),
        founded_year=clean.get("founded"),
        employee_range=sanitize_text(body.employee_range) if body.employee_range else None,
        primary_category=sanitize_text(body.primary_category) if body.primary_category else None,
    )

    investor_types = {inv.name.strip(): inv.investor_type for inv in body.investors}
    lead_names = split_list(sanitize_text(body.lead_investor))
    fr = await create_round(
        session,
        company,
        announced_date=body.announced_date,
        round_type=sanitize_text(body.round_type),
        amount_usd=body.amount_usd,
        valuation_usd=body.valuation_usd,
        lead_investors=[(name, investor_types.get(name, "VC Firm")) for name in lead_names],
        participants=[(sanitize_text(inv.name), inv.investor_type) for inv in body.investors],
        source=sanitize_text(body.source) or "manual",
        source_url=sanitize_url(body.source_url),
    )
    await session.commit()
    logger.info("Created funding round %d for %s", fr.id, company.name)
    await index_companies(session, [company.id])

    fr = await load_round(session, fr.id)
    return round_to_schema(fr)
