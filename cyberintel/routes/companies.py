"""Companies endpoint -- list with rounds, company profile."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cyberintel.database import get_session
from cyberintel.models import Company, FundingRound, FundingRoundInvestor
from cyberintel.schemas import CompanyBrief, CompanyDetail, CompanyRounds, InvestorBrief
from cyberintel.services.funding import round_to_schema

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/companies", tags=["companies"])


def _with_rounds():
    return (
        selectinload(Company.funding_rounds)
        .selectinload(FundingRound.investor_links)
        .selectinload(FundingRoundInvestor.investor)
    )


def _company_rounds(company: Company) -> CompanyRounds:
    return CompanyRounds(
        **CompanyBrief.model_validate(company).model_dump(),
        description=company.description or "",
        funding_rounds=[round_to_schema(r, include_company=False) for r in company.funding_rounds],
    )


@router.get("/", response_model=list[CompanyRounds])
async def list_companies(
    search: Optional[str] = None,
    country: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    stmt = select(Company).options(_with_rounds()).order_by(Company.name.asc())
    if search:
        stmt = stmt.where(Company.name.ilike(f"%{search.strip()}%"))
    if country and country != "all":
        stmt = stmt.where(Company.country == country)
    companies = (await session.execute(stmt)).scalars().all()
    return [_company_rounds(c) for c in companies]


@router.get("/{company_id}", response_model=CompanyDetail)
async def get_company(company_id: int, session: AsyncSession = Depends(get_session)):
    company = (
        await session.execute(select(Company).options(_with_rounds()).where(Company.id == company_id))
    ).scalar_one_or_none()
    if company is None:
        raise HTTPException(status_code=404, detail="Company not found")

    base = _company_rounds(company)
    investors: dict[int, InvestorBrief] = {}
    for fr in company.funding_rounds:
        for link in fr.investor_links:
            investors.setdefault(link.investor.id, InvestorBrief.model_validate(link.investor))

    return CompanyDetail(
        **base.model_dump(exclude={"funding_rounds"}),
        funding_rounds=base.funding_rounds,
        round_count=len(base.funding_rounds),
        last_round=base.funding_rounds[0] if base.funding_rounds else None,
        investors=sorted(investors.values(), key=lambda i: i.name),
    )
