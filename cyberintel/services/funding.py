"""
Funding data access helpers shared by the REST routes, news ingestion and
the seed loader: company upsert, investor connect-or-create, round creation
and ORM -> schema conversion.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cyberintel.models import (
    ROLE_LEAD,
    ROLE_PARTICIPANT,
    Company,
    FundingRound,
    FundingRoundInvestor,
    Investor,
)
from cyberintel.schemas import CompanyBrief, FundingRoundOut, RoundInvestor
from cyberintel.utils import normalize_name

logger = logging.getLogger(__name__)

COMPANY_FIELDS = (
    "website", "description", "country", "city", "founded_year",
    "employee_range", "primary_category",
)


def stage_slug(round_type: str) -> str:
    """"Series B" -> "series-b", "Seed" -> "seed"."""
    return "-".join((round_type or "").lower().split())


def round_load_options():
    """Eager-load options so rounds can be serialised outside the session."""
    return (
        selectinload(FundingRound.company),
        selectinload(FundingRound.investor_links).selectinload(FundingRoundInvestor.investor),
    )


def round_to_schema(fr: FundingRound, include_company: bool = True) -> FundingRoundOut:
    investors = [
        RoundInvestor(
            id=link.investor.id,
            name=link.investor.name,
            investor_type=link.investor.investor_type or "",
            role=link.role,
        )
        for link in sorted(fr.investor_links, key=lambda l: (l.role != ROLE_LEAD, l.investor.name))
    ]
    return FundingRoundOut(
        id=fr.id,
        company_id=fr.company_id,
        announced_date=fr.announced_date,
        round_type=fr.round_type,
        amount_usd=fr.amount_usd or 0,
        valuation_usd=fr.valuation_usd,
        lead_investor=fr.lead_investor or "",
        source=fr.source or "",
        source_url=fr.source_url or "",
        confidence_score=fr.confidence_score if fr.confidence_score is not None else 1.0,
        company=CompanyBrief.model_validate(fr.company) if include_company and fr.company else None,
        investors=investors,
    )


async def find_company(session: AsyncSession, name: str) -> Optional[Company]:
    stmt = select(Company).where(Company.normalized_name == normalize_name(name))
    return (await session.execute(stmt)).scalar_one_or_none()


async def upsert_company(session: AsyncSession, name: str, **fields) -> Company:
    """Get the company by (normalised) name, updating any non-empty fields given."""
    company = await find_company(session, name)
    values = {k: v for k, v in fields.items() if k in COMPANY_FIELDS and v not in (None, "")}

    if company is None:
        company = Company(name=name.strip(), normalized_name=normalize_name(name), total_funding=0, **values)
        session.add(company)
        await session.flush()
        logger.debug("Created company %s (id=%s)", company.name, company.id)
    else:
        for key, value in values.items():
            setattr(company, key, value)
    return company


async def get_or_create_investor(
    session: AsyncSession,
    name: str,
    investor_type: str = "VC Firm",
) -> Investor:
    normalized = normalize_name(name)
    stmt = select(Investor).where(
        (Investor.normalized_name == normalized) | (Investor.name == name.strip())
    )
    investor = (await session.execute(stmt)).scalars().first()
    if investor is None:
        investor = Investor(name=name.strip(), normalized_name=normalized, investor_type=investor_type or "VC Firm")
        session.add(investor)
        await session.flush()
    return investor


async def refresh_company_totals(session: AsyncSession, company: Company):
    """Recompute total_funding and current_stage from the company's rounds."""
    total = (
        await session.execute(
            select(func.coalesce(func.sum(FundingRound.amount_usd), 0)).where(
                FundingRound.company_id == company.id
            )
        )
    ).scalar() or 0
    latest_type = (
        await session.execute(
            select(FundingRound.round_type)
            .where(FundingRound.company_id == company.id)
            .order_by(FundingRound.announced_date.desc(), FundingRound.id.desc())
            .limit(1)
        )
    ).scalar()
    company.total_funding = float(total)
    if latest_type:
        company.current_stage = stage_slug(latest_type)


async def create_round(
    session: AsyncSession,
    company: Company,
    *,
    announced_date: date,
    round_type: str,
    amount_usd: float,
    lead_investors: Iterable[tuple[str, str]] = (),
    participants: Iterable[tuple[str, str]] = (),
    valuation_usd: Optional[float] = None,
    source: str = "manual",
    source_url: str = "",
    confidence_score: float = 1.0,
) -> FundingRound:
    """
    Insert a round and link investors. `lead_investors` / `participants` are
    (name, investor_type) pairs; an investor named in both is kept as lead.
    """
    lead_investors = list(lead_investors)
    fr = FundingRound(
        company_id=company.id,
        announced_date=announced_date,
        round_type=round_type,
        amount_usd=amount_usd,
        valuation_usd=valuation_usd,
        lead_investor=", ".join(name for name, _ in lead_investors),
        source=source,
        source_url=source_url,
        confidence_score=confidence_score,
    )
    session.add(fr)
    await session.flush()

    linked: set[int] = set()
    for role, pairs in ((ROLE_LEAD, lead_investors), (ROLE_PARTICIPANT, participants)):
        for name, investor_type in pairs:
            if not name or not name.strip():
                continue
            investor = await get_or_create_investor(session, name, investor_type)
            if investor.id in linked:
                continue
            linked.add(investor.id)
            session.add(FundingRoundInvestor(funding_round_id=fr.id, investor_id=investor.id, role=role))

    await session.flush()
    await refresh_company_totals(session, company)
    return fr


async def load_round(session: AsyncSession, round_id: int) -> Optional[FundingRound]:
    stmt = (
        select(FundingRound)
        .options(*round_load_options())
        .where(FundingRound.id == round_id)
        .execution_options(populate_existing=True)
    )
    return (await session.execute(stmt)).scalar_one_or_none()
