"""Investors endpoint -- list with their rounds and deal statistics."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cyberintel.database import get_session
from cyberintel.models import FundingRound, FundingRoundInvestor, Investor
from cyberintel.schemas import InvestorOut, InvestorStats
from cyberintel.services.funding import round_to_schema

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/investors", tags=["investors"])


def investor_stats(rounds: list[FundingRound]) -> InvestorStats:
    total = sum(r.amount_usd or 0 for r in rounds)
    return InvestorStats(
        total_invested=total,
        deals_count=len(rounds),
        unique_companies=len({r.company_id for r in rounds}),
        average_deal_size=total / len(rounds) if rounds else 0,
    )


@router.get("/", response_model=list[InvestorOut])
async def list_investors(
    search: Optional[str] = None,
    type: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    stmt = (
        select(Investor)
        .options(
            selectinload(Investor.round_links)
            .selectinload(FundingRoundInvestor.funding_round)
            .selectinload(FundingRound.company),
            selectinload(Investor.round_links)
            .selectinload(FundingRoundInvestor.funding_round)
            .selectinload(FundingRound.investor_links)
            .selectinload(FundingRoundInvestor.investor),
        )
        .order_by(Investor.name.asc())
    )
    if search:
        stmt = stmt.where(Investor.name.ilike(f"%{search.strip()}%"))
    if type and type != "all":
        stmt = stmt.where(Investor.investor_type == type)

    investors = (await session.execute(stmt)).scalars().all()
    result = []
    for inv in investors:
        rounds = sorted(
            (link.funding_round for link in inv.round_links),
            key=lambda r: (r.announced_date, r.id),
            reverse=True,
        )
        result.append(
            InvestorOut(
                id=inv.id,
                name=inv.name,
                investor_type=inv.investor_type or "",
                funding_rounds=[round_to_schema(r) for r in rounds],
                stats=investor_stats(rounds),
            )
        )
    return result
