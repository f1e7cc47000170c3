"""Funding tracker analytics endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cyberintel.database import get_session
from cyberintel.models import FundingRound
from cyberintel.services.analytics import DEFAULT_TIMEFRAME, TIMEFRAME_MONTHS, funding_analytics
from cyberintel.services.funding import round_load_options

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/funding-tracker", tags=["analytics"])


@router.get("/analytics")
async def get_analytics(timeframe: str = DEFAULT_TIMEFRAME, session: AsyncSession = Depends(get_session)):
    if timeframe not in TIMEFRAME_MONTHS:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid timeframe. Use one of: {', '.join(TIMEFRAME_MONTHS)}",
        )
    rounds = (await session.execute(select(FundingRound).options(*round_load_options()))).scalars().all()
    return {"success": True, "data": funding_analytics(list(rounds), timeframe)}
