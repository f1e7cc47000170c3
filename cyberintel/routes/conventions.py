"""Conventions endpoint -- security conferences and the startups met there."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cyberintel.database import get_session
from cyberintel.models import Convention, ConventionCompany
from cyberintel.schemas import (
    CONVENTION_STATUSES,
    BoothWithConvention,
    ConventionCompanyOut,
    ConventionCompanyUpdate,
    ConventionOut,
)
from cyberintel.security import sanitize_text

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/conventions", tags=["conventions"])


def _by_fit(booth: ConventionCompany):
    return (-(booth.overall_fit_score or 0), booth.status or "", booth.id)


@router.get("/")
async def list_conventions(
    active: Optional[bool] = None,
    session: AsyncSession = Depends(get_session),
):
    """All conventions by start date; `active=true` keeps only running ones."""
    stmt = (
        select(Convention)
        .options(selectinload(Convention.companies))
        .order_by(Convention.start_date.asc(), Convention.id.asc())
    )
    if active:
        stmt = stmt.where(Convention.is_active.is_(True))
    conventions = (await session.execute(stmt)).scalars().all()

    data = [
        ConventionOut(
            id=c.id,
            name=c.name,
            location=c.location or "",
            start_date=c.start_date,
            end_date=c.end_date,
            is_active=bool(c.is_active),
            companies=[ConventionCompanyOut.model_validate(b) for b in sorted(c.companies, key=_by_fit)],
        )
        for c in conventions
    ]
    return {"success": True, "data": [c.model_dump(mode="json") for c in data], "count": len(data)}


@router.get("/companies")
async def list_convention_companies(
    convention_id: Optional[int] = None,
    status: Optional[str] = None,
    min_score: Optional[int] = Query(None, ge=0, le=100),
    category: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    stmt = select(ConventionCompany).options(selectinload(ConventionCompany.convention))
    if convention_id is not None:
        stmt = stmt.where(ConventionCompany.convention_id == convention_id)
    if status and status != "all":
        stmt = stmt.where(ConventionCompany.status == status)
    if min_score is not None:
        stmt = stmt.where(ConventionCompany.overall_fit_score >= min_score)
    if category and category != "all":
        stmt = stmt.where(ConventionCompany.category == category)
    stmt = stmt.order_by(
        ConventionCompany.overall_fit_score.desc(),
        ConventionCompany.status.asc(),
        ConventionCompany.id.asc(),
    )
    booths = (await session.execute(stmt)).scalars().all()
    data = [BoothWithConvention.model_validate(b).model_dump(mode="json") for b in booths]
    return {"success": True, "data": data, "count": len(data)}


@router.put("/companies/{booth_id}")
async def update_convention_company(
    booth_id: int,
    body: ConventionCompanyUpdate,
    session: AsyncSession = Depends(get_session),
):
    booth = await session.get(ConventionCompany, booth_id)
    if booth is None:
        raise HTTPException(status_code=404, detail="Convention company not found")

    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if "status" in changes and changes["status"] not in CONVENTION_STATUSES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid status. Use one of: {', '.join(CONVENTION_STATUSES)}",
        )
    for key in ("booth", "notes"):
        if key in changes:
            changes[key] = sanitize_text(changes[key])
    for key, value in changes.items():
        setattr(booth, key, value)

    await session.commit()
    logger.info("Updated convention company %s: %s", booth.company_name, ", ".join(sorted(changes)) or "none")
    return {
        "success": True,
        "data": ConventionCompanyOut.model_validate(booth).model_dump(mode="json"),
        "updated_fields": sorted(changes),
    }
