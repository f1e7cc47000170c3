"""Portfolio tracker endpoint -- views over the fund's holdings and actions."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cyberintel.database import get_session
from cyberintel.models import PortfolioCompany
from cyberintel.schemas import PortfolioAction
from cyberintel.services import portfolio as pf
from cyberintel.services.company_analysis import portfolio_insights
from cyberintel.services.llm_client import get_llm_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/portfolio", tags=["portfolio"])

VIEWS = ("overview", "company", "focus", "stage", "performance")
ACTIONS = ("update-metrics", "generate-insights", "portfolio-analysis")


async def _load(session: AsyncSession, **filters) -> list[PortfolioCompany]:
    stmt = select(PortfolioCompany).order_by(PortfolioCompany.name)
    for key, value in filters.items():
        if value:
            stmt = stmt.where(getattr(PortfolioCompany, key) == value)
    return list((await session.execute(stmt)).scalars().all())


async def _get_company(session: AsyncSession, company_id: Optional[str]) -> PortfolioCompany:
    if not company_id:
        raise HTTPException(status_code=400, detail="Company ID required")
    company = await session.get(PortfolioCompany, company_id)
    if company is None:
        raise HTTPException(status_code=404, detail="Company not found")
    return company


@router.get("/")
async def portfolio_view(
    view: str = "overview",
    company_id: Optional[str] = None,
    focus_area: Optional[str] = None,
    stage: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    if view not in VIEWS:
        raise HTTPException(status_code=400, detail="Invalid view parameter")

    if view == "company":
        company = await _get_company(session, company_id)
        return {
            "success": True,
            "data": {
                "company": pf.company_detail(company),
                "ai_insights": pf.company_insights(company),
                "recommendations": pf.recommendations(company),
            },
        }

    if view == "focus":
        companies = await _load(session, focus_area=focus_area)
        return {
            "success": True,
            "data": {
                "focus_area": focus_area,
                "companies": [pf.company_brief(c) for c in companies],
                "analytics": pf.focus_analytics(companies),
            },
        }

    if view == "stage":
        companies = await _load(session, investment_stage=stage)
        return {
            "success": True,
            "data": {
                "stage": stage,
                "companies": [pf.company_brief(c) for c in companies],
                "analytics": pf.stage_analytics(companies),
            },
        }

    companies = await _load(session)
    if view == "performance":
        return {"success": True, "data": pf.performance_report(companies)}

    analytics = pf.portfolio_analytics(companies)
    return {
        "success": True,
        "data": {
            "analytics": analytics,
            "companies": [pf.company_brief(c) for c in companies],
            "summary": {
                "total_companies": len(companies),
                "total_invested": analytics["total_invested"],
                "total_value": analytics["total_portfolio_value"],
                "unrealized_gains": analytics["unrealized_gains"],
                "irr": analytics["irr"],
                "moic": analytics["moic"],
            },
        },
    }


@router.post("/actions")
async def portfolio_action(body: PortfolioAction, session: AsyncSession = Depends(get_session)):
    if body.action not in ACTIONS:
        raise HTTPException(status_code=400, detail="Invalid action")

    if body.action == "portfolio-analysis":
        return {"success": True, "data": pf.performance_report(await _load(session))}

    company = await _get_company(session, body.company_id)

    if body.action == "generate-insights":
        insights = await portfolio_insights(get_llm_client(), company)
        return {"success": True, "data": insights}

    try:
        changed = pf.apply_metrics_update(company, body.data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    await session.commit()
    logger.info("Updated metrics for %s: %s", company.name, ", ".join(changed) or "none")
    return {
        "success": True,
        "message": "Company metrics updated successfully",
        "data": {"updated_fields": changed, "risk_level": company.risk_level},
    }
