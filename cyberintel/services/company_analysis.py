"""
AI company analyst.

Looks the company up (or a few similar ones), attaches a cached market
context, asks the LLM for a JSON verdict and falls back to a deterministic
database-only analysis when the LLM is unavailable or answers garbage.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cyberintel.models import Company, FundingRound, PortfolioCompany
from cyberintel.services.llm_client import LLMClient
from cyberintel.utils import iso_now

logger = logging.getLogger(__name__)

ANALYSIS_TYPES = ("comprehensive", "quick")
RECOMMENDATIONS = ("strong_buy", "buy", "hold", "avoid")
MARKET_CACHE_SECONDS = 300
REQUIRED_FIELDS = {"company_name": "", "found": False, "overview": "", "recommendation": "hold", "confidence": 50}

AGENT_ROLES = [
    {"id": "company_analyst", "name": "Company Analyst", "description": "Investment verdict for a single company"},
    {"id": "portfolio_advisor", "name": "Portfolio Advisor", "description": "Insights for a portfolio holding"},
]

_market_cache: Optional[dict] = None
_market_cache_time = 0.0


def clear_market_cache():
    global _market_cache, _market_cache_time
    _market_cache = None
    _market_cache_time = 0.0


async def get_market_context(session: AsyncSession) -> dict:
    """Top companies, funding by round type and totals; cached for 5 minutes."""
    global _market_cache, _market_cache_time
    now = time.monotonic()
    if _market_cache is not None and now - _market_cache_time < MARKET_CACHE_SECONDS:
        return _market_cache

    top = (
        await session.execute(select(Company).order_by(Company.total_funding.desc()).limit(10))
    ).scalars().all()
    trends = (
        await session.execute(
            select(FundingRound.round_type, func.count(FundingRound.id), func.coalesce(func.sum(FundingRound.amount_usd), 0))
            .group_by(FundingRound.round_type)
            .order_by(func.sum(FundingRound.amount_usd).desc())
        )
    ).all()
    totals = (
        await session.execute(
            select(
                func.count(Company.id),
                func.coalesce(func.sum(Company.total_funding), 0),
                func.coalesce(func.avg(Company.total_funding), 0),
            )
        )
    ).one()

    _market_cache = {
        "top_companies": [
            {
                "name": c.name,
                "primary_category": c.primary_category or "",
                "total_funding": c.total_funding or 0,
                "current_stage": c.current_stage or "",
            }
            for c in top
        ],
        "funding_trends": [
            {"round_type": rt, "rounds": count, "total_amount": float(amount or 0)}
            for rt, count, amount in trends
        ],
        "market_analysis": {
            "total_companies": totals[0] or 0,
            "total_funding": float(totals[1] or 0),
            "average_funding": float(totals[2] or 0),
        },
    }
    _market_cache_time = now
    return _market_cache


async def find_company(session: AsyncSession, name: str) -> Optional[Company]:
    stmt = (
        select(Company)
        .options(selectinload(Company.funding_rounds))
        .where(Company.name.ilike(f"%{name.strip()}%"))
        .order_by(Company.total_funding.desc())
        .limit(1)
    )
    return (await session.execute(stmt)).scalar_one_or_none()


async def find_similar(session: AsyncSession, name: str, limit: int = 3) -> list[Company]:
    first_word = name.split()[0] if name.split() else name
    stmt = (
        select(Company)
        .where(or_(Company.name.ilike(f"%{first_word}%"), Company.primary_category.ilike(f"%{name}%")))
        .order_by(Company.total_funding.desc())
        .limit(limit)
    )
    return list((await session.execute(stmt)).scalars().all())


def _money(value: float) -> str:
    return f"${value or 0:,.0f}"


def build_prompt(
    company_name: str,
    analysis_type: str,
    company: Optional[Company],
    similar: list[Company],
    market: dict,
) -> str:
    ma = market["market_analysis"]
    if analysis_type == "quick":
        company_line = (
            f"Company Data: {company.name}, {company.primary_category}, "
            f"{_money(company.total_funding)} funding, {company.current_stage} stage."
            if company else "Company not found in database."
        )
        return (
            f"Provide a quick investment analysis for {company_name} based on cybersecurity market trends.\n"
            f"Market Context: {ma['total_companies']} companies with {_money(ma['total_funding'])} total funding.\n"
            f"{company_line}\n"
            "Give a brief recommendation (buy/hold/avoid) with 2-3 key reasons. Respond in JSON format:\n"
            '{"company_name": "...", "found": true, "overview": "...", "recommendation": "buy|hold|avoid", '
            '"confidence": 75, "key_strengths": [], "key_risks": [], "market_opportunity": "...", '
            '"investment_thesis": "..."}'
        )

    lines = ["COMPANY DATA:"]
    if company:
        lines += [
            f"Company: {company.name}",
            f"Description: {company.description or ''}",
            f"Category: {company.primary_category or ''}",
            f"Total Funding: {_money(company.total_funding)}",
            f"Funding Rounds: {len(company.funding_rounds)}",
            f"Current Stage: {company.current_stage or ''}",
            f"Founded: {company.founded_year or 'Unknown'}",
            f"Headquarters: {', '.join(p for p in (company.city, company.country) if p) or 'Unknown'}",
            "Funding History:",
        ]
        lines += [
            f"- {r.round_type}: {_money(r.amount_usd)} on {r.announced_date.isoformat()}"
            for r in company.funding_rounds[:5]
        ]
    else:
        lines.append(f'Company "{company_name}" not found in database.')

    if similar:
        lines.append("SIMILAR COMPANIES:")
        lines += [f"- {c.name}: {c.primary_category}, {_money(c.total_funding)}" for c in similar]

    lines.append("MARKET CONTEXT:")
    lines.append("Top Funded Companies:")
    lines += [
        f"- {c['name']}: {c['primary_category']}, {_money(c['total_funding'])} ({c['current_stage']})"
        for c in market["top_companies"]
    ]
    lines.append("Funding Trends by Round Type:")
    lines += [
        f"- {t['round_type']}: {t['rounds']} rounds, {_money(t['total_amount'])}"
        for t in market["funding_trends"]
    ]
    lines += [
        "Market Overview:",
        f"- Total Companies Tracked: {ma['total_companies']}",
        f"- Total Market Funding: {_money(ma['total_funding'])}",
        f"- Average Funding per Company: {_money(ma['average_funding'])}",
        "",
        "Provide a concise analysis covering: company overview and positioning, funding and valuation,",
        "market comparison, investment recommendation (strong_buy, buy, hold, avoid), key risks and",
        "opportunities, market timing. Format your response as a JSON object with keys:",
        "company_name, found, overview, funding_analysis, market_position, recommendation, confidence,",
        "key_strengths, key_risks, market_opportunity, investment_thesis.",
    ]
    return "\n".join(lines)


def fallback_analysis(company_name: str, company: Optional[Company]) -> dict:
    """Database-only verdict used when the LLM cannot answer."""
    if company is None:
        return {
            "company_name": company_name,
            "found": False,
            "overview": "Company not found in database.",
            "funding_analysis": "No funding data available.",
            "market_position": "Unable to determine market position.",
            "recommendation": "hold",
            "confidence": 40,
            "key_strengths": ["Market research needed"],
            "key_risks": ["Limited information available"],
            "market_opportunity": "Cybersecurity market continues to show strong growth potential.",
            "investment_thesis": "Gather more company-specific information before making an investment decision.",
        }

    rounds = company.funding_rounds
    total = company.total_funding or 0
    if total >= 100_000_000 and len(rounds) >= 3:
        recommendation, confidence = "buy", 70
    elif total <= 0:
        recommendation, confidence = "avoid", 50
    else:
        recommendation, confidence = "hold", 65
    location = ", ".join(p for p in (company.city, company.country) if p) or "an undisclosed location"

    return {
        "company_name": company.name,
        "found": True,
        "overview": f"{company.name} is a {company.primary_category or 'cybersecurity'} company based in {location}.",
        "funding_analysis": f"Total funding: {_money(total)} across {len(rounds)} rounds.",
        "market_position": f"Currently at {company.current_stage or 'an unknown'} stage in the cybersecurity market.",
        "recommendation": recommendation,
        "confidence": confidence,
        "key_strengths": [company.primary_category or "Cybersecurity focus", f"{len(rounds)} disclosed funding rounds"],
        "key_risks": ["Competitive market", "Execution risks"],
        "market_opportunity": "Cybersecurity market continues to show strong growth potential.",
        "investment_thesis": "Monitor for additional funding rounds and market traction before deciding.",
    }


def normalise_answer(answer: dict, company_name: str, found: bool) -> dict:
    for key, default in REQUIRED_FIELDS.items():
        answer.setdefault(key, default)
    answer["company_name"] = answer["company_name"] or company_name
    answer["found"] = found
    if answer["recommendation"] not in RECOMMENDATIONS:
        answer["recommendation"] = "hold"
    try:
        answer["confidence"] = max(0, min(100, int(answer["confidence"])))
    except (TypeError, ValueError):
        answer["confidence"] = 50
    return answer


async def analyze_company(
    session: AsyncSession,
    llm: LLMClient,
    company_name: str,
    analysis_type: str = "comprehensive",
) -> dict:
    if analysis_type not in ANALYSIS_TYPES:
        raise ValueError('Invalid analysis type. Must be "comprehensive" or "quick"')
    started = time.perf_counter()
    name = company_name.strip()

    company = await find_company(session, name)
    similar = [] if company else await find_similar(session, name)
    cache_hit = _market_cache is not None and time.monotonic() - _market_cache_time < MARKET_CACHE_SECONDS
    market = await get_market_context(session)

    answer = None
    if llm.is_configured:
        prompt = build_prompt(name, analysis_type, company, similar, market)
        answer = await llm.complete_json(prompt, max_tokens=500 if analysis_type == "quick" else 1000)

    if answer is None:
        source = "fallback"
        result = fallback_analysis(name, company)
        result["error"] = (
            "AI configuration missing, using database analysis"
            if not llm.is_configured else "AI service unavailable, using fallback analysis"
        )
    else:
        source = "llm"
        result = normalise_answer(answer, name, company is not None)

    return {
        **result,
        "success": True,
        "timestamp": iso_now(),
        "query": name,
        "analysis_type": analysis_type,
        "source": source,
        "response_time_ms": round((time.perf_counter() - started) * 1000, 1),
        "context_data": {
            "has_company_data": company is not None,
            "similar_companies": [c.name for c in similar],
            "market_companies_count": market["market_analysis"]["total_companies"],
            "cache_used": cache_hit,
        },
    }


def _portfolio_prompt(company: PortfolioCompany) -> str:
    return (
        f"Assess the portfolio company {company.name} ({company.focus_area}, {company.investment_stage}).\n"
        f"Revenue growth: {company.revenue_growth}%. Employee growth: {company.employee_growth}%.\n"
        f"ARR: {_money(company.arr)}. Burn rate: {_money(company.burn_rate)}/month. Runway: {company.runway} months.\n"
        f"Competitive position: {company.competitive_position}. Risk level: {company.risk_level}.\n"
        "Respond in JSON with keys: market_trend (growing|stable|declining), competitive_threat "
        "(low|medium|high), investment_recommendation (strong_buy|buy|hold|avoid), confidence_score (0-1), "
        "key_opportunities (list), key_risks (list)."
    )


async def portfolio_insights(llm: LLMClient, company: PortfolioCompany) -> dict:
    """LLM insight for a holding; falls back to the stored insight fields."""
    answer = None
    if llm.is_configured:
        answer = await llm.complete_json(_portfolio_prompt(company), max_tokens=500)
    if answer is not None:
        answer["source"] = "llm"
        return answer

    return {
        "market_trend": company.market_trend or "stable",
        "competitive_threat": "low" if company.competitive_position == "leader" else "medium",
        "investment_recommendation": company.investment_recommendation or "hold",
        "confidence_score": company.confidence_score or 0.5,
        "key_opportunities": [f"{company.focus_area} market growth"] if company.focus_area else [],
        "key_risks": [r.strip() for r in (company.risk_factors or "").split(";") if r.strip()],
        "source": "fallback",
    }
