"""
Portfolio maths over the fund's holdings.

Holding value  = current_valuation * ownership_percentage / 100
Multiple       = holding value / investment amount
IRR            = (total value / total invested) ** (1 / holding_years) - 1

All functions take a list of PortfolioCompany rows and are pure, so the
route layer decides what to load.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Optional

from cyberintel.models import PortfolioCompany
from cyberintel.utils import iso_now, split_list

logger = logging.getLogger(__name__)

DEFAULT_HOLDING_YEARS = 2.5
EXIT_PROBABILITY_THRESHOLD = 0.6
RISK_LEVELS = ("low", "medium", "high")

METRIC_FIELDS = {
    "current_employees": int,
    "employee_growth": float,
    "revenue_growth": float,
    "customer_count": int,
    "arr": float,
    "burn_rate": float,
    "runway": int,
    "market_traction": float,
    "current_valuation": float,
    "patent_count": int,
    "exit_probability": float,
    "estimated_exit_value": float,
    "competitive_position": str,
}

MARKET_TRENDS = [
    {
        "trend": "Zero Trust Architecture Adoption Acceleration",
        "impact": "positive",
        "focus_areas": ["authorization", "application-security"],
    },
    {
        "trend": "AI-Powered Security Solutions Demand",
        "impact": "positive",
        "focus_areas": ["data-protection", "workforce-security"],
    },
    {
        "trend": "Developer-First Security Tools Growth",
        "impact": "positive",
        "focus_areas": ["application-security"],
    },
    {
        "trend": "Increased Cybersecurity Regulations",
        "impact": "positive",
        "focus_areas": ["data-protection", "authorization"],
    },
]


def _safe_div(a: float, b: float) -> float:
    return a / b if b else 0.0


def holding_value(company: PortfolioCompany) -> float:
    return (company.current_valuation or 0) * (company.ownership_percentage or 0) / 100


def multiple(company: PortfolioCompany) -> float:
    return _safe_div(holding_value(company), company.investment_amount or 0)


def average_holding_years(companies: list[PortfolioCompany], today: Optional[date] = None) -> float:
    today = today or date.today()
    periods = [
        (today - c.investment_date).days / 365.25
        for c in companies
        if c.investment_date and c.investment_date <= today
    ]
    periods = [p for p in periods if p > 0]
    if not periods:
        return DEFAULT_HOLDING_YEARS
    return sum(periods) / len(periods)


def calculate_irr(companies: list[PortfolioCompany], today: Optional[date] = None) -> float:
    invested = sum(c.investment_amount or 0 for c in companies)
    value = sum(holding_value(c) for c in companies)
    if invested <= 0 or value <= 0:
        return 0.0
    years = average_holding_years(companies, today)
    return (value / invested) ** (1 / years) - 1


def risk_distribution(companies: list[PortfolioCompany]) -> dict:
    dist = {level: 0 for level in RISK_LEVELS}
    for c in companies:
        if c.risk_level in dist:
            dist[c.risk_level] += 1
    return dist


def _group(companies: list[PortfolioCompany], attr: str) -> dict[str, list[PortfolioCompany]]:
    groups: dict[str, list[PortfolioCompany]] = defaultdict(list)
    for c in companies:
        groups[getattr(c, attr) or "unknown"].append(c)
    return groups


def performance_by_stage(companies: list[PortfolioCompany]) -> list[dict]:
    result = []
    for stage, group in _group(companies, "investment_stage").items():
        invested = sum(c.investment_amount or 0 for c in group)
        value = sum(holding_value(c) for c in group)
        result.append({
            "stage": stage,
            "companies": len(group),
            "total_value": value,
            "avg_multiple": _safe_div(value, invested),
        })
    return result


def performance_by_focus(companies: list[PortfolioCompany]) -> list[dict]:
    result = []
    for focus, group in _group(companies, "focus_area").items():
        result.append({
            "focus_area": focus,
            "companies": len(group),
            "total_value": sum(holding_value(c) for c in group),
            "avg_growth_rate": _safe_div(sum(c.revenue_growth or 0 for c in group), len(group)),
        })
    return result


def top_performers(companies: list[PortfolioCompany], limit: int = 5) -> list[dict]:
    rows = [
        {
            "company_id": c.id,
            "company_name": c.name,
            "multiple": multiple(c),
            "current_value": holding_value(c),
            "growth_rate": c.revenue_growth or 0,
        }
        for c in companies
    ]
    rows.sort(key=lambda r: r["multiple"], reverse=True)
    return rows[:limit]


def exit_pipeline(companies: list[PortfolioCompany]) -> list[dict]:
    rows = [
        {
            "company_id": c.id,
            "company_name": c.name,
            "exit_probability": c.exit_probability or 0,
            "estimated_value": (c.estimated_exit_value or 0) * (c.ownership_percentage or 0) / 100,
            "timeframe": c.exit_timeframe or "",
        }
        for c in companies
        if (c.exit_probability or 0) > EXIT_PROBABILITY_THRESHOLD
    ]
    rows.sort(key=lambda r: r["exit_probability"], reverse=True)
    return rows


def market_trends(companies: list[PortfolioCompany]) -> list[dict]:
    trends = []
    for trend in MARKET_TRENDS:
        affected = [c.name for c in companies if c.focus_area in trend["focus_areas"]]
        if affected:
            trends.append({"trend": trend["trend"], "impact": trend["impact"], "affected_companies": affected})
    return trends


def portfolio_analytics(companies: list[PortfolioCompany], today: Optional[date] = None) -> dict:
    invested = sum(c.investment_amount or 0 for c in companies)
    value = sum(holding_value(c) for c in companies)
    return {
        "total_portfolio_value": value,
        "total_invested": invested,
        "unrealized_gains": value - invested,
        "realized_gains": 0,
        "irr": calculate_irr(companies, today),
        "moic": _safe_div(value, invested),
        "performance_by_stage": performance_by_stage(companies),
        "performance_by_focus": performance_by_focus(companies),
        "top_performers": top_performers(companies),
        "risk_distribution": risk_distribution(companies),
        "exit_pipeline": exit_pipeline(companies),
        "market_trends": market_trends(companies),
    }


def company_insights(company: PortfolioCompany) -> dict:
    return {
        "market_trend": company.market_trend or "stable",
        "investment_recommendation": company.investment_recommendation or "hold",
        "confidence_score": company.confidence_score or 0,
        "risk_factors": split_list(company.risk_factors, ";"),
    }


def company_brief(company: PortfolioCompany) -> dict:
    return {
        "id": company.id,
        "name": company.name,
        "focus_area": company.focus_area,
        "investment_stage": company.investment_stage,
        "current_valuation": company.current_valuation,
        "investment_amount": company.investment_amount,
        "ownership_percentage": company.ownership_percentage,
        "revenue_growth": company.revenue_growth,
        "risk_level": company.risk_level,
        "exit_probability": company.exit_probability,
        "ai_insights": company_insights(company),
    }


def company_detail(company: PortfolioCompany) -> dict:
    data = company_brief(company)
    data.update({
        "description": company.description,
        "website": company.website,
        "founded": company.founded,
        "headquarters": company.headquarters,
        "investment_date": company.investment_date.isoformat() if company.investment_date else None,
        "lead_investor": bool(company.lead_investor),
        "primary_solution": company.primary_solution,
        "target_market": company.target_market,
        "current_employees": company.current_employees,
        "employee_growth": company.employee_growth,
        "customer_count": company.customer_count,
        "arr": company.arr,
        "burn_rate": company.burn_rate,
        "runway": company.runway,
        "market_traction": company.market_traction,
        "competitive_position": company.competitive_position,
        "patent_count": company.patent_count,
        "estimated_exit_value": company.estimated_exit_value,
        "exit_timeframe": company.exit_timeframe,
        "potential_acquirers": split_list(company.potential_acquirers),
        "current_value": holding_value(company),
        "multiple": multiple(company),
        "last_updated": company.updated_at.isoformat() if company.updated_at else None,
    })
    return data


def recommendations(company: PortfolioCompany) -> dict:
    return {
        "current_recommendation": company.investment_recommendation or "hold",
        "reasoning": [
            f"Revenue growth of {company.revenue_growth or 0:.0f}% indicates "
            f"{'strong' if (company.revenue_growth or 0) >= 100 else 'moderate'} market traction",
            f"{company.focus_area or 'Core'} market showing positive trends",
            f"Risk level: {company.risk_level} with {company.runway or 0} months of runway",
        ],
        "next_steps": [
            "Monitor quarterly revenue metrics",
            "Track competitive positioning",
            "Assess exit opportunity timing",
        ],
        "key_metrics": {
            "revenue_growth": company.revenue_growth,
            "burn_rate": company.burn_rate,
            "runway": company.runway,
            "market_position": company.competitive_position,
        },
    }


def focus_analytics(companies: list[PortfolioCompany]) -> dict:
    top = max(companies, key=lambda c: c.revenue_growth or 0, default=None)
    return {
        "total_companies": len(companies),
        "total_value": sum(holding_value(c) for c in companies),
        "average_growth": _safe_div(sum(c.revenue_growth or 0 for c in companies), len(companies)),
        "top_performer": top.name if top else None,
        "market_trend": "growing" if companies and all((c.revenue_growth or 0) > 0 for c in companies) else "stable",
    }


def stage_analytics(companies: list[PortfolioCompany]) -> dict:
    invested = sum(c.investment_amount or 0 for c in companies)
    value = sum(holding_value(c) for c in companies)
    return {
        "total_companies": len(companies),
        "total_invested": invested,
        "total_value": value,
        "multiple": _safe_div(value, invested),
        "average_runway": _safe_div(sum(c.runway or 0 for c in companies), len(companies)),
        "risk_distribution": risk_distribution(companies),
    }


def performance_report(companies: list[PortfolioCompany], today: Optional[date] = None) -> dict:
    return {
        "analytics": portfolio_analytics(companies, today),
        "companies": [
            {
                "id": c.id,
                "name": c.name,
                "investment_stage": c.investment_stage,
                "invested": c.investment_amount or 0,
                "current_value": holding_value(c),
                "multiple": multiple(c),
                "risk_level": c.risk_level,
            }
            for c in sorted(companies, key=multiple, reverse=True)
        ],
        "generated_at": iso_now(),
    }


def assess_risk(company: PortfolioCompany) -> str:
    """Heuristic risk level from runway, traction and growth."""
    runway = company.runway or 0
    traction = company.market_traction or 0
    growth = company.revenue_growth or 0
    if runway < 12 or (traction < 30 and not company.customer_count):
        return "high"
    if runway >= 24 and growth >= 150:
        return "low"
    return "medium"


def apply_metrics_update(company: PortfolioCompany, data: dict) -> list[str]:
    """Apply a partial metrics update; returns the field names changed."""
    changed = []
    for key, value in data.items():
        caster = METRIC_FIELDS.get(key)
        if caster is None or value is None:
            continue
        try:
            setattr(company, key, caster(value))
        except (TypeError, ValueError):
            raise ValueError(f"Invalid value for {key}: {value!r}") from None
        changed.append(key)

    new_risk = assess_risk(company)
    if new_risk != company.risk_level:
        logger.info("Risk level for %s: %s -> %s", company.name, company.risk_level, new_risk)
        company.risk_level = new_risk
        changed.append("risk_level")
    return changed
