"""
Dashboard stat cards: summary, KPIs, alerts and realtime request metrics.
"""

from __future__ import annotations

import logging
from collections import Counter

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cyberintel.models import Company, Convention, ConventionCompany, PortfolioCompany
from cyberintel.security import AuditLog
from cyberintel.utils import format_billions, iso_now

logger = logging.getLogger(__name__)

STAT_TYPES = ("summary", "kpis", "alerts", "realtime")
HIGH_VALUE_FUNDING = 100_000_000
CONCENTRATION_SHARE = 0.4
MAX_ALERTS = 5


async def _count(session: AsyncSession, stmt) -> int:
    return (await session.execute(stmt)).scalar() or 0


async def summary_stats(session: AsyncSession) -> dict:
    companies = await _count(session, select(func.count(Company.id)))
    total_funding = float(await _count(session, select(func.coalesce(func.sum(Company.total_funding), 0))))
    active_conventions = await _count(
        session, select(func.count(Convention.id)).where(Convention.is_active.is_(True))
    )
    portfolio = await _count(session, select(func.count(PortfolioCompany.id)))

    return {
        "companies": {"total": companies, "label": "Companies Tracked", "icon": "building", "color": "blue"},
        "funding": {
            "total": total_funding,
            "label": "Total Funding",
            "icon": "dollar-sign",
            "color": "green",
            "formatted": format_billions(total_funding),
        },
        "conventions": {"total": active_conventions, "label": "Active Conventions", "icon": "calendar", "color": "purple"},
        "portfolio": {"total": portfolio, "label": "Portfolio Companies", "icon": "briefcase", "color": "orange"},
    }


def _portfolio_healthy(p: PortfolioCompany) -> bool:
    return bool(p.customer_count) and bool(p.arr)


async def kpi_stats(session: AsyncSession) -> dict:
    companies = (await session.execute(select(Company))).scalars().all()
    portfolio = (await session.execute(select(PortfolioCompany))).scalars().all()
    reach = await _count(
        session,
        select(func.count(ConventionCompany.id))
        .join(Convention, Convention.id == ConventionCompany.convention_id)
        .where(Convention.is_active.is_(True)),
    )
    active_conventions = await _count(
        session, select(func.count(Convention.id)).where(Convention.is_active.is_(True))
    )

    total_funding = sum(c.total_funding or 0 for c in companies)
    success_rate = sum(1 for p in portfolio if _portfolio_healthy(p)) / max(len(portfolio), 1) * 100

    return {
        "financial": {
            "total_market_value": total_funding,
            "average_company_value": total_funding / max(len(companies), 1),
            "portfolio_value": sum(p.investment_amount or 0 for p in portfolio),
            "roi": success_rate,
        },
        "operational": {
            "companies_tracked": len(companies),
            "portfolio_size": len(portfolio),
            "active_conventions": active_conventions,
            "convention_reach": reach,
        },
        "performance": {
            "data_quality": sum(1 for c in companies if (c.total_funding or 0) > 0) / max(len(companies), 1) * 100,
            "portfolio_health": success_rate,
            "market_coverage": len({c.primary_category or "unknown" for c in companies}),
        },
    }


def _alert(alert_id: str, type_: str, severity: str, title: str, message: str, action=None) -> dict:
    return {
        "id": alert_id,
        "type": type_,
        "severity": severity,
        "title": title,
        "message": message,
        "action": action,
        "timestamp": iso_now(),
    }


async def alert_stats(session: AsyncSession) -> dict:
    companies = (await session.execute(select(Company))).scalars().all()
    portfolio = (await session.execute(select(PortfolioCompany))).scalars().all()
    alerts = []

    high_value = [
        c for c in companies
        if (c.total_funding or 0) > HIGH_VALUE_FUNDING and c.current_stage == "series-b"
    ]
    if high_value:
        alerts.append(_alert(
            "high-value-opportunities", "opportunity", "info",
            "High-Value Investment Opportunities",
            f"{len(high_value)} Series B companies with $100M+ funding available",
            "Review opportunities",
        ))

    underperforming = [p for p in portfolio if (p.market_traction or 0) < 30 and not p.customer_count]
    if underperforming:
        alerts.append(_alert(
            "portfolio-performance", "warning", "medium",
            "Portfolio Performance Alert",
            f"{len(underperforming)} portfolio companies need attention",
            "Review portfolio",
        ))

    if companies:
        category, count = Counter(c.primary_category or "unknown" for c in companies).most_common(1)[0]
        if count > len(companies) * CONCENTRATION_SHARE:
            alerts.append(_alert(
                "market-concentration", "info", "low",
                "Market Concentration Notice",
                f"{category} represents {round(count / len(companies) * 100)}% of tracked companies",
                "Diversify tracking",
            ))

    alerts.append(_alert(
        "system-health", "success", "low",
        "System Operating Normally",
        "All systems operational, data up to date",
    ))

    return {
        "alerts": alerts[:MAX_ALERTS],
        "summary": {
            "total": len(alerts),
            "critical": sum(1 for a in alerts if a["severity"] == "high"),
            "warnings": sum(1 for a in alerts if a["severity"] == "medium"),
            "info": sum(1 for a in alerts if a["severity"] == "low"),
        },
    }


def realtime_stats(audit_log: AuditLog, window_seconds: int = 60) -> dict:
    """Request metrics over the last minute, taken from the audit trail."""
    events = [e for e in audit_log.since(window_seconds) if e.type == "data_access"]
    durations = [e.duration_ms for e in events if e.duration_ms is not None]
    avg_ms = round(sum(durations) / len(durations), 1) if durations else 0.0
    errors = sum(1 for e in events if (e.status or 0) >= 500)

    return {
        "api_requests": {
            "current": len(events),
            "label": "API Requests/min",
            "status": "healthy" if errors == 0 else "degraded",
        },
        "response_time": {
            "current": avg_ms,
            "label": "Avg Response Time (ms)",
            "status": "good" if avg_ms < 500 else "slow",
        },
        "active_users": {
            "current": len({e.ip for e in events}),
            "label": "Active Clients",
            "status": "normal",
        },
        "error_count": {
            "current": errors,
            "label": "Server Errors/min",
            "status": "ok" if errors == 0 else "attention",
        },
    }
