"""
Funding tracker analytics computed from stored rounds.

`funding_analytics(rounds, timeframe)` expects FundingRound rows with
`company` and `investor_links.investor` already loaded (see
services.funding.round_load_options) and returns chart-ready dicts.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from datetime import date
from itertools import combinations
from typing import Optional

from cyberintel.models import FundingRound
from cyberintel.utils import iso_now

TIMEFRAME_MONTHS = {"3m": 3, "6m": 6, "12m": 12, "24m": 24, "all": None}
DEFAULT_TIMEFRAME = "12m"


def _month_key(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def _shift_month(d: date, months: int) -> date:
    """First day of the month `months` months before d's month."""
    index = d.year * 12 + (d.month - 1) - months
    return date(index // 12, index % 12 + 1, 1)


def month_range(start: date, end: date) -> list[str]:
    labels = []
    current = date(start.year, start.month, 1)
    while current <= end:
        labels.append(_month_key(current))
        current = _shift_month(current, -1)
    return labels


def window_start(timeframe: str, rounds: list[FundingRound], today: date) -> date:
    months = TIMEFRAME_MONTHS[timeframe]
    if months is None:
        dates = [r.announced_date for r in rounds if r.announced_date]
        return date(min(dates).year, min(dates).month, 1) if dates else date(today.year, today.month, 1)
    return _shift_month(today, months - 1)


def filter_window(rounds: list[FundingRound], start: date, end: date) -> list[FundingRound]:
    return [r for r in rounds if r.announced_date and start <= r.announced_date <= end]


def timeline(rounds: list[FundingRound], start: date, end: date) -> dict:
    labels = month_range(start, end)
    amounts: dict[str, float] = defaultdict(float)
    counts: Counter = Counter()
    for r in rounds:
        key = _month_key(r.announced_date)
        amounts[key] += r.amount_usd or 0
        counts[key] += 1
    return {
        "labels": labels,
        "datasets": [
            {"label": "Total Funding ($M)", "data": [round(amounts[m] / 1_000_000, 1) for m in labels]},
            {"label": "Number of Rounds", "data": [counts[m] for m in labels]},
        ],
    }


def round_types(rounds: list[FundingRound]) -> dict:
    counts = Counter(r.round_type or "Unknown" for r in rounds)
    labels = [label for label, _ in counts.most_common()]
    return {"labels": labels, "datasets": [{"data": [counts[label] for label in labels]}]}


def _round_investor_names(r: FundingRound) -> list[str]:
    return sorted({link.investor.name for link in r.investor_links if link.investor})


def top_investors(rounds: list[FundingRound], limit: int = 5) -> list[dict]:
    stats: dict[str, dict] = {}
    for r in rounds:
        for name in _round_investor_names(r):
            entry = stats.setdefault(name, {"name": name, "investments": 0, "total_amount": 0.0})
            entry["investments"] += 1
            entry["total_amount"] += r.amount_usd or 0
    ranked = sorted(stats.values(), key=lambda e: (e["total_amount"], e["investments"]), reverse=True)
    return ranked[:limit]


def top_sectors(rounds: list[FundingRound], limit: int = 5) -> list[dict]:
    stats: dict[str, dict] = {}
    for r in rounds:
        sector = (r.company.primary_category if r.company else "") or "Other"
        entry = stats.setdefault(sector, {"sector": sector, "deals": 0, "total_funding": 0.0})
        entry["deals"] += 1
        entry["total_funding"] += r.amount_usd or 0
    ranked = sorted(stats.values(), key=lambda e: (e["total_funding"], e["deals"]), reverse=True)
    return ranked[:limit]


def investor_networks(rounds: list[FundingRound], limit: int = 10) -> list[dict]:
    pairs: dict[tuple[str, str], dict] = {}
    for r in rounds:
        for a, b in combinations(_round_investor_names(r), 2):
            entry = pairs.setdefault((a, b), {"count": 0, "amount": 0.0})
            entry["count"] += 1
            entry["amount"] += r.amount_usd or 0
    if not pairs:
        return []

    max_count = max(e["count"] for e in pairs.values())
    ranked = sorted(pairs.items(), key=lambda kv: (-kv[1]["count"], -kv[1]["amount"], kv[0]))
    return [
        {
            "investor_a": a,
            "investor_b": b,
            "co_investment_count": e["count"],
            "total_amount": e["amount"],
            "relationship_strength": round(e["count"] / max_count, 2),
        }
        for (a, b), e in ranked[:limit]
    ]


def growth_rate(rounds: list[FundingRound], start: date, end: date) -> float:
    """Percent change in funding, second half of the window vs the first."""
    midpoint = start + (end - start) / 2
    first = sum(r.amount_usd or 0 for r in rounds if r.announced_date < midpoint)
    second = sum(r.amount_usd or 0 for r in rounds if r.announced_date >= midpoint)
    if first <= 0:
        return 0.0
    return round((second - first) / first * 100, 1)


def summary(rounds: list[FundingRound], start: date, end: date) -> dict:
    total = sum(r.amount_usd or 0 for r in rounds)
    investors = {name for r in rounds for name in _round_investor_names(r)}
    return {
        "total_funding": total,
        "total_rounds": len(rounds),
        "average_round_size": round(total / len(rounds)) if rounds else 0,
        "unique_investors": len(investors),
        "unique_companies": len({r.company_id for r in rounds}),
        "growth_rate": growth_rate(rounds, start, end),
        "last_updated": iso_now(),
    }


def funding_analytics(
    rounds: list[FundingRound],
    timeframe: str = DEFAULT_TIMEFRAME,
    today: Optional[date] = None,
) -> dict:
    if timeframe not in TIMEFRAME_MONTHS:
        raise ValueError(f"Unknown timeframe: {timeframe}")
    today = today or date.today()
    start = window_start(timeframe, rounds, today)
    in_window = filter_window(rounds, start, today)

    return {
        "timeframe": timeframe,
        "period": {"start": start.isoformat(), "end": today.isoformat()},
        "timeline": timeline(in_window, start, today),
        "round_types": round_types(in_window),
        "top_investors": top_investors(in_window),
        "top_sectors": top_sectors(in_window),
        "investor_networks": investor_networks(in_window),
        "summary": summary(in_window, start, today),
    }
