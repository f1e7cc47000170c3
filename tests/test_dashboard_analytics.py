"""Tests for dashboard stat cards and funding tracker analytics."""

from datetime import date
from types import SimpleNamespace

import pytest

from cyberintel.services.analytics import (
    funding_analytics,
    growth_rate,
    month_range,
    window_start,
)


# ── Helpers ─────────────────────────────────────────────────────────


def _round(day, amount, investors, round_type="Series A", category="Cloud Security", company_id=1):
    return SimpleNamespace(
        announced_date=day,
        amount_usd=amount,
        round_type=round_type,
        company_id=company_id,
        company=SimpleNamespace(primary_category=category),
        investor_links=[SimpleNamespace(investor=SimpleNamespace(name=n)) for n in investors],
    )


async def _stats(client, stat_type):
    resp = await client.get("/dashboard/stats", params={"type": stat_type})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    return body


# ── Dashboard ───────────────────────────────────────────────────────


async def test_summary_stats(client, seeded):
    data = (await _stats(client, "summary"))["data"]
    assert data["companies"]["total"] == 8
    assert data["funding"]["total"] == 306_500_000
    assert data["funding"]["formatted"] == "$0.3B"
    assert data["conventions"]["total"] == 3
    assert data["portfolio"]["total"] == 5


async def test_unknown_type_falls_back_to_summary(client, seeded):
    data = (await _stats(client, "bogus"))["data"]
    assert set(data) == {"companies", "funding", "conventions", "portfolio"}


async def test_kpi_stats(client, seeded):
    data = (await _stats(client, "kpis"))["data"]
    assert data["financial"]["total_market_value"] == 306_500_000
    assert data["financial"]["average_company_value"] == pytest.approx(306_500_000 / 8)
    assert data["financial"]["portfolio_value"] == 176_500_000
    assert data["operational"] == {
        "companies_tracked": 8,
        "portfolio_size": 5,
        "active_conventions": 3,
        "convention_reach": 6,
    }
    assert data["performance"]["data_quality"] == 100
    assert data["performance"]["market_coverage"] == 7


async def test_kpis_on_empty_database(client):
    data = (await _stats(client, "kpis"))["data"]
    assert data["financial"]["average_company_value"] == 0
    assert data["performance"]["portfolio_health"] == 0


async def test_alert_stats(client, seeded):
    data = (await _stats(client, "alerts"))["data"]
    assert len(data["alerts"]) <= 5
    ids = [a["id"] for a in data["alerts"]]
    assert ids[-1] == "system-health"
    assert data["summary"]["total"] == len(data["alerts"])


async def test_realtime_stats_come_from_request_log(client, seeded):
    await client.get("/companies/")
    await client.get("/investors/")
    body = await _stats(client, "realtime")
    assert body["data"]["api_requests"]["current"] == 2
    assert body["data"]["active_users"]["current"] == 1
    assert body["data"]["error_count"]["current"] == 0
    assert body["next_update"] > body["timestamp"]


# ── Analytics (pure) ────────────────────────────────────────────────


def test_month_range_and_window():
    assert month_range(date(2023, 11, 5), date(2024, 2, 1)) == ["2023-11", "2023-12", "2024-01", "2024-02"]
    assert window_start("3m", [], date(2024, 3, 15)) == date(2024, 1, 1)
    rounds = [_round(date(2022, 6, 9), 1, [])]
    assert window_start("all", rounds, date(2024, 3, 15)) == date(2022, 6, 1)


def test_growth_rate_compares_window_halves():
    rounds = [_round(date(2024, 1, 5), 10, []), _round(date(2024, 1, 25), 15, [])]
    assert growth_rate(rounds, date(2024, 1, 1), date(2024, 1, 31)) == 50.0
    assert growth_rate([], date(2024, 1, 1), date(2024, 1, 31)) == 0.0


def test_funding_analytics_window_and_networks():
    rounds = [
        _round(date(2024, 1, 10), 10_000_000, ["Xcap", "Yvc"], "Seed", "Cloud Security", 1),
        _round(date(2024, 2, 20), 20_000_000, ["Xcap", "Yvc", "Zfund"], "Series A", "AI Security", 2),
        _round(date(2023, 1, 5), 5_000_000, ["Zfund"], "Seed", "IoT Security", 3),
    ]
    data = funding_analytics(rounds, "6m", today=date(2024, 3, 10))

    assert data["period"] == {"start": "2023-10-01", "end": "2024-03-10"}
    assert data["timeline"]["labels"] == ["2023-10", "2023-11", "2023-12", "2024-01", "2024-02", "2024-03"]
    funding, counts = data["timeline"]["datasets"]
    assert funding["data"] == [0, 0, 0, 10.0, 20.0, 0]
    assert counts["data"] == [0, 0, 0, 1, 1, 0]

    assert data["summary"]["total_rounds"] == 2
    assert data["summary"]["total_funding"] == 30_000_000
    assert data["summary"]["unique_investors"] == 3
    assert data["summary"]["average_round_size"] == 15_000_000

    assert {i["name"] for i in data["top_investors"][:2]} == {"Xcap", "Yvc"}
    assert data["top_investors"][0]["investments"] == 2
    assert data["top_sectors"][0] == {"sector": "AI Security", "deals": 1, "total_funding": 20_000_000}

    networks = data["investor_networks"]
    assert networks[0]["investor_a"] == "Xcap" and networks[0]["investor_b"] == "Yvc"
    assert networks[0]["co_investment_count"] == 2
    assert networks[0]["relationship_strength"] == 1.0
    assert {n["relationship_strength"] for n in networks[1:]} == {0.5}


def test_funding_analytics_rejects_unknown_timeframe():
    with pytest.raises(ValueError):
        funding_analytics([], "5y")


# ── Analytics endpoint ──────────────────────────────────────────────


async def test_analytics_endpoint_all_time(client, seeded):
    resp = await client.get("/funding-tracker/analytics", params={"timeframe": "all"})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["summary"]["total_rounds"] == 8
    assert data["summary"]["total_funding"] == 306_500_000
    assert data["timeline"]["labels"][0] == "2023-11"
    assert sum(data["round_types"]["datasets"][0]["data"]) == 8
    # Sequoia and Lightspeed: both rounds of ThreatLock and IoT Secure
    top = data["top_investors"][0]
    assert top["name"] in ("Sequoia Capital", "Lightspeed Venture Partners")
    assert top["total_amount"] == 120_000_000
    assert top["investments"] == 2


async def test_analytics_endpoint_default_and_invalid(client, seeded):
    resp = await client.get("/funding-tracker/analytics")
    assert resp.status_code == 200
    assert resp.json()["data"]["timeframe"] == "12m"
    assert len(resp.json()["data"]["timeline"]["labels"]) == 12

    resp = await client.get("/funding-tracker/analytics", params={"timeframe": "5y"})
    assert resp.status_code == 400
