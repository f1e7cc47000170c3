"""Tests for portfolio maths and the /portfolio endpoints."""

from datetime import date

import pytest

from cyberintel import seed_data
from cyberintel.models import PortfolioCompany
from cyberintel.services import portfolio as pf


# ── Helpers ─────────────────────────────────────────────────────────


def _holdings():
    return [PortfolioCompany(**row) for row in seed_data.PORTFOLIO]


def _by_id(companies, company_id):
    return next(c for c in companies if c.id == company_id)


# ── Valuation maths ─────────────────────────────────────────────────


def test_holding_value_and_multiple():
    companies = _holdings()
    pangea = _by_id(companies, "pangea-001")
    assert pf.holding_value(pangea) == pytest.approx(15_000_000)
    assert pf.multiple(pangea) == pytest.approx(1.0)
    concentric = _by_id(companies, "concentric-002")
    assert pf.multiple(concentric) == pytest.approx(1.2)
    assert pf.multiple(PortfolioCompany(id="x", name="x", investment_amount=0)) == 0


def test_portfolio_analytics_totals():
    data = pf.portfolio_analytics(_holdings(), today=date(2024, 6, 1))
    assert data["total_invested"] == pytest.approx(176_500_000)
    assert data["total_portfolio_value"] == pytest.approx(181_860_000)
    assert data["unrealized_gains"] == pytest.approx(5_360_000)
    assert data["realized_gains"] == 0
    assert data["moic"] == pytest.approx(181_860_000 / 176_500_000)
    assert data["risk_distribution"] == {"low": 2, "medium": 3, "high": 0}
    assert data["top_performers"][0]["company_id"] == "concentric-002"

    pipeline = data["exit_pipeline"]
    assert [p["company_id"] for p in pipeline] == ["veza-004", "concentric-002", "pangea-001", "nudge-003"]
    assert pipeline[0]["estimated_value"] == pytest.approx(276_000_000)

    stages = {s["stage"]: s for s in data["performance_by_stage"]}
    assert stages["series-b"]["companies"] == 2
    focus = {f["focus_area"]: f for f in data["performance_by_focus"]}
    assert focus["workforce-security"]["avg_growth_rate"] == pytest.approx(120)


def test_irr_uses_average_holding_period():
    holding = PortfolioCompany(
        id="x", name="x", investment_amount=100, current_valuation=400,
        ownership_percentage=50, investment_date=date(2022, 1, 1),
    )
    years = 730 / 365.25
    assert pf.calculate_irr([holding], today=date(2024, 1, 1)) == pytest.approx(2 ** (1 / years) - 1)
    assert pf.average_holding_years([PortfolioCompany(id="y", name="y")]) == pf.DEFAULT_HOLDING_YEARS
    assert pf.calculate_irr([]) == 0


def test_assess_risk():
    assert pf.assess_risk(PortfolioCompany(runway=6, market_traction=80, customer_count=10)) == "high"
    assert pf.assess_risk(PortfolioCompany(runway=18, market_traction=10, customer_count=0)) == "high"
    assert pf.assess_risk(PortfolioCompany(runway=30, revenue_growth=200, market_traction=80, customer_count=5)) == "low"
    assert pf.assess_risk(PortfolioCompany(runway=18, revenue_growth=200, market_traction=80, customer_count=5)) == "medium"


def test_apply_metrics_update():
    pangea = _by_id(_holdings(), "pangea-001")
    changed = pf.apply_metrics_update(pangea, {"runway": "30", "unknown_field": 1})
    assert changed == ["runway", "risk_level"]
    assert pangea.runway == 30
    assert pangea.risk_level == "low"

    with pytest.raises(ValueError):
        pf.apply_metrics_update(pangea, {"arr": "lots"})


def test_focus_and_stage_analytics():
    workforce = [c for c in _holdings() if c.focus_area == "workforce-security"]
    focus = pf.focus_analytics(workforce)
    assert focus["total_companies"] == 2
    assert focus["top_performer"] == "Nudge Security"
    assert pf.focus_analytics([])["top_performer"] is None

    series_b = [c for c in _holdings() if c.investment_stage == "series-b"]
    stage = pf.stage_analytics(series_b)
    assert stage["total_invested"] == pytest.approx(135_000_000)
    assert stage["average_runway"] == pytest.approx(27)


# ── Endpoints ───────────────────────────────────────────────────────


async def test_overview(client, seeded):
    resp = await client.get("/portfolio/")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["summary"]["total_companies"] == 5
    assert data["summary"]["total_invested"] == pytest.approx(176_500_000)
    assert len(data["companies"]) == 5
    assert data["companies"][0]["ai_insights"]["investment_recommendation"]


async def test_company_view(client, seeded):
    resp = await client.get("/portfolio/", params={"view": "company", "company_id": "veza-004"})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["company"]["name"] == "Veza Inc."
    assert data["company"]["potential_acquirers"] == ["Microsoft", "Okta", "SailPoint"]
    assert data["recommendations"]["current_recommendation"] == "strong_buy"

    assert (await client.get("/portfolio/", params={"view": "company"})).status_code == 400
    missing = await client.get("/portfolio/", params={"view": "company", "company_id": "nope"})
    assert missing.status_code == 404


async def test_focus_and_stage_views(client, seeded):
    focus = (await client.get("/portfolio/", params={"view": "focus", "focus_area": "workforce-security"})).json()
    assert len(focus["data"]["companies"]) == 2
    assert focus["data"]["analytics"]["top_performer"] == "Nudge Security"

    stage = (await client.get("/portfolio/", params={"view": "stage", "stage": "series-b"})).json()
    assert {c["id"] for c in stage["data"]["companies"]} == {"concentric-002", "veza-004"}


async def test_invalid_view(client):
    assert (await client.get("/portfolio/", params={"view": "bogus"})).status_code == 400


async def test_update_metrics_recomputes_risk(client, seeded):
    resp = await client.post(
        "/portfolio/actions",
        json={"action": "update-metrics", "company_id": "reach-005", "data": {"runway": 8}},
    )
    assert resp.status_code == 200
    body = resp.json()["data"]
    assert body["updated_fields"] == ["runway", "risk_level"]
    assert body["risk_level"] == "high"

    company = (await client.get("/portfolio/", params={"view": "company", "company_id": "reach-005"})).json()
    assert company["data"]["company"]["runway"] == 8
    assert company["data"]["company"]["risk_level"] == "high"


async def test_update_metrics_rejects_bad_values(client, seeded):
    resp = await client.post(
        "/portfolio/actions",
        json={"action": "update-metrics", "company_id": "reach-005", "data": {"arr": "lots"}},
    )
    assert resp.status_code == 400


async def test_generate_insights_fallback(client, seeded):
    resp = await client.post("/portfolio/actions", json={"action": "generate-insights", "company_id": "reach-005"})
    data = resp.json()["data"]
    assert data["source"] == "fallback"
    assert data["investment_recommendation"] == "hold"
    assert data["key_risks"] == ["Crowded training market", "Early revenue"]


async def test_portfolio_analysis_and_invalid_action(client, seeded):
    resp = await client.post("/portfolio/actions", json={"action": "portfolio-analysis"})
    assert resp.status_code == 200
    assert len(resp.json()["data"]["companies"]) == 5

    assert (await client.post("/portfolio/actions", json={"action": "delete-everything"})).status_code == 400
