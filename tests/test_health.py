"""Tests for /health, the platform API client and the smoke-check helpers."""

from httpx import ASGITransport, AsyncClient

from cyberintel.app import app
from cyberintel.services.api_client import CyberIntelAPI
from cyberintel.smoke import EndpointResult, check_endpoints, wait_for_health


# ── Helpers ─────────────────────────────────────────────────────────


def _api():
    """API client whose HTTP calls go straight into the ASGI app."""
    api = CyberIntelAPI("http://test")
    api._client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
    return api


# ── /health ─────────────────────────────────────────────────────────


async def test_health_reports_database_and_services(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "healthy"
    assert body["database"] == {"reachable": True, "backend": "sqlite"}
    assert body["services"]["llm"] == "not-configured"
    assert body["services"]["ingestion"] == "disabled"
    assert body["uptime"] >= 0
    assert "version" in body and "environment" in body


# ── API client ──────────────────────────────────────────────────────


async def test_api_client_reads_endpoints(db, seeded):
    async with _api() as api:
        assert (await api.health())["status"] == "healthy"
        rounds = await api.list_funding_rounds(limit=2, round_type="Seed")
        assert rounds["pagination"]["total"] == 2
        stats = await api.get_stats("summary")
        assert stats["data"]["companies"]["total"] == 8
        portfolio = await api.get_portfolio()
        assert portfolio["data"]["summary"]["total_companies"] == 5
        analysis = await api.analyze_company("ThreatLock")
        assert analysis["source"] == "fallback"


async def test_api_client_returns_none_on_http_error(db):
    async with _api() as api:
        assert await api.get_analytics("5y") is None


async def test_api_client_health_when_unreachable():
    async with CyberIntelAPI("http://127.0.0.1:9", timeout=2) as api:
        body = await api.health()
    assert body["status"] == "unavailable"


# ── Smoke checks ────────────────────────────────────────────────────


async def test_smoke_checks_pass_on_seeded_app(client, seeded):
    results = await check_endpoints(client)
    failed = [r.describe() for r in results if not r.ok]
    assert failed == []


async def test_wait_for_health(db):
    async with _api() as api:
        assert await wait_for_health(api, timeout=5, interval=0.1) is True


def test_endpoint_result_describe():
    ok = EndpointResult("/dashboard/stats", {"type": "kpis"}, 200, 12.5)
    assert ok.ok
    assert "/dashboard/stats?type=kpis" in ok.describe()
    failed = EndpointResult("/health", None, None, 3.0, "connection refused")
    assert not failed.ok
    assert failed.describe().startswith("FAIL ERR")
