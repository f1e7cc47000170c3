"""Tests for the AI company analyst: JSON parsing, fallback analysis and the endpoint."""

from cyberintel.services import company_analysis as ca
from cyberintel.services.llm_client import LLMClient, clean_json_response, parse_json_object


# ── Helpers ─────────────────────────────────────────────────────────


class CannedLLM:
    """Answers every prompt with the same JSON object."""

    is_configured = True

    def __init__(self, answer):
        self.answer = answer
        self.prompts = []

    async def complete_json(self, prompt, max_tokens=1000, temperature=0.3):
        self.prompts.append(prompt)
        return dict(self.answer) if self.answer is not None else None


# ── JSON handling ───────────────────────────────────────────────────


def test_clean_json_response_strips_fences():
    raw = 'Sure!\n```json\n{"recommendation": "buy"}\n```\nThanks'
    assert clean_json_response(raw) == '{"recommendation": "buy"}'
    assert parse_json_object(raw) == {"recommendation": "buy"}


def test_parse_json_object_rejects_non_objects():
    assert parse_json_object("") is None
    assert parse_json_object("not json at all") is None
    assert parse_json_object("[1, 2, 3]") is None


def test_unconfigured_client():
    llm = LLMClient(api_key="")
    assert llm.is_configured is False


def test_normalise_answer_clamps_fields():
    answer = ca.normalise_answer({"recommendation": "yolo", "confidence": 150}, "Acme", True)
    assert answer["recommendation"] == "hold"
    assert answer["confidence"] == 100
    assert answer["company_name"] == "Acme"
    assert answer["found"] is True


# ── Service ─────────────────────────────────────────────────────────


async def test_llm_answer_is_used_when_valid(session, seeded):
    llm = CannedLLM({"overview": "Strong endpoint player", "recommendation": "buy", "confidence": "80"})
    result = await ca.analyze_company(session, llm, "ThreatLock", "quick")
    assert result["source"] == "llm"
    assert result["recommendation"] == "buy"
    assert result["confidence"] == 80
    assert result["found"] is True
    assert "ThreatLock" in llm.prompts[0]


async def test_llm_answer_cannot_override_response_fields(session, seeded):
    llm = CannedLLM({"recommendation": "buy", "success": False, "source": "made-up", "query": "other", "timestamp": "x"})
    result = await ca.analyze_company(session, llm, "ThreatLock", "quick")
    assert result["success"] is True
    assert result["source"] == "llm"
    assert result["query"] == "ThreatLock"
    assert result["timestamp"] != "x"
    assert result["recommendation"] == "buy"


async def test_unparsable_llm_answer_falls_back(session, seeded):
    result = await ca.analyze_company(session, CannedLLM(None), "ThreatLock", "comprehensive")
    assert result["source"] == "fallback"
    assert result["error"] == "AI service unavailable, using fallback analysis"
    assert result["company_name"] == "ThreatLock"


async def test_fallback_for_unknown_company(session, seeded):
    result = await ca.analyze_company(session, LLMClient(api_key=""), "Quantum Widgets", "quick")
    assert result["found"] is False
    assert result["recommendation"] == "hold"
    assert result["context_data"]["similar_companies"] == ["QuantumSec"]


async def test_market_context_is_cached(session, seeded):
    first = await ca.get_market_context(session)
    assert first["market_analysis"]["total_companies"] == 8
    assert first["top_companies"][0]["name"] == "CloudGuard Security"
    assert await ca.get_market_context(session) is first
    ca.clear_market_cache()
    assert await ca.get_market_context(session) is not first


def test_build_prompt_variants():
    market = {
        "top_companies": [],
        "funding_trends": [],
        "market_analysis": {"total_companies": 0, "total_funding": 0, "average_funding": 0},
    }
    quick = ca.build_prompt("Acme", "quick", None, [], market)
    assert "Company not found in database." in quick
    full = ca.build_prompt("Acme", "comprehensive", None, [], market)
    assert 'Company "Acme" not found in database.' in full
    assert "MARKET CONTEXT:" in full


# ── Endpoint ────────────────────────────────────────────────────────


async def test_analysis_endpoint_fallback(client, seeded):
    resp = await client.post("/analysis/company", json={"company_name": "ThreatLock", "analysis_type": "quick"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["source"] == "fallback"
    assert body["found"] is True
    assert body["recommendation"] == "hold"
    assert body["context_data"]["has_company_data"] is True
    assert body["error"] == "AI configuration missing, using database analysis"

    again = (await client.post("/analysis/company", json={"company_name": "ThreatLock"})).json()
    assert again["context_data"]["cache_used"] is True


async def test_analysis_endpoint_validation(client):
    resp = await client.post("/analysis/company", json={"company_name": "   "})
    assert resp.status_code == 400
    resp = await client.post("/analysis/company", json={"company_name": "Acme", "analysis_type": "deep"})
    assert resp.status_code == 400


async def test_analysis_status(client):
    body = (await client.get("/analysis/status")).json()
    assert body["llm_configured"] is False
    assert body["analysis_types"] == ["comprehensive", "quick"]
    assert len(body["agents"]) == 2
