"""Tests for /rag-search over the seeded companies."""


async def _search(client, **params):
    resp = await client.get("/rag-search/", params=params)
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


async def test_init_loads_all_companies(client, seeded):
    data = await _search(client, action="init")
    assert data["companies_loaded"] == 8


async def test_search_autoloads_and_enriches(client, seeded):
    data = await _search(client, action="search", query="cloud security posture", limit=3)
    assert data["total_results"] == 3
    by_name = {r["company"]["name"]: r for r in data["results"]}
    assert "CloudGuard Security" in by_name
    cloud = by_name["CloudGuard Security"]
    assert cloud["match_score"] == round(cloud["score"] * 100)
    assert cloud["company_details"]["latest_round"]["amount_usd"] == 120_000_000
    assert cloud["company_details"]["country"] == "United Kingdom"
    scores = [r["score"] for r in data["results"]]
    assert scores == sorted(scores, reverse=True)


async def test_category_and_stats(client, seeded):
    data = await _search(client, action="category", category="ai security")
    assert {c["name"] for c in data["companies"]} == {"CyberShield AI", "AI Sentinel"}

    stats = await _search(client, action="stats")
    assert stats["total_companies"] == 8
    assert stats["categories"]["AI Security"] == 2
    assert stats["embedding_dim"] == 100


async def test_unknown_action(client):
    resp = await client.get("/rag-search/", params={"action": "delete"})
    assert resp.status_code == 400


async def test_new_round_company_is_searchable_without_reinit(client, seeded):
    await _search(client, action="init")
    resp = await client.post("/funding-rounds/", json={
        "company_name": "Kestrel Deception",
        "description": "Honeypot deception grid for industrial control networks",
        "primary_category": "Deception Technology",
        "announced_date": "2024-05-01",
        "round_type": "Seed",
        "amount_usd": 4_000_000,
    })
    assert resp.status_code == 201, resp.text

    stats = await _search(client, action="stats")
    assert stats["total_companies"] == 9
    data = await _search(client, action="category", category="deception")
    assert [c["name"] for c in data["companies"]] == ["Kestrel Deception"]
