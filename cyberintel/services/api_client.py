"""
API Client -- thin async HTTP client for the platform's REST API.

Used by the smoke-check CLI and by scripts that want the dashboard data
without going through the database.

Configuration:
    BACKEND_URL env var or fallback to http://localhost:8000
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from cyberintel import config

logger = logging.getLogger(__name__)

TIMEOUT = 30.0


class CyberIntelAPI:
    """Async HTTP client for the funding intelligence API."""

    def __init__(self, base_url: str = config.BACKEND_URL, timeout: float = TIMEOUT):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def base_url(self) -> str:
        return self._base_url

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(base_url=self._base_url, timeout=self._timeout)
        return self._client

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "CyberIntelAPI":
        return self

    async def __aexit__(self, *exc):
        await self.close()

    async def _get(self, path: str, params: dict | None = None) -> Optional[dict]:
        client = await self._get_client()
        try:
            resp = await client.get(path, params=params)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            logger.error("GET %s -> %d: %s", path, e.response.status_code, e.response.text[:200])
            return None
        except httpx.HTTPError as e:
            logger.error("GET %s failed: %s", path, e)
            return None

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    async def health(self) -> dict:
        """Check if the server is alive."""
        client = await self._get_client()
        try:
            resp = await client.get("/health")
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPError as e:
            logger.debug("Health check failed: %s", e)
            return {"status": "unavailable", "error": str(e)}

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------

    async def list_funding_rounds(self, page: int = 1, limit: int = 10, **filters) -> Optional[dict]:
        params = {"page": page, "limit": limit, **{k: v for k, v in filters.items() if v is not None}}
        return await self._get("/funding-rounds/", params=params)

    async def get_stats(self, stat_type: str = "summary") -> Optional[dict]:
        return await self._get("/dashboard/stats", params={"type": stat_type})

    async def get_analytics(self, timeframe: str = "12m") -> Optional[dict]:
        return await self._get("/funding-tracker/analytics", params={"timeframe": timeframe})

    async def get_portfolio(self, view: str = "overview", **params) -> Optional[dict]:
        return await self._get("/portfolio/", params={"view": view, **params})

    async def list_conventions(self, active: bool = False) -> Optional[dict]:
        return await self._get("/conventions/", params={"active": "true"} if active else None)

    async def search(self, query: str, limit: int = 5) -> Optional[dict]:
        return await self._get("/rag-search/", params={"action": "search", "query": query, "limit": limit})

    async def analyze_company(self, company_name: str, analysis_type: str = "quick") -> Optional[dict]:
        client = await self._get_client()
        try:
            resp = await client.post(
                "/analysis/company",
                json={"company_name": company_name, "analysis_type": analysis_type},
            )
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPError as e:
            logger.error("Company analysis call failed for %s: %s", company_name, e)
            return None


_api_client: Optional[CyberIntelAPI] = None


def get_api_client() -> CyberIntelAPI:
    """Get or create the global API client singleton."""
    global _api_client
    if _api_client is None:
        _api_client = CyberIntelAPI()
    return _api_client
