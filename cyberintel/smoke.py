"""
Smoke check for a running API.

Waits for /health to report healthy, then calls every read endpoint once and
prints status code and latency.

Usage:
    cyberintel-smoke                                   # against $BACKEND_URL
    cyberintel-smoke --url http://localhost:8000 --timeout 60 --interval 2
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from dataclasses import dataclass

import httpx

from cyberintel import config
from cyberintel.services.api_client import CyberIntelAPI

logger = logging.getLogger(__name__)

ENDPOINTS = [
    ("/health", None),
    ("/funding-rounds/", {"limit": 5}),
    ("/companies/", None),
    ("/investors/", None),
    ("/conventions/", {"active": "true"}),
    ("/conventions/companies", None),
    ("/dashboard/stats", {"type": "summary"}),
    ("/dashboard/stats", {"type": "kpis"}),
    ("/dashboard/stats", {"type": "alerts"}),
    ("/dashboard/stats", {"type": "realtime"}),
    ("/funding-tracker/analytics", {"timeframe": "12m"}),
    ("/portfolio/", {"view": "overview"}),
    ("/rag-search/", {"action": "stats"}),
    ("/security/status", None),
    ("/analysis/status", None),
    ("/ingest/status", None),
]


@dataclass
class EndpointResult:
    path: str
    params: dict | None
    status: int | None
    elapsed_ms: float
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status is not None and 200 <= self.status < 300

    def describe(self) -> str:
        query = "&".join(f"{k}={v}" for k, v in (self.params or {}).items())
        target = f"{self.path}?{query}" if query else self.path
        status = self.status if self.status is not None else "ERR"
        line = f"{'OK  ' if self.ok else 'FAIL'} {status} {self.elapsed_ms:8.1f}ms  {target}"
        return f"{line}  ({self.error})" if self.error else line


async def wait_for_health(api: CyberIntelAPI, timeout: float = 60, interval: float = 2) -> bool:
    """Poll /health until it reports healthy or `timeout` seconds pass."""
    deadline = time.monotonic() + timeout
    attempt = 0
    while True:
        attempt += 1
        body = await api.health()
        status = body.get("status")
        if status == "healthy":
            logger.info("API healthy after %d attempt(s)", attempt)
            return True
        logger.info("Attempt %d: status=%s", attempt, status)
        if time.monotonic() + interval > deadline:
            return False
        await asyncio.sleep(interval)


async def check_endpoints(client: httpx.AsyncClient, endpoints=ENDPOINTS) -> list[EndpointResult]:
    results = []
    for path, params in endpoints:
        started = time.perf_counter()
        try:
            resp = await client.get(path, params=params)
            status, error = resp.status_code, ""
        except httpx.HTTPError as e:
            status, error = None, str(e)
        elapsed = (time.perf_counter() - started) * 1000
        results.append(EndpointResult(path, params, status, round(elapsed, 1), error))
    return results


async def run(url: str, timeout: float, interval: float) -> int:
    async with CyberIntelAPI(url) as api:
        if not await wait_for_health(api, timeout=timeout, interval=interval):
            print(f"API at {url} did not become healthy within {timeout:.0f}s")
            return 2

    async with httpx.AsyncClient(base_url=url, timeout=30) as client:
        results = await check_endpoints(client)

    for result in results:
        print(result.describe())
    failed = [r for r in results if not r.ok]
    print(f"\n{len(results) - len(failed)}/{len(results)} endpoints OK")
    return 1 if failed else 0


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    parser = argparse.ArgumentParser(description="Smoke-check a running CyberIntel API")
    parser.add_argument("--url", default=config.BACKEND_URL)
    parser.add_argument("--timeout", type=float, default=60, help="Seconds to wait for /health")
    parser.add_argument("--interval", type=float, default=2, help="Seconds between health polls")
    args = parser.parse_args()
    sys.exit(asyncio.run(run(args.url.rstrip("/"), args.timeout, args.interval)))


if __name__ == "__main__":
    main()
