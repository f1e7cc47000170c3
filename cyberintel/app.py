"""
FastAPI application -- cybersecurity funding intelligence API.

Run locally:
    uvicorn cyberintel.app:app --reload --port 8000

or `cyberintel-serve --seed` to create tables and load the sample dataset first.
"""

from __future__ import annotations

import logging
import sys
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from cyberintel import config
from cyberintel.database import DATABASE_URL, init_db, ping_db
from cyberintel.routes import (
    analysis,
    analytics,
    companies,
    conventions,
    dashboard,
    funding_rounds,
    ingest,
    investors,
    portfolio,
    search,
    security,
)
from cyberintel.security import security_middleware
from cyberintel.utils import iso_now

logger = logging.getLogger(__name__)

STARTED_AT = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()

    # Background funding news ingestion
    scheduler = None
    if config.ENABLE_INGESTION:
        try:
            from cyberintel.parsers.scheduler import get_ingestion_scheduler

            scheduler = get_ingestion_scheduler()
            scheduler.start(interval_hours=config.INGESTION_INTERVAL_HOURS)
        except Exception as e:
            logger.warning("Failed to start ingestion scheduler: %s", e)

    yield

    if scheduler and scheduler.is_running:
        scheduler.stop()


app = FastAPI(
    title="CyberIntel API",
    version=config.APP_VERSION,
    description="Cybersecurity startup funding intelligence -- rounds, investors, portfolio and market analytics",
    lifespan=lifespan,
)

app.middleware("http")(security_middleware)

app.include_router(funding_rounds.router)
app.include_router(companies.router)
app.include_router(investors.router)
app.include_router(conventions.router)
app.include_router(dashboard.router)
app.include_router(analytics.router)
app.include_router(portfolio.router)
app.include_router(search.router)
app.include_router(ingest.router)
app.include_router(analysis.router)
app.include_router(security.router)


def _memory_mb() -> float | None:
    """Peak resident set size of this process in MB."""
    try:
        import resource
    except ImportError:  # not available on Windows
        return None
    peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # bytes on macOS, kilobytes on Linux
    divisor = 1024 * 1024 if sys.platform == "darwin" else 1024
    return round(peak / divisor, 1)


def _configured(value: str) -> str:
    return "configured" if value else "not-configured"


@app.get("/health")
async def health():
    """Health check endpoint."""
    try:
        db_ok = await ping_db()
        db_error = None
    except Exception as e:
        logger.error("Database health check failed: %s", e)
        db_ok, db_error = False, str(e)

    body = {
        "status": "healthy" if db_ok else "unhealthy",
        "timestamp": iso_now(),
        "version": config.APP_VERSION,
        "environment": config.ENVIRONMENT,
        "uptime": round(time.monotonic() - STARTED_AT, 1),
        "memory": {"max_rss_mb": _memory_mb()},
        "database": {
            "reachable": db_ok,
            "backend": "postgresql" if DATABASE_URL.startswith("postgresql") else "sqlite",
        },
        "services": {
            "brightdata": _configured(config.BRIGHTDATA_API_KEY),
            "crunchbase": _configured(config.CRUNCHBASE_API_KEY),
            "database": _configured(config.DATABASE_URL),
            "llm": _configured(config.LLM_API_KEY),
            "ingestion": "enabled" if config.ENABLE_INGESTION else "disabled",
        },
    }
    if db_error:
        body["error"] = db_error
    return JSONResponse(body, status_code=200 if db_ok else 503)
