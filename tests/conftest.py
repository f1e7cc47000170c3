"""Shared fixtures: temporary SQLite database, ASGI client, seeded dataset."""

import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="cyberintel-tests-")

# Must be set before cyberintel.config is imported.
os.environ["DATABASE_URL"] = ""
os.environ["DATABASE_URL_FALLBACK"] = f"sqlite+aiosqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["ENABLE_INGESTION"] = "false"
os.environ["RATE_LIMIT_MAX_REQUESTS"] = "10000"
os.environ["LLM_API_KEY"] = ""
os.environ["OPENAI_API_KEY"] = ""
os.environ["BLOCKED_IPS"] = ""

import pytest
from httpx import ASGITransport, AsyncClient

from cyberintel.app import app
from cyberintel.database import async_session, drop_db, engine, init_db
from cyberintel.embeddings import get_vector_store
from cyberintel.security import audit_log, rate_limiter
from cyberintel.seed import seed_database
from cyberintel.services.company_analysis import clear_market_cache


@pytest.fixture
async def db():
    """Fresh schema for every test."""
    await drop_db()
    await init_db()
    rate_limiter.reset()
    audit_log.clear()
    get_vector_store().clear()
    clear_market_cache()
    yield
    await engine.dispose()


@pytest.fixture
async def session(db):
    async with async_session() as s:
        yield s


@pytest.fixture
async def client(db):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def seeded(db):
    """Load the built-in sample dataset."""
    async with async_session() as s:
        report = await seed_database(s)
        await s.commit()
    return report
