# Configuration from environment variables (.env or deployment variables).

import os
from dotenv import load_dotenv

load_dotenv()


def _env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _env_bool(key: str, default: str = "false") -> bool:
    return _env(key, default).lower() in ("1", "true", "yes")


def _env_int(key: str, default: int) -> int:
    try:
        return int(_env(key, str(default)))
    except ValueError:
        return default


def _env_list(key: str, default: list = None) -> list:
    s = _env(key)
    if not s:
        return default or []
    return [x.strip() for x in s.strip("[]").split(",") if x.strip()]


# ============================================================================
# Application
# ============================================================================
APP_VERSION = _env("APP_VERSION", "1.0.0")
ENVIRONMENT = _env("ENVIRONMENT", "development")

# ============================================================================
# Database
# ============================================================================
DATABASE_URL = _env("DATABASE_URL")
DATABASE_URL_FALLBACK = _env("DATABASE_URL_FALLBACK", "sqlite+aiosqlite:///./cyberintel.db")

# ============================================================================
# Security
# ============================================================================
RATE_LIMIT_MAX_REQUESTS = _env_int("RATE_LIMIT_MAX_REQUESTS", 60)
RATE_LIMIT_WINDOW_SECONDS = _env_int("RATE_LIMIT_WINDOW_SECONDS", 60)
AUDIT_LOG_MAX_ENTRIES = _env_int("AUDIT_LOG_MAX_ENTRIES", 1000)
BLOCKED_IPS = _env_list("BLOCKED_IPS")

# ============================================================================
# Funding news ingestion
# ============================================================================
ENABLE_INGESTION = _env_bool("ENABLE_INGESTION", "false")
INGESTION_INTERVAL_HOURS = _env_int("INGESTION_INTERVAL_HOURS", 6)

# ============================================================================
# LLM (OpenAI-compatible) -- company analysis agents
# ============================================================================
LLM_API_KEY = _env("LLM_API_KEY", _env("OPENAI_API_KEY"))
LLM_BASE_URL = _env("LLM_BASE_URL", "https://api.openai.com/v1")
LLM_MODEL = _env("LLM_MODEL", "gpt-4o-mini")
LLM_MAX_TOKENS = _env_int("LLM_MAX_TOKENS", 1500)
LLM_TEMPERATURE = float(_env("LLM_TEMPERATURE", "0.3") or "0.3")

# ============================================================================
# External data providers (reported in /health only)
# ============================================================================
CRUNCHBASE_API_KEY = _env("CRUNCHBASE_API_KEY")
BRIGHTDATA_API_KEY = _env("BRIGHTDATA_API_KEY")

# Platform API URL (smoke checks, API client)
BACKEND_URL = _env("BACKEND_URL", "http://localhost:8000")
