# cyberintel -- cybersecurity startup funding intelligence API
#
# Modules:
#   app        -- FastAPI application with lifespan management and /health
#   config     -- settings from environment / .env
#   database   -- PostgreSQL / SQLite async engine
#   models     -- SQLAlchemy ORM models (companies, rounds, investors, portfolio, ...)
#   schemas    -- Pydantic request/response schemas
#   security   -- rate limiter, audit log, input sanitisation, middleware
#   embeddings -- hashed bag-of-words vectors + in-memory company store
#   seed       -- sample dataset / CSV loader
#   launcher   -- seed then exec uvicorn
#   smoke      -- poll /health and hit every read endpoint
#   routes/    -- API endpoints
#   services/  -- aggregation, portfolio maths, LLM analyst, ingestion
#   parsers/   -- funding news extraction and RSS feeds
