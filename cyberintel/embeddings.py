"""
Lightweight embedding & in-memory vector store for semantic company search.

Documents are embedded with a hashed bag-of-words: every word is hashed into
one of EMBEDDING_DIM buckets, weighted by 1 / (position + 1), and the vector
is L2-normalised. Good enough for a few hundred companies without any model
download; search is a cosine-similarity scan.

Usage:
    python -m cyberintel.embeddings "cloud identity security"
"""

from __future__ import annotations

import asyncio
import logging
import re
import threading
from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from sqlalchemy import select

logger = logging.getLogger(__name__)

EMBEDDING_DIM = 100

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")


def _word_hash(word: str) -> int:
    """31-multiplier string hash with 32-bit signed overflow."""
    h = 0
    for ch in word:
        h = ((h << 5) - h + ord(ch)) & 0xFFFFFFFF
    return h - 0x100000000 if h & 0x80000000 else h


def embed_text(text: str, dim: int = EMBEDDING_DIM) -> np.ndarray:
    normalized = _NON_ALNUM.sub("", (text or "").lower())
    words = [w for w in normalized.split() if w]

    vector = np.zeros(dim, dtype=np.float64)
    for idx, word in enumerate(words):
        vector[abs(_word_hash(word)) % dim] += 1.0 / (idx + 1)

    norm = np.linalg.norm(vector)
    return vector / norm if norm > 0 else vector


def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    if a.shape != b.shape:
        return 0.0
    denom = np.linalg.norm(a) * np.linalg.norm(b)
    if denom == 0:
        return 0.0
    return float(np.dot(a, b) / denom)


def relevance_label(score: float) -> str:
    if score > 0.8:
        return "high"
    if score > 0.5:
        return "medium"
    return "low"


def build_document(company) -> str:
    """Concatenate the searchable text fields of a company record."""
    parts = [
        getattr(company, "name", "") or "",
        getattr(company, "description", "") or "",
        getattr(company, "primary_category", "") or "",
        getattr(company, "city", "") or "",
        getattr(company, "country", "") or "",
    ]
    return " ".join(p.strip() for p in parts if p.strip())


@dataclass
class CompanyVector:
    id: int
    name: str
    description: str = ""
    category: str = ""
    funding: float = 0
    stage: str = ""
    location: str = ""
    embedding: Optional[np.ndarray] = field(default=None, repr=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "funding": self.funding,
            "stage": self.stage,
            "location": self.location,
        }


@dataclass
class VectorHit:
    company: CompanyVector
    score: float
    relevance: str


class VectorStore:
    """In-memory company vectors keyed by company id."""

    def __init__(self, dim: int = EMBEDDING_DIM):
        self._dim = dim
        self._vectors: dict[int, CompanyVector] = {}
        self._lock = threading.Lock()

    @property
    def dim(self) -> int:
        return self._dim

    def add_company(self, company: CompanyVector, document: str | None = None):
        text = document or f"{company.name} {company.description} {company.category} {company.location}"
        company.embedding = embed_text(text, self._dim)
        with self._lock:
            self._vectors[company.id] = company

    def search(self, query: str, limit: int = 5) -> list[VectorHit]:
        query_vec = embed_text(query, self._dim)
        with self._lock:
            vectors = list(self._vectors.values())

        hits = []
        for cv in vectors:
            if cv.embedding is None:
                continue
            score = cosine_similarity(query_vec, cv.embedding)
            hits.append(VectorHit(company=cv, score=score, relevance=relevance_label(score)))

        hits.sort(key=lambda h: h.score, reverse=True)
        return hits[:limit]

    def search_by_category(self, category: str, limit: int = 10) -> list[CompanyVector]:
        needle = (category or "").lower()
        with self._lock:
            matches = [cv for cv in self._vectors.values() if needle in cv.category.lower()]
        return matches[:limit]

    def search_by_funding(self, min_funding: float, max_funding: float) -> list[CompanyVector]:
        with self._lock:
            matches = [cv for cv in self._vectors.values() if min_funding <= cv.funding <= max_funding]
        return sorted(matches, key=lambda cv: cv.funding, reverse=True)

    def category_distribution(self) -> dict[str, int]:
        dist: dict[str, int] = {}
        with self._lock:
            for cv in self._vectors.values():
                dist[cv.category] = dist.get(cv.category, 0) + 1
        return dist

    def count(self) -> int:
        return len(self._vectors)

    def clear(self):
        with self._lock:
            self._vectors.clear()


def company_vector(company) -> CompanyVector:
    location = ", ".join(p for p in (company.city, company.country) if p) or "Unknown"
    return CompanyVector(
        id=company.id,
        name=company.name,
        description=company.description or "",
        category=company.primary_category or "General Security",
        funding=company.total_funding or 0,
        stage=company.current_stage or "unknown",
        location=location,
    )


async def load_companies(store: VectorStore, session) -> int:
    """Rebuild the store from the companies table."""
    from cyberintel.models import Company

    companies = (await session.execute(select(Company))).scalars().all()
    store.clear()
    for company in companies:
        store.add_company(company_vector(company), document=build_document(company))
    logger.info("Vector store loaded with %d companies", store.count())
    return store.count()


async def index_companies(session, company_ids: list[int]) -> int:
    """
    Add or refresh the given companies in the shared store after a write.

    An empty store is left alone: it is loaded in full on the next search.
    """
    store = get_vector_store()
    if not company_ids or store.count() == 0:
        return 0
    from cyberintel.models import Company

    companies = (await session.execute(select(Company).where(Company.id.in_(company_ids)))).scalars().all()
    for company in companies:
        store.add_company(company_vector(company), document=build_document(company))
    logger.debug("Indexed %d companies", len(companies))
    return len(companies)


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

_vector_store: Optional[VectorStore] = None


def get_vector_store() -> VectorStore:
    global _vector_store
    if _vector_store is None:
        _vector_store = VectorStore()
    return _vector_store


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

async def _main(query: str, limit: int):
    from cyberintel.database import async_session, init_db

    await init_db()
    store = get_vector_store()
    async with async_session() as session:
        await load_companies(store, session)
    for hit in store.search(query, limit=limit):
        print(f"{hit.score:.3f}  {hit.relevance:<6}  {hit.company.name}  ({hit.company.category})")


def main():
    import argparse
    parser = argparse.ArgumentParser(description="Semantic search over tracked companies")
    parser.add_argument("query")
    parser.add_argument("--limit", type=int, default=5)
    args = parser.parse_args()
    asyncio.run(_main(args.query, args.limit))


if __name__ == "__main__":
    main()
