"""
Funding announcement extractor.

Pulls structured funding data out of free-text news articles with regular
expressions:
    - company name   ("Acme raises ...", "startup Acme raised ...")
    - amount         ("$25 million", "$1.2B", "40 million dollars", "$3,500,000")
    - round type     ("Series B round", "seed funding", "IPO", ...)
    - investors      ("led by ...", "with participation from ...")
    - valuation      ("valued at $1 billion")

Each extraction carries a confidence score; company name and amount are
mandatory, round type and investors raise the score.
"""

from __future__ import annotations

import hashlib
import logging
import re
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Optional

from cyberintel.utils import normalize_name, parse_date

logger = logging.getLogger(__name__)

MIN_CONFIDENCE = 0.6

COMPANY_PATTERNS = [
    re.compile(
        r"([A-Z][a-zA-Z0-9\s&.-]+?)\s+(?:raises?|raised|secured?|closes?|closed|announced?|gets?|received?)\b",
        re.IGNORECASE,
    ),
    re.compile(r"(?:startup|company)\s+([A-Z][a-zA-Z0-9\s&.-]+?)\s+(?:raises?|raised)\b", re.IGNORECASE),
    re.compile(r"([A-Z][a-zA-Z0-9\s&.-]+?)\s+(?:has\s+)?(?:raises?|raised|secured?|closes?)\b", re.IGNORECASE),
]

AMOUNT_PATTERNS = [
    re.compile(r"\$(\d+(?:\.\d+)?)\s*(million|billion|M|B)\b", re.IGNORECASE),
    re.compile(r"(\d+(?:\.\d+)?)\s*(million|billion)\s*dollars?", re.IGNORECASE),
    re.compile(r"\$(\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d+)?)"),
]

ROUND_TYPE_PATTERNS = [
    re.compile(r"series\s+([A-Z])\s+(?:round|funding)", re.IGNORECASE),
    re.compile(r"(pre-seed|seed)\s+(?:round|funding)", re.IGNORECASE),
    re.compile(r"(bridge|convertible)\s+(?:round|funding)", re.IGNORECASE),
    re.compile(r"\b(ipo|acquisition|exit)\b", re.IGNORECASE),
]

# (pattern, is_lead)
INVESTOR_PATTERNS = [
    (re.compile(r"led\s+by\s+([^,.]+)", re.IGNORECASE), True),
    (re.compile(r"(?:lead\s+)?investors?\s+(?:include|are)\s+([^.]+)", re.IGNORECASE), False),
    (re.compile(r"participated\s+by\s+([^.]+)", re.IGNORECASE), False),
    (re.compile(r"(?:with\s+participation\s+from|joined\s+by)\s+([^.]+)", re.IGNORECASE), False),
]

VALUATION_PATTERNS = [
    re.compile(r"valued?\s+at\s+\$(\d+(?:\.\d+)?)\s*(million|billion|M|B)\b", re.IGNORECASE),
    re.compile(r"valuation\s+of\s+\$(\d+(?:\.\d+)?)\s*(million|billion|M|B)\b", re.IGNORECASE),
]

_MULTIPLIERS = {"billion": 1_000_000_000, "b": 1_000_000_000, "million": 1_000_000, "m": 1_000_000}


@dataclass
class ArticleText:
    title: str
    url: str
    source: str
    raw_text: str
    published_date: Optional[str] = None


@dataclass
class ExtractedFunding:
    company_name: str
    funding_amount: float
    currency: str
    round_type: str
    lead_investors: list[str] = field(default_factory=list)
    participating_investors: list[str] = field(default_factory=list)
    announced_date: date = field(default_factory=date.today)
    valuation: Optional[float] = None
    confidence: float = 0.0
    source: str = ""
    url: str = ""
    title: str = ""

    @property
    def content_hash(self) -> str:
        key = "|".join([
            normalize_name(self.company_name),
            f"{self.funding_amount:.0f}",
            self.round_type.lower(),
            self.announced_date.isoformat(),
        ])
        return hashlib.sha256(key.encode()).hexdigest()

    def to_dict(self) -> dict:
        data = asdict(self)
        data["announced_date"] = self.announced_date.isoformat()
        return data


def _scale(number: str, unit: Optional[str]) -> float:
    value = float(number.replace(",", ""))
    return value * _MULTIPLIERS.get((unit or "").lower(), 1)


def extract_company_name(text: str) -> Optional[str]:
    for pattern in COMPANY_PATTERNS:
        match = pattern.search(text)
        if match:
            name = match.group(1).strip()
            if 2 < len(name) < 50:
                return name
    return None


def extract_amount(text: str) -> float:
    for pattern in AMOUNT_PATTERNS:
        match = pattern.search(text)
        if match:
            unit = match.group(2) if pattern.groups >= 2 else None
            return _scale(match.group(1), unit)
    return 0.0


def normalize_round_type(value: str) -> str:
    v = value.strip().lower()
    if len(v) == 1 and v.isalpha():
        return f"Series {v.upper()}"
    if v.startswith("series "):
        return f"Series {v.split()[-1].upper()}"
    if "pre-seed" in v:
        return "Pre-Seed"
    if "seed" in v:
        return "Seed"
    for key, label in (("bridge", "Bridge"), ("convertible", "Convertible"),
                       ("ipo", "IPO"), ("acquisition", "Acquisition"), ("exit", "Exit")):
        if key in v:
            return label
    return value.strip()


def extract_round_type(text: str) -> Optional[str]:
    for pattern in ROUND_TYPE_PATTERNS:
        match = pattern.search(text)
        if match:
            return normalize_round_type(match.group(1) or match.group(0))
    return None


def _clean_investor(name: str) -> str:
    name = re.sub(r"^(and|&)\s+", "", name.strip(), flags=re.IGNORECASE)
    name = re.sub(r"\s+(and|&)\s*$", "", name, flags=re.IGNORECASE)
    return name.strip()


def parse_investor_list(text: str) -> list[str]:
    parts = re.split(r",|\sand\s", text)
    return [_clean_investor(p) for p in parts if 2 < len(p.strip()) < 50]


def extract_investors(text: str) -> tuple[list[str], list[str]]:
    lead: list[str] = []
    participating: list[str] = []
    for pattern, is_lead in INVESTOR_PATTERNS:
        for match in pattern.finditer(text):
            names = parse_investor_list(match.group(1))
            (lead if is_lead else participating).extend(names)

    lead = list(dict.fromkeys(n for n in lead if n))
    participating = [n for n in dict.fromkeys(participating) if n and n not in lead]
    return lead, participating


def extract_valuation(text: str) -> Optional[float]:
    for pattern in VALUATION_PATTERNS:
        match = pattern.search(text)
        if match:
            return _scale(match.group(1), match.group(2))
    return None


def clean_company_name(name: str) -> str:
    name = re.sub(r"\b(Inc|LLC|Corp|Ltd|Co)\b\.?", "", name, flags=re.IGNORECASE)
    return re.sub(r"\s+", " ", name).strip(" ,")


def extract_article(article: ArticleText) -> Optional[ExtractedFunding]:
    """Extract one funding event from an article, or None if company/amount missing."""
    text = article.raw_text or ""
    confidence = 0.0

    company = extract_company_name(text)
    if not company:
        return None
    confidence += 0.3

    amount = extract_amount(text)
    if not amount:
        return None
    confidence += 0.3

    round_type = extract_round_type(text)
    if round_type:
        confidence += 0.2

    lead, participating = extract_investors(text)
    if lead or participating:
        confidence += 0.2

    return ExtractedFunding(
        company_name=clean_company_name(company),
        funding_amount=amount,
        currency="USD",
        round_type=round_type or "Unknown",
        lead_investors=lead,
        participating_investors=participating,
        announced_date=parse_date(article.published_date, default=date.today()),
        valuation=extract_valuation(text),
        confidence=round(confidence, 2),
        source=article.source,
        url=article.url,
        title=article.title,
    )


def extract_funding_data(articles: list[ArticleText]) -> list[ExtractedFunding]:
    """Run the extractor over a batch; keep results above MIN_CONFIDENCE."""
    results = []
    for article in articles:
        try:
            extracted = extract_article(article)
        except Exception as e:
            logger.warning("Extraction failed for %s: %s", article.url, e)
            continue
        if extracted and extracted.confidence > MIN_CONFIDENCE:
            results.append(extracted)
    return results
