"""Small formatting and normalisation helpers shared by routes and parsers."""

from __future__ import annotations

import re
from datetime import date, datetime, timezone

_LEGAL_SUFFIX = re.compile(r"\b(inc|llc|corp|ltd|co)\b\.?", re.IGNORECASE)
_NON_WORD = re.compile(r"[^a-z0-9\s]")
_SPACES = re.compile(r"\s+")


def normalize_name(name: str) -> str:
    """Canonical form used to match companies and investors across sources."""
    value = _LEGAL_SUFFIX.sub("", (name or "").lower())
    value = _NON_WORD.sub(" ", value)
    return _SPACES.sub(" ", value).strip()


def format_billions(amount: float) -> str:
    return f"${(amount or 0) / 1_000_000_000:.1f}B"


def format_millions(amount: float) -> str:
    return f"${(amount or 0) / 1_000_000:.1f}M"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_now() -> str:
    return utc_now().isoformat()


def parse_date(value, default: date | None = None) -> date | None:
    """Parse ISO dates / datetimes / RFC-822 feed dates; return `default` on failure."""
    if value is None or value == "":
        return default
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in ("%a, %d %b %Y %H:%M:%S %z", "%a, %d %b %Y %H:%M:%S %Z", "%Y-%m-%d", "%d %b %Y"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return default


def split_list(value: str, sep: str = ",") -> list[str]:
    return [part.strip() for part in (value or "").split(sep) if part.strip()]
