"""
In-process security layer.

    RateLimiter  -- fixed-window request counter per client
    AuditLog     -- bounded in-memory log of security events and API access
    sanitize_* / validate_company_data -- input cleaning for write endpoints
    security_middleware -- wires the above into every HTTP request

State lives in the worker process; nothing here is shared between workers.
"""

from __future__ import annotations

import itertools
import logging
import re
import threading
import time
from collections import Counter, deque
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Callable, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from cyberintel import config
from cyberintel.utils import iso_now

logger = logging.getLogger(__name__)

AUDITED_PATH_PREFIXES = (
    "/dashboard",
    "/funding-tracker",
    "/funding-rounds",
    "/companies",
    "/investors",
    "/portfolio",
    "/analysis",
    "/ingest",
    "/rag-search",
    "/security",
    "/conventions",
)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "X-Robots-Tag": "noindex, nofollow, nosnippet, noarchive",
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
}

# ---------------------------------------------------------------------------
# Rate limiting
# ---------------------------------------------------------------------------


@dataclass
class _Window:
    count: int
    reset_at: float


class RateLimiter:
    """
    Fixed-window counter: at most `max_requests` per `window_seconds` per key.

    Expired windows are purged from inside `check()` at most once every
    `cleanup_interval` seconds, so the per-client map stays bounded by the
    clients seen in roughly one window plus one interval.
    """

    def __init__(
        self,
        max_requests: int = 60,
        window_seconds: float = 60,
        clock: Callable[[], float] = time.monotonic,
        cleanup_interval: float = 300,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.cleanup_interval = cleanup_interval
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()
        self._next_cleanup = clock() + cleanup_interval

    def _purge_expired(self, now: float) -> int:
        expired = [k for k, w in self._windows.items() if now > w.reset_at]
        for k in expired:
            del self._windows[k]
        self._next_cleanup = now + self.cleanup_interval
        return len(expired)

    def check(self, key: str) -> tuple[bool, int, float]:
        """Count one request. Returns (allowed, remaining, seconds_until_reset)."""
        now = self._clock()
        with self._lock:
            if now >= self._next_cleanup:
                self._purge_expired(now)

            window = self._windows.get(key)
            if window is None or now > window.reset_at:
                self._windows[key] = _Window(count=1, reset_at=now + self.window_seconds)
                return True, self.max_requests - 1, self.window_seconds

            retry_after = max(window.reset_at - now, 0.0)
            if window.count >= self.max_requests:
                return False, 0, retry_after

            window.count += 1
            return True, self.max_requests - window.count, retry_after

    def cleanup(self) -> int:
        """Drop expired windows; returns how many were removed."""
        with self._lock:
            return self._purge_expired(self._clock())

    def reset(self):
        with self._lock:
            self._windows.clear()

    @property
    def tracked_clients(self) -> int:
        return len(self._windows)


# ---------------------------------------------------------------------------
# Audit log
# ---------------------------------------------------------------------------


@dataclass
class AuditEvent:
    id: int
    timestamp: str
    type: str  # data_access, network, rate_limit, validation
    message: str
    ip: str = "unknown"
    user_agent: str = "unknown"
    severity: str = "low"
    path: str = ""
    method: str = ""
    status: Optional[int] = None
    duration_ms: Optional[float] = None
    details: dict = field(default_factory=dict)
    recorded_at: float = field(default_factory=time.time, repr=False)

    def to_dict(self) -> dict:
        data = asdict(self)
        data.pop("recorded_at", None)
        return data


class AuditLog:
    """Bounded audit trail; oldest entries are dropped first."""

    def __init__(self, max_entries: int = 1000):
        self._events: deque[AuditEvent] = deque(maxlen=max_entries)
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def record(self, type: str, message: str, **kwargs) -> AuditEvent:
        event = AuditEvent(id=next(self._ids), timestamp=iso_now(), type=type, message=message, **kwargs)
        with self._lock:
            self._events.append(event)
        if event.severity in ("medium", "high"):
            logger.warning("Security event [%s] %s (ip=%s)", event.type, event.message, event.ip)
        return event

    def recent(self, limit: int = 100, severity: Optional[str] = None) -> list[AuditEvent]:
        with self._lock:
            events = list(self._events)
        if severity:
            events = [e for e in events if e.severity == severity]
        return list(reversed(events))[:limit]

    def since(self, seconds: float) -> list[AuditEvent]:
        cutoff = time.time() - seconds
        with self._lock:
            return [e for e in self._events if e.recorded_at >= cutoff]

    def counts(self) -> dict:
        with self._lock:
            events = list(self._events)
        return {
            "total": len(events),
            "by_type": dict(Counter(e.type for e in events)),
            "by_severity": dict(Counter(e.severity for e in events)),
        }

    def clear(self):
        with self._lock:
            self._events.clear()

    def __len__(self) -> int:
        return len(self._events)


# ---------------------------------------------------------------------------
# Input sanitisation & validation
# ---------------------------------------------------------------------------

COMPANY_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9\s\-\.\,\&\(\)]{2,100}$")
URL_PATTERN = re.compile(
    r"^https?://(www\.)?[-a-zA-Z0-9@:%._\+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b([-a-zA-Z0-9()@:%_\+.~#?&/=]*)$"
)
AMOUNT_PATTERN = re.compile(r"^\d+(\.\d{1,2})?$")
YEAR_PATTERN = re.compile(r"^(19|20)\d{2}$")

MAX_TEXT_LENGTH = 10000
MAX_FUNDING = 10_000_000_000
MAX_EMPLOYEES = 1_000_000


def sanitize_text(value) -> str:
    if not isinstance(value, str):
        return ""
    value = value.strip()
    value = re.sub(r"[<>]", "", value)
    value = re.sub(r"javascript:", "", value, flags=re.IGNORECASE)
    value = re.sub(r"on\w+=", "", value, flags=re.IGNORECASE)
    value = re.sub(r"script", "", value, flags=re.IGNORECASE)
    return value[:MAX_TEXT_LENGTH]


def strip_markup(value) -> str:
    """Drop angle brackets only; article text keeps every word intact."""
    if not isinstance(value, str):
        return ""
    return re.sub(r"[<>]", "", value).strip()


def sanitize_url(value) -> str:
    """Return a normalised http(s) URL, or "" when it does not look like one."""
    if not isinstance(value, str) or not value.strip():
        return ""
    url = value.strip().lower()
    if not url.startswith(("http://", "https://")):
        url = f"https://{url}"
    return url if URL_PATTERN.match(url) else ""


def validate_company_data(data: dict) -> tuple[bool, list[str], dict]:
    """Validate and clean company fields. Returns (is_valid, errors, sanitized)."""
    errors: list[str] = []
    clean: dict = {}

    name = data.get("name")
    if name:
        name = sanitize_text(name)
        if COMPANY_NAME_PATTERN.match(name):
            clean["name"] = name
        else:
            errors.append("Company name contains invalid characters or is too long")
    else:
        errors.append("Company name is required")

    for key in ("industry", "location", "country", "city"):
        if data.get(key):
            clean[key] = sanitize_text(data[key])

    if data.get("funding") not in (None, ""):
        raw = re.sub(r"[^\d.]", "", str(data["funding"]))
        if AMOUNT_PATTERN.match(raw):
            amount = float(raw)
            if 0 <= amount <= MAX_FUNDING:
                clean["funding"] = amount
            else:
                errors.append("Funding amount must be between 0 and 10 billion")
        else:
            errors.append("Invalid funding amount format")

    if data.get("founded") not in (None, ""):
        raw = re.sub(r"\D", "", str(data["founded"]))
        if YEAR_PATTERN.match(raw):
            year = int(raw)
            if 1900 <= year <= datetime.now().year:
                clean["founded"] = year
            else:
                errors.append("Founded year must be between 1900 and current year")
        else:
            errors.append("Invalid founded year format")

    if data.get("employees") not in (None, ""):
        raw = re.sub(r"\D", "", str(data["employees"]))
        if raw and 0 <= int(raw) <= MAX_EMPLOYEES:
            clean["employees"] = int(raw)
        else:
            errors.append("Employee count must be between 0 and 1,000,000")

    if data.get("website"):
        url = sanitize_url(data["website"])
        if url:
            clean["website"] = url
        else:
            errors.append("Invalid website URL format")

    if data.get("description"):
        desc = sanitize_text(data["description"])
        if 0 < len(desc) <= 5000:
            clean["description"] = desc
        else:
            errors.append("Description must be between 1 and 5000 characters")

    return not errors, errors, clean


# ---------------------------------------------------------------------------
# Module-level singletons + middleware
# ---------------------------------------------------------------------------

rate_limiter = RateLimiter(
    max_requests=config.RATE_LIMIT_MAX_REQUESTS,
    window_seconds=config.RATE_LIMIT_WINDOW_SECONDS,
)
audit_log = AuditLog(max_entries=config.AUDIT_LOG_MAX_ENTRIES)


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else "unknown"


def is_blocked(ip: str, user_agent: str) -> bool:
    if ip in config.BLOCKED_IPS:
        return True
    ua = user_agent.lower()
    return "bot" in ua and "googlebot" not in ua


async def security_middleware(request: Request, call_next):
    ip = client_ip(request)
    user_agent = request.headers.get("user-agent", "unknown")
    path = request.url.path

    if is_blocked(ip, user_agent):
        audit_log.record(
            "network", "Blocked request from denied client",
            ip=ip, user_agent=user_agent, severity="medium", path=path, method=request.method, status=403,
        )
        return JSONResponse({"detail": "Access denied"}, status_code=403, headers=SECURITY_HEADERS)

    allowed, remaining, retry_after = rate_limiter.check(ip)
    if not allowed:
        audit_log.record(
            "rate_limit", "Rate limit exceeded",
            ip=ip, user_agent=user_agent, severity="medium", path=path, method=request.method, status=429,
        )
        headers = {**SECURITY_HEADERS, "Retry-After": str(int(retry_after) + 1), "X-RateLimit-Remaining": "0"}
        return JSONResponse({"detail": "Too many requests"}, status_code=429, headers=headers)

    started = time.perf_counter()
    response = await call_next(request)
    duration_ms = round((time.perf_counter() - started) * 1000, 2)

    for key, value in SECURITY_HEADERS.items():
        response.headers[key] = value
    response.headers["X-RateLimit-Remaining"] = str(remaining)

    if path.startswith(AUDITED_PATH_PREFIXES):
        audit_log.record(
            "data_access", f"Access to {path}",
            ip=ip, user_agent=user_agent, severity="low", path=path, method=request.method,
            status=response.status_code, duration_ms=duration_ms,
        )
    return response
