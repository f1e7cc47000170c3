"""Security endpoint -- audit trail and limiter status."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query

from cyberintel import config
from cyberintel.security import SECURITY_HEADERS, audit_log, rate_limiter
from cyberintel.utils import iso_now

router = APIRouter(prefix="/security", tags=["security"])


@router.get("/audit")
async def audit_trail(
    limit: int = Query(100, ge=1, le=1000),
    severity: Optional[str] = Query(None, pattern="^(low|medium|high)$"),
):
    events = audit_log.recent(limit=limit, severity=severity)
    return {"success": True, "data": [e.to_dict() for e in events], "count": len(events)}


@router.get("/status")
async def security_status():
    rate_limiter.cleanup()
    return {
        "success": True,
        "data": {
            "rate_limit": {
                "max_requests": rate_limiter.max_requests,
                "window_seconds": rate_limiter.window_seconds,
                "tracked_clients": rate_limiter.tracked_clients,
            },
            "blocked_ips": len(config.BLOCKED_IPS),
            "security_headers": sorted(SECURITY_HEADERS),
            "audit": audit_log.counts(),
            "timestamp": iso_now(),
        },
    }
