"""Dashboard endpoint -- stat cards for the overview page."""

from __future__ import annotations

import logging
from datetime import timedelta

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cyberintel.database import get_session
from cyberintel.security import audit_log
from cyberintel.services import dashboard
from cyberintel.utils import utc_now

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

REALTIME_REFRESH_SECONDS = 30


@router.get("/stats")
async def dashboard_stats(type: str = "summary", session: AsyncSession = Depends(get_session)):
    """type = summary | kpis | alerts | realtime; anything else is summary."""
    now = utc_now()
    if type == "kpis":
        data = await dashboard.kpi_stats(session)
    elif type == "alerts":
        data = await dashboard.alert_stats(session)
    elif type == "realtime":
        return {
            "success": True,
            "data": dashboard.realtime_stats(audit_log),
            "timestamp": now.isoformat(),
            "next_update": (now + timedelta(seconds=REALTIME_REFRESH_SECONDS)).isoformat(),
        }
    else:
        data = await dashboard.summary_stats(session)

    return {"success": True, "data": data, "timestamp": now.isoformat()}
