"""AI company analysis endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from cyberintel import config
from cyberintel.database import get_session
from cyberintel.schemas import AnalysisRequest
from cyberintel.security import sanitize_text
from cyberintel.services.company_analysis import AGENT_ROLES, ANALYSIS_TYPES, analyze_company
from cyberintel.services.llm_client import get_llm_client
from cyberintel.utils import iso_now

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analysis", tags=["analysis"])


@router.post("/company")
async def company_analysis(body: AnalysisRequest, session: AsyncSession = Depends(get_session)):
    name = sanitize_text(body.company_name)
    if not name:
        raise HTTPException(status_code=400, detail="Company name is required")
    if body.analysis_type not in ANALYSIS_TYPES:
        raise HTTPException(
            status_code=400,
            detail='Invalid analysis type. Must be "comprehensive" or "quick"',
        )
    return await analyze_company(session, get_llm_client(), name, body.analysis_type)


@router.get("/status")
async def analysis_status():
    llm = get_llm_client()
    return {
        "llm_configured": llm.is_configured,
        "model": config.LLM_MODEL if llm.is_configured else None,
        "analysis_types": list(ANALYSIS_TYPES),
        "agents": AGENT_ROLES,
        "timestamp": iso_now(),
    }
