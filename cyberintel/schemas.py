"""Pydantic schemas for FastAPI request / response models."""

from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Companies & investors
# ---------------------------------------------------------------------------

class CompanyBrief(BaseModel):
    id: int
    name: str
    website: Optional[str] = ""
    country: Optional[str] = ""
    city: Optional[str] = ""
    founded_year: Optional[int] = None
    employee_range: Optional[str] = ""
    primary_category: Optional[str] = ""
    current_stage: Optional[str] = ""
    total_funding: Optional[float] = 0

    class Config:
        from_attributes = True


class InvestorBrief(BaseModel):
    id: int
    name: str
    investor_type: Optional[str] = ""

    class Config:
        from_attributes = True


class RoundInvestor(InvestorBrief):
    role: str = "participant"


# ---------------------------------------------------------------------------
# Funding rounds
# ---------------------------------------------------------------------------

class FundingRoundOut(BaseModel):
    id: int
    company_id: int
    announced_date: dt.date
    round_type: str
    amount_usd: float = 0
    valuation_usd: Optional[float] = None
    lead_investor: str = ""
    source: str = ""
    source_url: str = ""
    confidence_score: float = 1.0
    company: Optional[CompanyBrief] = None
    investors: list[RoundInvestor] = []


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class FundingRoundList(BaseModel):
    data: list[FundingRoundOut]
    pagination: Pagination


class InvestorIn(BaseModel):
    name: str = Field(min_length=1, max_length=256)
    investor_type: str = Field(default="VC Firm", max_length=64)


class FundingRoundCreate(BaseModel):
    # max_length mirrors the column sizes in models.py
    company_name: str = Field(max_length=256)
    website: Optional[str] = Field(default=None, max_length=512)
    country: Optional[str] = Field(default=None, max_length=128)
    city: Optional[str] = Field(default=None, max_length=128)
    founded_year: Optional[int] = None
    employee_range: Optional[str] = Field(default=None, max_length=32)
    primary_category: Optional[str] = Field(default=None, max_length=128)
    description: Optional[str] = None

    announced_date: dt.date
    round_type: str = Field(min_length=1, max_length=32)
    amount_usd: float = Field(ge=0)
    valuation_usd: Optional[float] = Field(default=None, ge=0)
    lead_investor: str = Field(default="", max_length=1024)
    investors: list[InvestorIn] = Field(default_factory=list)
    source: str = Field(default="manual", max_length=64)
    source_url: str = Field(default="", max_length=1024)


class CompanyRounds(CompanyBrief):
    description: str = ""
    funding_rounds: list[FundingRoundOut] = []


class CompanyDetail(CompanyRounds):
    round_count: int = 0
    last_round: Optional[FundingRoundOut] = None
    investors: list[InvestorBrief] = []


class InvestorStats(BaseModel):
    total_invested: float = 0
    deals_count: int = 0
    unique_companies: int = 0
    average_deal_size: float = 0


class InvestorOut(InvestorBrief):
    funding_rounds: list[FundingRoundOut] = []
    stats: InvestorStats


# ---------------------------------------------------------------------------
# Conventions
# ---------------------------------------------------------------------------

CONVENTION_STATUSES = ("prospect", "contacted", "meeting", "due_diligence", "passed", "invested")


class ConventionBrief(BaseModel):
    id: int
    name: str
    location: Optional[str] = ""
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    is_active: bool = True

    class Config:
        from_attributes = True


class ConventionCompanyOut(BaseModel):
    id: int
    convention_id: int
    company_name: str
    booth: Optional[str] = ""
    description: Optional[str] = ""
    website: Optional[str] = ""
    category: Optional[str] = ""
    funding_stage: Optional[str] = ""
    seeking_investment: Optional[bool] = True
    overall_fit_score: Optional[int] = 0
    status: Optional[str] = "prospect"
    notes: Optional[str] = ""

    class Config:
        from_attributes = True


class BoothWithConvention(ConventionCompanyOut):
    convention: Optional[ConventionBrief] = None


class ConventionOut(ConventionBrief):
    companies: list[ConventionCompanyOut] = []


class ConventionCompanyUpdate(BaseModel):
    booth: Optional[str] = Field(default=None, max_length=32)
    status: Optional[str] = Field(default=None, max_length=32)
    overall_fit_score: Optional[int] = Field(default=None, ge=0, le=100)
    seeking_investment: Optional[bool] = None
    notes: Optional[str] = Field(default=None, max_length=5000)


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------

class ArticleIn(BaseModel):
    title: str = ""
    url: str = Field(min_length=1, max_length=1024)
    source: str = Field(default="manual", max_length=64)
    published_date: Optional[str] = None
    raw_text: str = Field(min_length=1)


class IngestRequest(BaseModel):
    articles: list[ArticleIn] = Field(min_length=1, max_length=200)


class IngestResult(BaseModel):
    received: int = 0
    extracted: int = 0
    processed: int = 0
    duplicates: int = 0
    rejected: int = 0
    round_ids: list[int] = []


# ---------------------------------------------------------------------------
# Analysis & portfolio
# ---------------------------------------------------------------------------

class AnalysisRequest(BaseModel):
    company_name: str = ""
    analysis_type: str = "comprehensive"


class PortfolioAction(BaseModel):
    action: str
    company_id: Optional[str] = None
    data: dict = Field(default_factory=dict)
