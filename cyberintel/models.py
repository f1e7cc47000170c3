"""
SQLAlchemy ORM models -- schema for the funding intelligence platform.

Tables
------
companies                -- tracked cybersecurity startups
investors                -- VC firms, accelerators, corporate VCs
funding_rounds           -- capital-raising events, one company each
funding_round_investors  -- round <-> investor links with lead/participant role
portfolio_companies      -- the fund's own holdings and their metrics
conventions              -- security conferences
convention_companies     -- companies exhibiting at a convention
scraped_articles         -- news articles already ingested (dedup)
"""

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base

ROLE_LEAD = "lead"
ROLE_PARTICIPANT = "participant"

# ---------------------------------------------------------------------------
# Companies & funding
# ---------------------------------------------------------------------------

class Company(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(256), nullable=False, unique=True, index=True)
    normalized_name = Column(String(256), nullable=False, unique=True, index=True)
    website = Column(String(512), default="")
    description = Column(Text, default="")
    country = Column(String(128), default="", index=True)
    city = Column(String(128), default="")
    founded_year = Column(Integer, nullable=True)
    employee_range = Column(String(32), default="")
    primary_category = Column(String(128), default="", index=True)
    current_stage = Column(String(32), default="", index=True)
    total_funding = Column(Float, default=0)

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    funding_rounds = relationship(
        "FundingRound",
        back_populates="company",
        order_by="FundingRound.announced_date.desc()",
    )


class Investor(Base):
    __tablename__ = "investors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(256), nullable=False, unique=True, index=True)
    normalized_name = Column(String(256), nullable=False, index=True)
    investor_type = Column(String(64), default="VC Firm", index=True)
    created_at = Column(DateTime, default=func.now())

    round_links = relationship("FundingRoundInvestor", back_populates="investor")


class FundingRound(Base):
    __tablename__ = "funding_rounds"

    id = Column(Integer, primary_key=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    announced_date = Column(Date, nullable=False, index=True)
    round_type = Column(String(32), nullable=False, index=True)
    amount_usd = Column(Float, default=0)
    valuation_usd = Column(Float, nullable=True)
    lead_investor = Column(Text, default="")  # ", "-joined lead names
    source = Column(String(64), default="manual")
    source_url = Column(String(1024), default="")
    confidence_score = Column(Float, default=1.0)
    created_at = Column(DateTime, default=func.now())

    company = relationship("Company", back_populates="funding_rounds")
    investor_links = relationship(
        "FundingRoundInvestor",
        back_populates="funding_round",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_rounds_company_date", "company_id", "announced_date"),
    )


class FundingRoundInvestor(Base):
    __tablename__ = "funding_round_investors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    funding_round_id = Column(Integer, ForeignKey("funding_rounds.id"), nullable=False, index=True)
    investor_id = Column(Integer, ForeignKey("investors.id"), nullable=False, index=True)
    role = Column(String(16), default=ROLE_PARTICIPANT)

    funding_round = relationship("FundingRound", back_populates="investor_links")
    investor = relationship("Investor", back_populates="round_links")

    __table_args__ = (
        Index("ix_round_investor", "funding_round_id", "investor_id", unique=True),
    )


# ---------------------------------------------------------------------------
# Portfolio holdings
# ---------------------------------------------------------------------------

class PortfolioCompany(Base):
    __tablename__ = "portfolio_companies"

    id = Column(String(64), primary_key=True)  # slug, e.g. "pangea-001"
    name = Column(String(256), nullable=False, index=True)
    description = Column(Text, default="")
    website = Column(String(512), default="")
    founded = Column(Integer, nullable=True)
    headquarters = Column(String(256), default="")

    investment_stage = Column(String(32), default="seed", index=True)
    investment_date = Column(Date, nullable=True)
    investment_amount = Column(Float, default=0)
    current_valuation = Column(Float, default=0)
    ownership_percentage = Column(Float, default=0)
    lead_investor = Column(Boolean, default=False)

    focus_area = Column(String(64), default="", index=True)
    primary_solution = Column(Text, default="")
    target_market = Column(String(32), default="enterprise")

    current_employees = Column(Integer, default=0)
    employee_growth = Column(Float, default=0)
    revenue_growth = Column(Float, default=0)
    customer_count = Column(Integer, default=0)
    arr = Column(Float, default=0)
    burn_rate = Column(Float, default=0)
    runway = Column(Integer, default=0)  # months
    market_traction = Column(Float, default=0)  # 0-100

    competitive_position = Column(String(32), default="challenger")
    patent_count = Column(Integer, default=0)

    risk_level = Column(String(16), default="medium")
    risk_factors = Column(Text, default="")  # "; "-separated
    exit_probability = Column(Float, default=0)
    estimated_exit_value = Column(Float, default=0)
    exit_timeframe = Column(String(64), default="")
    potential_acquirers = Column(Text, default="")  # ", "-separated

    market_trend = Column(String(16), default="stable")
    investment_recommendation = Column(String(16), default="hold")
    confidence_score = Column(Float, default=0.5)

    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())


# ---------------------------------------------------------------------------
# Conventions
# ---------------------------------------------------------------------------

class Convention(Base):
    __tablename__ = "conventions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(256), nullable=False, unique=True)
    location = Column(String(256), default="")
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    is_active = Column(Boolean, default=True, index=True)

    companies = relationship("ConventionCompany", back_populates="convention")


class ConventionCompany(Base):
    __tablename__ = "convention_companies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    convention_id = Column(Integer, ForeignKey("conventions.id"), nullable=False, index=True)
    company_name = Column(String(256), nullable=False)
    booth = Column(String(32), default="")
    description = Column(Text, default="")
    website = Column(String(512), default="")
    category = Column(String(128), default="", index=True)
    funding_stage = Column(String(32), default="")
    seeking_investment = Column(Boolean, default=True)
    overall_fit_score = Column(Integer, default=0)  # 0-100
    status = Column(String(32), default="prospect", index=True)
    notes = Column(Text, default="")

    convention = relationship("Convention", back_populates="companies")


# ---------------------------------------------------------------------------
# Ingestion bookkeeping
# ---------------------------------------------------------------------------

class ScrapedArticle(Base):
    __tablename__ = "scraped_articles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    url = Column(String(1024), nullable=False, unique=True)
    title = Column(Text, default="")
    source = Column(String(64), default="")
    content_hash = Column(String(64), nullable=False, unique=True, index=True)
    published_date = Column(Date, nullable=True)
    processed = Column(Boolean, default=True)
    created_at = Column(DateTime, default=func.now())
