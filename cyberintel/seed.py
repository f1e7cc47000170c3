"""
Seed loader: built-in sample dataset or a CSV of funding rounds -> database.

Usage:
    cyberintel-seed                       # built-in companies, rounds, portfolio, conventions
    cyberintel-seed --csv rounds.csv      # additionally import rounds from a CSV
    cyberintel-seed --skip-portfolio      # only the funding data

CSV columns: company_name, round_type, amount_usd, announced_date and optionally
country, city, website, primary_category, lead_investor, investors (comma-separated).
Running the loader twice does not create duplicates.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from dataclasses import dataclass

import pandas as pd
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cyberintel import seed_data
from cyberintel.database import async_session, init_db
from cyberintel.models import Convention, ConventionCompany, FundingRound, PortfolioCompany
from cyberintel.services.funding import create_round, find_company, upsert_company
from cyberintel.utils import parse_date, split_list

logger = logging.getLogger(__name__)

REQUIRED_CSV_COLUMNS = ("company_name", "round_type", "amount_usd", "announced_date")


@dataclass
class SeedReport:
    companies: int = 0
    rounds: int = 0
    portfolio: int = 0
    conventions: int = 0
    skipped: int = 0


async def _round_exists(session: AsyncSession, company_id: int, announced_date, round_type: str) -> bool:
    stmt = select(FundingRound.id).where(
        FundingRound.company_id == company_id,
        FundingRound.announced_date == announced_date,
        FundingRound.round_type == round_type,
    )
    return (await session.execute(stmt)).first() is not None


async def _add_round(session: AsyncSession, report: SeedReport, company_name: str, company_fields: dict,
                     announced_date, round_type: str, amount: float, leads, participants, source: str):
    is_new = await find_company(session, company_name) is None
    company = await upsert_company(session, company_name, **company_fields)
    if is_new:
        report.companies += 1
    if await _round_exists(session, company.id, announced_date, round_type):
        report.skipped += 1
        return
    await create_round(
        session,
        company,
        announced_date=announced_date,
        round_type=round_type,
        amount_usd=amount,
        lead_investors=leads,
        participants=participants,
        source=source,
    )
    report.rounds += 1


async def seed_funding(session: AsyncSession, report: SeedReport):
    companies = {c["name"]: c for c in seed_data.COMPANIES}
    for name, announced, round_type, amount, lead, others in seed_data.ROUNDS:
        fields = {k: v for k, v in companies.get(name, {}).items() if k != "name"}
        await _add_round(
            session, report, name, fields, announced, round_type, amount,
            leads=[(lead, seed_data.INVESTORS.get(lead, "VC Firm"))],
            participants=[(n, seed_data.INVESTORS.get(n, "VC Firm")) for n in others],
            source="seed",
        )


async def seed_portfolio(session: AsyncSession, report: SeedReport):
    for row in seed_data.PORTFOLIO:
        if await session.get(PortfolioCompany, row["id"]) is not None:
            report.skipped += 1
            continue
        session.add(PortfolioCompany(**row))
        report.portfolio += 1
    await session.flush()


async def seed_conventions(session: AsyncSession, report: SeedReport):
    for row in seed_data.CONVENTIONS:
        exists = (await session.execute(select(Convention.id).where(Convention.name == row["name"]))).first()
        if exists:
            report.skipped += 1
            continue
        convention = Convention(**{k: v for k, v in row.items() if k != "companies"})
        session.add(convention)
        await session.flush()
        for booth in row["companies"]:
            session.add(ConventionCompany(convention_id=convention.id, **booth))
        report.conventions += 1
    await session.flush()


async def import_csv(session: AsyncSession, csv_path: str, report: SeedReport):
    """Import funding rounds from a CSV file; rows missing required values are skipped."""
    df = pd.read_csv(csv_path, dtype=str).fillna("")
    missing = [c for c in REQUIRED_CSV_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"CSV is missing columns: {', '.join(missing)}")

    logger.info("Importing %d rows from %s", len(df), csv_path)
    for _, row in df.iterrows():
        name = row["company_name"].strip()
        announced = parse_date(row["announced_date"])
        try:
            amount = float(row["amount_usd"].replace(",", "") or 0)
        except ValueError:
            amount = 0
        if not name or announced is None or amount <= 0 or not row["round_type"].strip():
            logger.warning("Skipping CSV row for %r: incomplete", name)
            report.skipped += 1
            continue

        leads = split_list(row.get("lead_investor", ""))
        participants = [n for n in split_list(row.get("investors", "")) if n not in leads]
        fields = {
            key: row.get(key, "").strip()
            for key in ("country", "city", "website", "primary_category")
        }
        await _add_round(
            session, report, name, fields, announced, row["round_type"].strip(), amount,
            leads=[(n, "VC Firm") for n in leads],
            participants=[(n, "VC Firm") for n in participants],
            source="csv",
        )


async def seed_database(session: AsyncSession, csv_path: str | None = None,
                        include_portfolio: bool = True) -> SeedReport:
    report = SeedReport()
    await seed_funding(session, report)
    if include_portfolio:
        await seed_portfolio(session, report)
        await seed_conventions(session, report)
    if csv_path:
        await import_csv(session, csv_path, report)
    await session.flush()
    return report


async def run(csv_path: str | None = None, include_portfolio: bool = True) -> SeedReport:
    await init_db()
    async with async_session() as session:
        report = await seed_database(session, csv_path, include_portfolio)
        await session.commit()
    logger.info(
        "Seed complete: %d companies, %d rounds, %d portfolio, %d conventions (%d skipped)",
        report.companies, report.rounds, report.portfolio, report.conventions, report.skipped,
    )
    return report


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    parser = argparse.ArgumentParser(description="Load sample or CSV funding data")
    parser.add_argument("--csv", default=None, help="CSV of funding rounds to import")
    parser.add_argument("--skip-portfolio", action="store_true", help="Skip portfolio and conventions")
    args = parser.parse_args()
    asyncio.run(run(args.csv, include_portfolio=not args.skip_portfolio))


if __name__ == "__main__":
    main()
