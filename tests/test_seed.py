"""Tests for the seed loader and CSV import."""

import pytest
from sqlalchemy import func, select

from cyberintel.models import Company, Convention, ConventionCompany, FundingRound, PortfolioCompany
from cyberintel.seed import import_csv, seed_database, SeedReport


async def _count(session, model):
    return (await session.execute(select(func.count()).select_from(model))).scalar()


async def test_seed_loads_sample_dataset(session):
    report = await seed_database(session)
    await session.commit()

    assert (report.companies, report.rounds, report.portfolio, report.conventions) == (8, 8, 5, 3)
    assert await _count(session, Company) == 8
    assert await _count(session, FundingRound) == 8
    assert await _count(session, PortfolioCompany) == 5
    assert await _count(session, Convention) == 3
    assert await _count(session, ConventionCompany) == 6

    company = (await session.execute(select(Company).where(Company.name == "CyberShield AI"))).scalar_one()
    assert company.total_funding == 25_000_000
    assert company.current_stage == "series-a"


async def test_seed_is_idempotent(session):
    await seed_database(session)
    await session.commit()
    report = await seed_database(session)
    await session.commit()

    assert (report.companies, report.rounds, report.portfolio, report.conventions) == (0, 0, 0, 0)
    assert report.skipped == 16
    assert await _count(session, FundingRound) == 8


async def test_csv_import(session, tmp_path):
    path = tmp_path / "rounds.csv"
    path.write_text(
        "company_name,country,round_type,amount_usd,announced_date,lead_investor,investors\n"
        'Vault Nine,France,Seed,"2,500,000",2024-05-02,Partech,"Partech, Kima Ventures"\n'
        "Broken Row,France,Seed,,2024-05-02,,\n"
        "Vault Nine,France,Seed,2500000,2024-05-02,Partech,\n"
    )
    report = SeedReport()
    await import_csv(session, str(path), report)
    await session.commit()

    assert report.companies == 1
    assert report.rounds == 1
    assert report.skipped == 2

    company = (await session.execute(select(Company).where(Company.name == "Vault Nine"))).scalar_one()
    assert company.country == "France"
    assert company.total_funding == 2_500_000


async def test_csv_missing_columns(session, tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("name,amount\nAcme,10\n")
    with pytest.raises(ValueError):
        await import_csv(session, str(path), SeedReport())
