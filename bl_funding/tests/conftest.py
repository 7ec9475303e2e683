"""
bl_funding/tests/conftest.py — Shared pytest fixtures for the funding test suite.

The synthetic dataset is deterministic (SEED=2025) and shaped like the real
table: 26 years, GIA peaking mid-2000s and falling through austerity,
services income rising then halving, real totals eroding against nominal.

Fixtures:
    synthetic_records  — 26 FundingRecords, 1998–2023 (one null peak share in 1999).
    synthetic_csv      — The same records written to a CSV in tmp_path.
    make_record        — Factory for single hand-built FundingRecords.
"""

import random

import pandas as pd
import pytest

from bl_funding.records import FundingRecord


# ── Pytest configuration hooks ────────────────────────────────────────────────

def pytest_configure(config):
    """Register the integration marker."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests that download the real dataset (deselected by default, "
        "pass --run-integration or -m integration to enable)",
    )


def pytest_addoption(parser):
    """Add --run-integration CLI flag to enable integration tests."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests that download the real TidyTuesday dataset.",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --run-integration is passed or -m integration is used."""
    markexpr = config.getoption("-m", default="")
    if "integration" in markexpr:
        return
    if config.getoption("--run-integration"):
        return

    skip_integration = pytest.mark.skip(
        reason="Integration test -- pass --run-integration or -m integration to run"
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


SEED = 2025
YEARS = list(range(1998, 2024))


def _build_synthetic_records() -> list[FundingRecord]:
    rng = random.Random(SEED)
    rows = []
    for i, year in enumerate(YEARS):
        if year <= 2006:
            gia = 80.0 + 2.0 * i
        elif year <= 2015:
            gia = 98.0 - 2.5 * (year - 2006)
        else:
            gia = 75.5 + 0.8 * (year - 2015)
        voluntary = 6.0 + rng.uniform(0, 6)
        investment = 1.0 + rng.uniform(0, 2)
        services = 14.0 + 1.5 * i if year <= 2008 else max(8.0, 29.0 - 1.2 * (year - 2008))
        other = 1.0 + rng.uniform(0, 1)
        nominal = gia + voluntary + investment + services + other
        real = nominal / (1.0 + 0.028 * (year - 2000))
        rows.append(dict(
            year=year,
            gia_gbp_millions=round(gia, 2),
            voluntary_gbp_millions=round(voluntary, 2),
            investment_gbp_millions=round(investment, 2),
            services_gbp_millions=round(services, 2),
            other_gbp_millions=round(other, 2),
            nominal_gbp_millions=round(nominal, 2),
            total_y2000_gbp_millions=round(real, 2),
        ))

    peak_gia = max(r["gia_gbp_millions"] for r in rows)
    records = []
    for row in rows:
        peak_share = None if row["year"] == 1999 else row["gia_gbp_millions"] / peak_gia
        records.append(FundingRecord(gia_as_percent_of_peak_gia=peak_share, **row))
    return records


@pytest.fixture(scope="session")
def synthetic_records() -> list[FundingRecord]:
    """26 deterministic FundingRecords for 1998–2023."""
    return _build_synthetic_records()


@pytest.fixture
def synthetic_csv(tmp_path, synthetic_records) -> str:
    """synthetic_records written as a TidyTuesday-shaped CSV (plus an unused extra column)."""
    df = pd.DataFrame([vars(r) for r in synthetic_records])
    df["inflation_adjustment"] = 1.0
    path = tmp_path / "bl_funding.csv"
    df.to_csv(path, index=False)
    return str(path)


@pytest.fixture
def make_record():
    """Factory: make_record(year, gia=..., ...) with sensible defaults for the rest."""
    def _make(year: int = 2019, **overrides) -> FundingRecord:
        fields = dict(
            year=year,
            gia_gbp_millions=100.0,
            voluntary_gbp_millions=10.0,
            investment_gbp_millions=5.0,
            services_gbp_millions=5.0,
            other_gbp_millions=2.0,
            nominal_gbp_millions=122.0,
            total_y2000_gbp_millions=90.0,
            gia_as_percent_of_peak_gia=0.8,
        )
        fields.update(overrides)
        return FundingRecord(**fields)
    return _make
