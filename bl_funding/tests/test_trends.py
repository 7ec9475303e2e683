"""
bl_funding/tests/test_trends.py — Tests for the long-run trend figures.
"""

import pytest

from bl_funding.errors import DivisionError, FundingDataError, MissingValueError
from bl_funding.metrics.trends import (
    current_peak_shortfall,
    decline_from_peak,
    peak_recovery_series,
    purchasing_power_change,
)


# ── Peak recovery ─────────────────────────────────────────────────────────────

def test_peak_series_drops_nulls(synthetic_records):
    series = peak_recovery_series(synthetic_records)
    years = [year for year, _ in series]
    assert 1999 not in years
    assert len(series) == len(synthetic_records) - 1
    assert all(value is not None for _, value in series)


def test_peak_series_never_exceeds_one(synthetic_records):
    assert max(value for _, value in peak_recovery_series(synthetic_records)) == pytest.approx(1.0)


def test_current_shortfall(make_record):
    records = [make_record(2022, gia_as_percent_of_peak_gia=0.9),
               make_record(2023, gia_as_percent_of_peak_gia=0.75)]
    assert current_peak_shortfall(records) == pytest.approx(0.25)


def test_current_shortfall_null_latest_raises(make_record):
    """The previous known year is not used as a fallback."""
    records = [make_record(2022, gia_as_percent_of_peak_gia=0.9),
               make_record(2023, gia_as_percent_of_peak_gia=None)]
    with pytest.raises(MissingValueError) as excinfo:
        current_peak_shortfall(records)
    assert excinfo.value.year == 2023
    assert excinfo.value.field == "gia_as_percent_of_peak_gia"


def test_current_shortfall_empty():
    with pytest.raises(FundingDataError):
        current_peak_shortfall([])


# ── Decline from peak ─────────────────────────────────────────────────────────

def test_services_decline(synthetic_records):
    decline = decline_from_peak(synthetic_records, "services_gbp_millions")
    assert decline.peak_year == 2008
    assert decline.latest_year == 2023
    assert decline.latest_value < decline.peak_value
    expected = (decline.peak_value - decline.latest_value) / decline.peak_value * 100
    assert decline.decline_pct == pytest.approx(expected)


def test_decline_zero_when_latest_is_peak(make_record):
    records = [make_record(2000, services_gbp_millions=5.0),
               make_record(2001, services_gbp_millions=8.0)]
    decline = decline_from_peak(records, "services_gbp_millions")
    assert decline.peak_year == 2001
    assert decline.decline_pct == 0.0


def test_decline_rejects_unknown_field(make_record):
    with pytest.raises(ValueError, match="unsupported field"):
        decline_from_peak([make_record()], "year")


def test_decline_zero_peak(make_record):
    records = [make_record(2000, investment_gbp_millions=0.0),
               make_record(2001, investment_gbp_millions=0.0)]
    with pytest.raises(DivisionError):
        decline_from_peak(records, "investment_gbp_millions")


# ── Purchasing power ──────────────────────────────────────────────────────────

def test_purchasing_power(make_record):
    records = [
        make_record(2000, nominal_gbp_millions=100.0, total_y2000_gbp_millions=100.0),
        make_record(2001, nominal_gbp_millions=150.0, total_y2000_gbp_millions=90.0),
    ]
    change = purchasing_power_change(records)
    assert change.nominal_change_pct == pytest.approx(50.0)
    assert change.real_change_pct == pytest.approx(-10.0)
    assert change.erosion_pct_points == pytest.approx(60.0)


def test_purchasing_power_synthetic_real_lags_nominal(synthetic_records):
    change = purchasing_power_change(synthetic_records)
    assert (change.first_year, change.last_year) == (1998, 2023)
    assert change.real_change_pct < change.nominal_change_pct


def test_purchasing_power_empty():
    with pytest.raises(FundingDataError):
        purchasing_power_change([])
