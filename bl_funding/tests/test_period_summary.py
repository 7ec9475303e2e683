"""
bl_funding/tests/test_period_summary.py — Tests for per-era aggregates.
"""

import pytest

from bl_funding.config import BLFundingConfig
from bl_funding.metrics.derived import AUSTERITY, PRE_CRISIS, RECOVERY, derive_metrics
from bl_funding.metrics.period_summary import PeriodSummary, period_summary


def test_only_present_periods_are_returned(make_record):
    """Years 2005, 2010, 2012 → exactly Pre-Crisis and Austerity Era."""
    records = [make_record(2005), make_record(2010), make_record(2012)]
    summary = period_summary(records)
    assert set(summary) == {PRE_CRISIS, AUSTERITY}
    assert RECOVERY not in summary
    assert summary[PRE_CRISIS].n_years == 1
    assert summary[AUSTERITY].n_years == 2


def test_all_three_periods_in_order(synthetic_records):
    summary = period_summary(synthetic_records)
    assert list(summary) == [PRE_CRISIS, AUSTERITY, RECOVERY]
    assert all(isinstance(s, PeriodSummary) for s in summary.values())


def test_year_spans(synthetic_records):
    summary = period_summary(synthetic_records)
    assert (summary[PRE_CRISIS].first_year, summary[PRE_CRISIS].last_year) == (1998, 2007)
    assert (summary[AUSTERITY].first_year, summary[AUSTERITY].last_year) == (2008, 2015)
    assert (summary[RECOVERY].first_year, summary[RECOVERY].last_year) == (2016, 2023)


def test_means_and_rounding(make_record):
    records = [
        make_record(2010, nominal_gbp_millions=100.04, gia_gbp_millions=50.0),
        make_record(2011, nominal_gbp_millions=200.0, gia_gbp_millions=150.0),
    ]
    summary = period_summary(records)[AUSTERITY]
    # mean nominal = 150.02 → 150.0
    assert summary.mean_nominal_gbp_millions == 150.0
    # dependency: (50/100.04 + 150/200) / 2 × 100 ≈ 62.49 → 62.5
    assert summary.mean_government_dependency_pct == 62.5


def test_diversification_rounded_to_three_places(make_record):
    records = [make_record(2018), make_record(2019)]
    summary = period_summary(records)[RECOVERY]
    assert summary.mean_diversification_index == 0.295


def test_accepts_precomputed_derived(synthetic_records):
    derived = derive_metrics(synthetic_records)
    assert period_summary(synthetic_records, derived) == period_summary(synthetic_records)


def test_mismatched_derived_rejected(synthetic_records):
    derived = derive_metrics(synthetic_records)
    with pytest.raises(ValueError):
        period_summary(synthetic_records, derived[1:])


def test_null_policy_skips_empty_indices(make_record):
    zero = dict(gia_gbp_millions=0.0, voluntary_gbp_millions=0.0,
                investment_gbp_millions=0.0, services_gbp_millions=0.0)
    records = [make_record(2005), make_record(2006, **zero), make_record(2010, **zero)]
    config = BLFundingConfig(zero_total_policy="null")
    summary = period_summary(records, config=config)
    assert summary[PRE_CRISIS].mean_diversification_index == 0.295
    assert summary[AUSTERITY].mean_diversification_index is None
