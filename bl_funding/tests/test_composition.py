"""
bl_funding/tests/test_composition.py — Tests for the table-shaped views.
"""

import pytest

from bl_funding.errors import DivisionError
from bl_funding.metrics.composition import (
    metrics_frame,
    records_to_frame,
    source_shares,
    to_long_format,
)
from bl_funding.metrics.derived import derive_metrics


# ── metrics_frame ─────────────────────────────────────────────────────────────

def test_metrics_frame_columns(synthetic_records):
    df = metrics_frame(synthetic_records)
    for column in (
        "year", "gia_gbp_millions", "nominal_gbp_millions", "period", "total_non_other",
        "gia_share", "vol_share", "inv_share", "serv_share", "hhi",
        "diversification_index", "government_dependency", "real_change_pct",
    ):
        assert column in df.columns
    assert len(df) == len(synthetic_records)


def test_metrics_frame_hhi_consistent(synthetic_records):
    df = metrics_frame(synthetic_records)
    squared = df["gia_share"] + df["vol_share"] + df["inv_share"] + df["serv_share"]
    assert (squared - df["hhi"]).abs().max() < 1e-12
    assert ((1 - df["hhi"]) - df["diversification_index"]).abs().max() < 1e-12


def test_metrics_frame_worked_example(make_record):
    df = metrics_frame([make_record(2019)])
    row = df.iloc[0]
    assert row["total_non_other"] == 120.0
    assert row["gia_share"] == pytest.approx((100 / 120) ** 2)
    assert row["hhi"] == pytest.approx(0.7049, abs=1e-4)
    assert row["period"] == "Recovery Era"


def test_metrics_frame_rejects_misaligned_derived(make_record):
    records = [make_record(2000), make_record(2001)]
    derived = derive_metrics([make_record(2000), make_record(2002)])
    with pytest.raises(ValueError, match="year-for-year"):
        metrics_frame(records, derived)


def test_records_to_frame_preserves_order(synthetic_records):
    df = records_to_frame(synthetic_records)
    assert df["year"].tolist() == [r.year for r in synthetic_records]


# ── source_shares ─────────────────────────────────────────────────────────────

def test_source_shares_sum_to_one_when_components_add_up(synthetic_records):
    df = source_shares(synthetic_records)
    totals = df[["gia_prop", "voluntary_prop", "investment_prop",
                 "services_prop", "other_prop"]].sum(axis=1)
    # Components are rounded independently of the nominal total.
    assert (totals - 1.0).abs().max() < 1e-3


def test_source_shares_values(make_record):
    df = source_shares([make_record(2019)])
    assert df.loc[0, "gia_prop"] == pytest.approx(100 / 122)
    assert df.loc[0, "other_prop"] == pytest.approx(2 / 122)


def test_source_shares_zero_nominal(make_record):
    with pytest.raises(DivisionError) as excinfo:
        source_shares([make_record(2009, nominal_gbp_millions=0.0)])
    assert excinfo.value.year == 2009


# ── to_long_format ────────────────────────────────────────────────────────────

def test_long_format_shape(synthetic_records):
    df = to_long_format(synthetic_records)
    assert list(df.columns) == ["year", "funding_source", "amount_millions"]
    assert len(df) == len(synthetic_records) * 5
    assert set(df["funding_source"]) == {"gia", "voluntary", "investment", "services", "other"}


def test_long_format_sorted(synthetic_records):
    df = to_long_format(synthetic_records)
    assert df["year"].is_monotonic_increasing
    first_year = df[df["year"] == 1998]
    assert first_year["funding_source"].tolist() == sorted(first_year["funding_source"])


def test_empty_input_gives_empty_tables():
    assert list(records_to_frame([]).columns)[0] == "year"
    assert len(records_to_frame([])) == 0
    df = to_long_format([])
    assert list(df.columns) == ["year", "funding_source", "amount_millions"]
    assert df.empty


def test_long_format_component_subset(make_record):
    df = to_long_format([make_record(2019)], components=("gia_gbp_millions", "services_gbp_millions"))
    assert dict(zip(df["funding_source"], df["amount_millions"])) == {"gia": 100.0, "services": 5.0}
