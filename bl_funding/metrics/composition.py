"""
bl_funding/metrics/composition.py — Income composition tables.

Table-shaped views of the funding data used by the charts and the CSV export:

    metrics_frame()    — the full per-year analysis table (raw + derived).
    source_shares()    — each income component as a fraction of nominal total.
    to_long_format()   — one row per (year, funding source) for stacked charts.
"""

import logging
from typing import Optional, Sequence

import pandas as pd

from bl_funding.config import DEFAULT_CONFIG, BLFundingConfig
from bl_funding.errors import DivisionError
from bl_funding.metrics.derived import DerivedMetrics, derive_metrics
from bl_funding.records import (
    INCOME_COMPONENTS,
    MAIN_COMPONENTS,
    OPTIONAL_COLUMNS,
    REQUIRED_COLUMNS,
    FundingRecord,
)

logger = logging.getLogger(__name__)

# Column names for the squared shares, matching the published bl_metrics.csv.
_SQUARED_SHARE_COLUMNS = {
    "gia_gbp_millions": "gia_share",
    "voluntary_gbp_millions": "vol_share",
    "investment_gbp_millions": "inv_share",
    "services_gbp_millions": "serv_share",
}


def _source_name(column: str) -> str:
    return column.replace("_gbp_millions", "")


def records_to_frame(records: Sequence[FundingRecord]) -> pd.DataFrame:
    """Raw FundingRecords as a DataFrame, one row per year in input order."""
    return pd.DataFrame(
        [vars(r) for r in records],
        columns=list(REQUIRED_COLUMNS + OPTIONAL_COLUMNS),
    )


def metrics_frame(
    records: Sequence[FundingRecord],
    derived: Optional[Sequence[DerivedMetrics]] = None,
    config: BLFundingConfig = DEFAULT_CONFIG,
) -> pd.DataFrame:
    """
    Build the per-year analysis table written to bl_metrics.csv.

    Columns: all FundingRecord fields, then period, total_non_other, the four
    squared shares (gia_share, vol_share, inv_share, serv_share), hhi,
    diversification_index, government_dependency, real_change_pct.

    Args:
        records: FundingRecords sorted by year.
        derived: Output of derive_metrics(records). Computed if omitted.
        config:  Passed through to derive_metrics() when `derived` is None.

    Raises:
        ValueError: if `derived` does not line up year-for-year with `records`.
    """
    if derived is None:
        derived = derive_metrics(records, config)
    if [r.year for r in records] != [d.year for d in derived]:
        raise ValueError("derived metrics do not match records year-for-year")

    rows = []
    for record, metrics in zip(records, derived):
        row = vars(record).copy()
        total = sum(getattr(record, c) for c in MAIN_COMPONENTS)
        row["period"] = metrics.period
        row["total_non_other"] = total
        for column, share_name in _SQUARED_SHARE_COLUMNS.items():
            row[share_name] = (getattr(record, column) / total) ** 2 if total else None
        row["hhi"] = sum(row[s] for s in _SQUARED_SHARE_COLUMNS.values()) if total else None
        row["diversification_index"] = metrics.diversification_index
        row["government_dependency"] = metrics.government_dependency
        row["real_change_pct"] = metrics.real_change_pct
        rows.append(row)

    return pd.DataFrame(rows)


def source_shares(records: Sequence[FundingRecord]) -> pd.DataFrame:
    """
    Each of the five income components as a fraction of the nominal total.

    Returns:
        DataFrame with a 'year' column and one '<source>_prop' column per
        income component (gia, voluntary, investment, services, other).

    Raises:
        DivisionError: if nominal_gbp_millions is zero for any year.
    """
    rows = []
    for record in records:
        nominal = record.nominal_gbp_millions
        if nominal == 0:
            raise DivisionError(record.year, "nominal total")
        row = {"year": record.year}
        for column in INCOME_COMPONENTS:
            row[f"{_source_name(column)}_prop"] = getattr(record, column) / nominal
        rows.append(row)
    return pd.DataFrame(rows)


def to_long_format(
    records: Sequence[FundingRecord],
    components: Sequence[str] = INCOME_COMPONENTS,
) -> pd.DataFrame:
    """
    Pivot income components to long format.

    Args:
        records:    FundingRecords.
        components: Record fields to include (default: all five components).

    Returns:
        DataFrame with columns year, funding_source, amount_millions, where
        funding_source has the '_gbp_millions' suffix removed.
    """
    wide = records_to_frame(records)[["year", *components]]
    long = wide.melt(id_vars="year", var_name="funding_source", value_name="amount_millions")
    long["funding_source"] = long["funding_source"].str.replace("_gbp_millions", "", regex=False)
    return long.sort_values(["year", "funding_source"]).reset_index(drop=True)
