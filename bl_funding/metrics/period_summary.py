"""
bl_funding/metrics/period_summary.py — Per-era aggregates.

Groups the per-year metrics by policy era and reports, for each era present:
    - mean nominal funding (GBP millions, 1 dp)
    - mean government dependency as a percentage (1 dp)
    - mean diversification index (3 dp)

Years whose diversification index is empty (zero-total 'null' policy) are
skipped for that mean only.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence

from bl_funding.config import DEFAULT_CONFIG, BLFundingConfig
from bl_funding.metrics.composition import metrics_frame
from bl_funding.metrics.derived import PERIODS, DerivedMetrics
from bl_funding.records import FundingRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PeriodSummary:
    """
    Aggregate funding metrics for one policy era.

    Fields:
        period:                          Era label.
        n_years:                         Number of years in the group.
        first_year / last_year:          Year span actually covered.
        mean_nominal_gbp_millions:       Mean nominal total, 1 dp.
        mean_government_dependency_pct:  Mean gia/nominal × 100, 1 dp.
        mean_diversification_index:      Mean 1 - HHI, 3 dp. None if no year
                                         in the group has an index.
    """
    period: str
    n_years: int
    first_year: int
    last_year: int
    mean_nominal_gbp_millions: float
    mean_government_dependency_pct: float
    mean_diversification_index: Optional[float]


def _none_if_nan(value: float, ndigits: int) -> Optional[float]:
    if value is None or math.isnan(value):
        return None
    return round(float(value), ndigits)


def period_summary(
    records: Sequence[FundingRecord],
    derived: Optional[Sequence[DerivedMetrics]] = None,
    config: BLFundingConfig = DEFAULT_CONFIG,
) -> dict[str, PeriodSummary]:
    """
    Summarise funding by policy era.

    Args:
        records: FundingRecords sorted by year.
        derived: Output of derive_metrics(records). Computed if omitted.
        config:  BLFundingConfig used when deriving.

    Returns:
        Dict mapping period label → PeriodSummary, containing exactly the
        periods present in the input (in chronological era order).
    """
    df = metrics_frame(records, derived, config)
    df["diversification_index"] = df["diversification_index"].astype(float)

    grouped = df.groupby("period", sort=False).agg(
        n_years=("year", "size"),
        first_year=("year", "min"),
        last_year=("year", "max"),
        mean_nominal=("nominal_gbp_millions", "mean"),
        mean_dependency=("government_dependency", "mean"),
        mean_diversification=("diversification_index", "mean"),
    )

    summary: dict[str, PeriodSummary] = {}
    for period in sorted(grouped.index, key=PERIODS.index):
        row = grouped.loc[period]
        summary[period] = PeriodSummary(
            period=period,
            n_years=int(row["n_years"]),
            first_year=int(row["first_year"]),
            last_year=int(row["last_year"]),
            mean_nominal_gbp_millions=round(float(row["mean_nominal"]), 1),
            mean_government_dependency_pct=round(float(row["mean_dependency"]) * 100, 1),
            mean_diversification_index=_none_if_nan(row["mean_diversification"], 3),
        )

    logger.debug("Period summary computed for %d periods.", len(summary))
    return summary
