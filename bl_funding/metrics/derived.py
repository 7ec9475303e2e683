"""
bl_funding/metrics/derived.py — Per-year derived funding metrics.

Four metrics are computed for every year of the funding table:

    1. Period: which policy era the year belongs to.
           year <= 2007          → 'Pre-Crisis'
           2008 <= year <= 2015  → 'Austerity Era'
           year >= 2016          → 'Recovery Era'
    2. Diversification index: 1 - HHI over the four main income categories.
           total   = gia + voluntary + investment + services
           HHI     = sum((component_i / total)^2)
           index   = 1 - HHI
       HHI ranges from 0.25 (four equal shares) to 1.0 (a single source), so
       the index ranges from 0.75 (evenly spread) down to 0.0 (one source).
       'other' income is excluded from the denominator.
    3. Government dependency: gia / nominal total.
    4. Real change: year-over-year % change of the inflation-adjusted total.

Every denominator is checked. A zero denominator raises DivisionError naming
the year; nothing is silently turned into NaN or infinity.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from bl_funding.config import DEFAULT_CONFIG, BLFundingConfig
from bl_funding.errors import DivisionError, FundingDataError
from bl_funding.records import MAIN_COMPONENTS, FundingRecord

logger = logging.getLogger(__name__)

PRE_CRISIS = "Pre-Crisis"
AUSTERITY = "Austerity Era"
RECOVERY = "Recovery Era"

PERIODS = (PRE_CRISIS, AUSTERITY, RECOVERY)


@dataclass(frozen=True)
class DerivedMetrics:
    """
    Derived metrics for a single year.

    Fields:
        year:                   Carried from the FundingRecord.
        period:                 'Pre-Crisis' | 'Austerity Era' | 'Recovery Era'.
        diversification_index:  1 - HHI over the four main income shares
                                (0.0–0.75). None only under the 'null'
                                zero-total policy.
        government_dependency:  GIA as a fraction of nominal total (0.0–1.0).
        real_change_pct:        Year-over-year % change of the real total.
                                None for the first year in the sequence.
    """
    year: int
    period: str
    diversification_index: Optional[float]
    government_dependency: float
    real_change_pct: Optional[float]


def classify_period(year: int, config: BLFundingConfig = DEFAULT_CONFIG) -> str:
    """Map a calendar year to its policy era. Boundaries are inclusive."""
    if year <= config.pre_crisis_last_year:
        return PRE_CRISIS
    if year < config.recovery_first_year:
        return AUSTERITY
    return RECOVERY


def concentration_index(record: FundingRecord) -> float:
    """
    Herfindahl-Hirschman concentration over the four main income categories.

    Returned on the 0.25–1.0 share scale (not the ×10,000 market convention).

    Raises:
        DivisionError: if the four components sum to zero.
    """
    components = [getattr(record, name) for name in MAIN_COMPONENTS]
    total = sum(components)
    if total == 0:
        raise DivisionError(record.year, "total income (gia + voluntary + investment + services)")
    return sum((c / total) ** 2 for c in components)


def diversification_index(record: FundingRecord) -> float:
    """
    Revenue diversification index: 1 - HHI of the four main income shares.

    Example:
        gia=100, voluntary=10, investment=5, services=5
        total = 120, shares = [0.833, 0.083, 0.042, 0.042]
        HHI ≈ 0.705, index ≈ 0.295

    Raises:
        DivisionError: if gia + voluntary + investment + services == 0.
    """
    return 1.0 - concentration_index(record)


def government_dependency(record: FundingRecord) -> float:
    """GIA / nominal total. Raises DivisionError when the nominal total is zero."""
    if record.nominal_gbp_millions == 0:
        raise DivisionError(record.year, "nominal total")
    return record.gia_gbp_millions / record.nominal_gbp_millions


def real_change_pct(records: Sequence[FundingRecord], index: int) -> Optional[float]:
    """
    Year-over-year percent change of total_y2000_gbp_millions at `index`.

    Returns None for index 0 (no previous year).

    Raises:
        IndexError:    if index is outside the sequence.
        DivisionError: if the previous year's real total is zero.
    """
    if index < 0 or index >= len(records):
        raise IndexError(f"record index {index} out of range for {len(records)} records")
    if index == 0:
        return None
    prev = records[index - 1].total_y2000_gbp_millions
    curr = records[index].total_y2000_gbp_millions
    if prev == 0:
        raise DivisionError(records[index].year, f"previous real total ({records[index - 1].year})")
    return (curr - prev) / prev * 100


def check_ordering(records: Sequence[FundingRecord]) -> None:
    """
    Validate that records are non-empty, sorted by year and duplicate-free.

    Raises:
        FundingDataError: describing the first violation found.
    """
    if not records:
        raise FundingDataError("no funding records supplied")
    for prev, curr in zip(records, records[1:]):
        if curr.year == prev.year:
            raise FundingDataError(f"duplicate year {curr.year}")
        if curr.year < prev.year:
            raise FundingDataError(
                f"records not sorted by year: {prev.year} is followed by {curr.year}"
            )


def derive_metrics(
    records: Sequence[FundingRecord],
    config: BLFundingConfig = DEFAULT_CONFIG,
) -> list[DerivedMetrics]:
    """
    Compute DerivedMetrics for every record in a single forward pass.

    Args:
        records: FundingRecords sorted by year ascending, no duplicate years.
        config:  BLFundingConfig. Uses:
                    config.pre_crisis_last_year  (default 2007)
                    config.recovery_first_year   (default 2016)
                    config.zero_total_policy     (default 'raise')

    Returns:
        List of DerivedMetrics in the same order as `records`.

    Raises:
        FundingDataError: if records are empty, unsorted or contain duplicates.
        DivisionError:    on any zero denominator (see module docstring). Under
                          zero_total_policy='null' a zero main-income total
                          yields diversification_index=None instead.
    """
    if config.zero_total_policy not in ("raise", "null"):
        raise ValueError(f"unknown zero_total_policy: {config.zero_total_policy!r}")
    check_ordering(records)

    results: list[DerivedMetrics] = []
    for i, record in enumerate(records):
        try:
            div_index: Optional[float] = diversification_index(record)
        except DivisionError:
            if config.zero_total_policy == "raise":
                raise
            logger.warning(
                "Year %d: main income components sum to zero — "
                "diversification index left empty.", record.year,
            )
            div_index = None

        results.append(
            DerivedMetrics(
                year=record.year,
                period=classify_period(record.year, config),
                diversification_index=div_index,
                government_dependency=government_dependency(record),
                real_change_pct=real_change_pct(records, i),
            )
        )

    logger.debug(
        "Derived metrics for %d years (%d–%d).",
        len(results), results[0].year, results[-1].year,
    )
    return results
