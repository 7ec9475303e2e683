"""
bl_funding/metrics/trends.py — Long-run funding trend figures.

Headline numbers quoted in the report and chart annotations:

    peak_recovery_series()     — GIA as % of its peak, nulls dropped.
    current_peak_shortfall()   — how far the latest GIA sits below peak.
    decline_from_peak()        — % fall of a component from its maximum.
    purchasing_power_change()  — nominal vs real growth over the full span.

Null gia_as_percent_of_peak_gia values are always excluded, never read as 0.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

from bl_funding.errors import DivisionError, FundingDataError, MissingValueError
from bl_funding.records import FundingRecord, INCOME_COMPONENTS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PeakDecline:
    """Decline of one income component from its historical maximum."""
    field: str
    peak_year: int
    peak_value: float
    latest_year: int
    latest_value: float
    decline_pct: float


@dataclass(frozen=True)
class PurchasingPower:
    """Nominal vs inflation-adjusted change between the first and last year."""
    first_year: int
    last_year: int
    nominal_change_pct: float
    real_change_pct: float

    @property
    def erosion_pct_points(self) -> float:
        """Percentage points of nominal growth absorbed by inflation."""
        return self.nominal_change_pct - self.real_change_pct


def peak_recovery_series(records: Sequence[FundingRecord]) -> list[tuple[int, float]]:
    """(year, gia_as_percent_of_peak_gia) for every year where the value is known."""
    series = [
        (r.year, r.gia_as_percent_of_peak_gia)
        for r in records
        if r.gia_as_percent_of_peak_gia is not None
    ]
    dropped = len(records) - len(series)
    if dropped:
        logger.debug("Peak recovery series: dropped %d years with no GIA peak share.", dropped)
    return series


def current_peak_shortfall(records: Sequence[FundingRecord]) -> float:
    """
    Fraction by which the most recent year's GIA sits below its historical peak.

    Example: gia_as_percent_of_peak_gia = 0.75 → shortfall 0.25 ("25% below peak").

    Raises:
        FundingDataError:  if records is empty.
        MissingValueError: if the most recent year has no peak share. The
                           previous known year is deliberately not used.
    """
    if not records:
        raise FundingDataError("no funding records supplied")
    latest = max(records, key=lambda r: r.year)
    if latest.gia_as_percent_of_peak_gia is None:
        raise MissingValueError("gia_as_percent_of_peak_gia", latest.year)
    return 1.0 - latest.gia_as_percent_of_peak_gia


def decline_from_peak(records: Sequence[FundingRecord], field: str) -> PeakDecline:
    """
    Percent decline of `field` in the latest year relative to its maximum.

    Args:
        records: FundingRecords.
        field:   One of the five income component fields, or
                 'nominal_gbp_millions' / 'total_y2000_gbp_millions'.

    Raises:
        ValueError:       if `field` is not a monetary FundingRecord field.
        FundingDataError: if records is empty.
        DivisionError:    if the peak value is zero.
    """
    allowed = INCOME_COMPONENTS + ("nominal_gbp_millions", "total_y2000_gbp_millions")
    if field not in allowed:
        raise ValueError(f"unsupported field for decline_from_peak: {field!r}")
    if not records:
        raise FundingDataError("no funding records supplied")

    peak = max(records, key=lambda r: getattr(r, field))
    latest = max(records, key=lambda r: r.year)
    peak_value = getattr(peak, field)
    if peak_value == 0:
        raise DivisionError(peak.year, f"peak {field}")
    latest_value = getattr(latest, field)

    return PeakDecline(
        field=field,
        peak_year=peak.year,
        peak_value=peak_value,
        latest_year=latest.year,
        latest_value=latest_value,
        decline_pct=(peak_value - latest_value) / peak_value * 100,
    )


def purchasing_power_change(records: Sequence[FundingRecord]) -> PurchasingPower:
    """
    Compare nominal and real (year-2000 pounds) growth from first to last year.

    Raises:
        FundingDataError: if records is empty.
        DivisionError:    if the first year's nominal or real total is zero.
    """
    if not records:
        raise FundingDataError("no funding records supplied")
    first = min(records, key=lambda r: r.year)
    last = max(records, key=lambda r: r.year)
    if first.nominal_gbp_millions == 0:
        raise DivisionError(first.year, "nominal total")
    if first.total_y2000_gbp_millions == 0:
        raise DivisionError(first.year, "real total")

    nominal = (last.nominal_gbp_millions - first.nominal_gbp_millions) / first.nominal_gbp_millions * 100
    real = (last.total_y2000_gbp_millions - first.total_y2000_gbp_millions) / first.total_y2000_gbp_millions * 100
    return PurchasingPower(
        first_year=first.year,
        last_year=last.year,
        nominal_change_pct=nominal,
        real_change_pct=real,
    )
