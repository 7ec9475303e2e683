"""
bl_funding/records.py — FundingRecord, one row of the raw funding table.

All monetary fields are in GBP millions. `nominal_gbp_millions` is expected
to be close to the sum of the five components but this is not enforced.
"""

import math
from dataclasses import dataclass
from typing import Optional

# The four categories used by the diversification index ("other" excluded).
MAIN_COMPONENTS = (
    "gia_gbp_millions",
    "voluntary_gbp_millions",
    "investment_gbp_millions",
    "services_gbp_millions",
)

INCOME_COMPONENTS = MAIN_COMPONENTS + ("other_gbp_millions",)

REQUIRED_COLUMNS = ("year",) + INCOME_COMPONENTS + (
    "nominal_gbp_millions",
    "total_y2000_gbp_millions",
)

OPTIONAL_COLUMNS = ("gia_as_percent_of_peak_gia",)

SOURCE_LABELS = {
    "gia": "Government (GIA)",
    "voluntary": "Voluntary/Donations",
    "investment": "Investment Income",
    "services": "Services Income",
    "other": "Other",
}


@dataclass(frozen=True)
class FundingRecord:
    """
    Funding figures for a single year.

    Fields:
        year:                        Calendar year (unique key).
        gia_gbp_millions:            Government grant-in-aid, nominal.
        voluntary_gbp_millions:      Donations / voluntary income.
        investment_gbp_millions:     Investment income.
        services_gbp_millions:       Commercial services income.
        other_gbp_millions:          Residual income.
        nominal_gbp_millions:        Total funding, nominal.
        total_y2000_gbp_millions:    Total funding in year-2000 pounds.
        gia_as_percent_of_peak_gia:  GIA as a fraction of its historical
                                     maximum (0.0–1.0), or None if unknown.
    """
    year: int
    gia_gbp_millions: float
    voluntary_gbp_millions: float
    investment_gbp_millions: float
    services_gbp_millions: float
    other_gbp_millions: float
    nominal_gbp_millions: float
    total_y2000_gbp_millions: float
    gia_as_percent_of_peak_gia: Optional[float] = None

    @classmethod
    def from_row(cls, row: dict) -> "FundingRecord":
        """Build a record from a mapping of column name to value (NaN peak → None)."""
        peak = row.get("gia_as_percent_of_peak_gia")
        if peak is not None and isinstance(peak, float) and math.isnan(peak):
            peak = None
        return cls(
            year=int(row["year"]),
            gia_gbp_millions=float(row["gia_gbp_millions"]),
            voluntary_gbp_millions=float(row["voluntary_gbp_millions"]),
            investment_gbp_millions=float(row["investment_gbp_millions"]),
            services_gbp_millions=float(row["services_gbp_millions"]),
            other_gbp_millions=float(row["other_gbp_millions"]),
            nominal_gbp_millions=float(row["nominal_gbp_millions"]),
            total_y2000_gbp_millions=float(row["total_y2000_gbp_millions"]),
            gia_as_percent_of_peak_gia=None if peak is None else float(peak),
        )
