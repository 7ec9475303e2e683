"""
bl_funding/ingestion/loader.py — CSV → FundingRecord loading layer.

Reads the TidyTuesday bl_funding.csv (or any CSV with the same columns),
coerces the numeric columns and validates the table before any metric sees it:

    - every required column is present
    - required values are numeric and non-null
    - years are unique (rows are sorted ascending on load)

gia_as_percent_of_peak_gia is optional and may be null.
Extra columns in the CSV (e.g. year_2000_gbp_millions, inflation_adjustment)
are ignored.
"""

import logging
from typing import Sequence

import pandas as pd

from bl_funding.errors import FundingDataError
from bl_funding.metrics.derived import check_ordering
from bl_funding.records import OPTIONAL_COLUMNS, REQUIRED_COLUMNS, FundingRecord

logger = logging.getLogger(__name__)


def validate_funding_frame(df: pd.DataFrame) -> pd.DataFrame:
    """
    Coerce and validate a raw funding DataFrame.

    Returns:
        A copy with numeric dtypes, sorted by year, index reset.

    Raises:
        FundingDataError: on missing columns, non-numeric or null required
                          values, or duplicate years.
    """
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise FundingDataError(f"missing required columns: {', '.join(missing)}")

    df = df.copy()
    for column in REQUIRED_COLUMNS + tuple(c for c in OPTIONAL_COLUMNS if c in df.columns):
        df[column] = pd.to_numeric(df[column], errors="coerce")
    if "gia_as_percent_of_peak_gia" not in df.columns:
        logger.warning("Column gia_as_percent_of_peak_gia absent — treating every year as unknown.")
        df["gia_as_percent_of_peak_gia"] = float("nan")

    nulls = df[list(REQUIRED_COLUMNS)].isna()
    if nulls.any().any():
        bad = nulls.any(axis=1)
        details = []
        for idx in df.index[bad]:
            cols = [c for c in REQUIRED_COLUMNS if nulls.at[idx, c]]
            year = df.at[idx, "year"]
            label = "unknown year" if pd.isna(year) else f"year {int(year)}"
            details.append(f"{label}: {', '.join(cols)}")
        raise FundingDataError("null or non-numeric required values — " + "; ".join(details))

    if (df["year"] % 1 != 0).any():
        raise FundingDataError("year column contains non-integer values")
    df["year"] = df["year"].astype(int)

    dupes = df["year"][df["year"].duplicated()].unique().tolist()
    if dupes:
        raise FundingDataError(f"duplicate years: {', '.join(str(y) for y in dupes)}")

    return df.sort_values("year").reset_index(drop=True)


def frame_to_records(df: pd.DataFrame) -> list[FundingRecord]:
    """Convert a validated funding DataFrame to FundingRecords."""
    columns = list(REQUIRED_COLUMNS + OPTIONAL_COLUMNS)
    return [FundingRecord.from_row(row) for row in df[columns].to_dict(orient="records")]


def load_funding_records(csv_path: str) -> list[FundingRecord]:
    """
    Load FundingRecords from a CSV file.

    Args:
        csv_path: Path to bl_funding.csv.

    Returns:
        FundingRecords sorted by year ascending.

    Raises:
        FileNotFoundError: if csv_path does not exist.
        FundingDataError:  if the table fails validation.
    """
    logger.info("Loading funding data from: %s", csv_path)
    df = validate_funding_frame(pd.read_csv(csv_path))
    records = frame_to_records(df)
    check_ordering(records)

    expected = set(range(records[0].year, records[-1].year + 1))
    gaps = sorted(expected - {r.year for r in records})
    if gaps:
        logger.warning("Funding data has gaps in its year range: %s", gaps)

    null_peak = sum(1 for r in records if r.gia_as_percent_of_peak_gia is None)
    logger.info(
        "Loaded %d years (%d–%d); %d without a GIA peak share.",
        len(records), records[0].year, records[-1].year, null_peak,
    )
    return records


def write_records_csv(records: Sequence[FundingRecord], path: str) -> str:
    """Write FundingRecords back to CSV (the raw-data export)."""
    pd.DataFrame([vars(r) for r in records]).to_csv(path, index=False)
    return path
