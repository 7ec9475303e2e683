"""
bl_funding/errors.py — Exception hierarchy.

Every error raised by the package derives from BLFundingError so the CLI can
report it cleanly. The core metric functions raise and never substitute
sentinel values.
"""

from typing import Optional


class BLFundingError(Exception):
    """Base class for all bl_funding errors."""


class DivisionError(BLFundingError, ZeroDivisionError):
    """
    A metric denominator was zero for a given year.

    Attributes:
        year:     Year of the offending record.
        quantity: Name of the zero denominator (e.g. "total income").
    """

    def __init__(self, year: int, quantity: str):
        self.year = year
        self.quantity = quantity
        super().__init__(f"{quantity} is zero for year {year}")


class MissingValueError(BLFundingError, ValueError):
    """A value required for a calculation is null."""

    def __init__(self, field: str, year: Optional[int] = None):
        self.field = field
        self.year = year
        where = f" for year {year}" if year is not None else ""
        super().__init__(f"{field} is missing{where}")


class FundingDataError(BLFundingError, ValueError):
    """Input table violates the funding record schema or ordering."""


class DatasetUnavailableError(BLFundingError, RuntimeError):
    """The raw dataset could not be downloaded and no cached copy exists."""
