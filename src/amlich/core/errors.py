# src/amlich/core/errors.py
from __future__ import annotations

from datetime import date
from typing import Optional, Union


class AmLichError(Exception):
    """Base error."""


class InvalidLunarDate(AmLichError, ValueError):
    """
    The (year, month, day, is_leap) combination does not exist.

    reason is one of:
      - "month_out_of_range" / "day_out_of_range": outside 1..12 / 1..30
      - "no_leap_month": the year has no leap month at all
      - "leap_month_mismatch": the year's leap month has another ordinal
      - "day_exceeds_month_length": e.g. day 30 in a 29-day month
    """

    def __init__(self, year: int, month: int, day: int, is_leap: bool, reason: str) -> None:
        self.year = int(year)
        self.month = int(month)
        self.day = int(day)
        self.is_leap = bool(is_leap)
        self.reason = reason
        leap = " (leap)" if is_leap else ""
        super().__init__(f"invalid lunar date {year}-{month:02d}{leap}-{day:02d}: {reason}")


class OutOfRange(AmLichError, ValueError):
    """A year or date outside the supported window."""

    def __init__(
        self,
        value: Union[int, date],
        lower: Union[int, date],
        upper: Union[int, date],
        what: str = "year",
    ) -> None:
        self.value = value
        self.lower = lower
        self.upper = upper
        self.what = what
        super().__init__(f"{what} out of supported range: {value} (supported {lower} .. {upper})")


class EngineUnavailableError(AmLichError):
    """Raised when an optional astronomy provider (e.g. skyfield) cannot be built."""

    def __init__(self, name: str, cause: Optional[BaseException] = None) -> None:
        self.name = name
        msg = f"astronomy provider unavailable: {name}"
        if cause is not None:
            msg = f"{msg} ({cause})"
        super().__init__(msg)
