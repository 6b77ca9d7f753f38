# src/amlich/core/timeutil.py
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Callable, Optional, Union
from zoneinfo import ZoneInfo

from .config import VIETNAM_TZ_NAME

VN_TZ = ZoneInfo(VIETNAM_TZ_NAME)
UTC = timezone.utc

# JDN(noon) = proleptic Gregorian ordinal + 1721425  (2000-01-01 -> 2451545)
_JDN_ORDINAL_OFFSET = 1721425

Clock = Callable[[], datetime]


def jdn_from_date(d: date) -> int:
    """Julian day number of a Gregorian calendar date."""
    return d.toordinal() + _JDN_ORDINAL_OFFSET


def date_from_jdn(jdn: int) -> date:
    """Inverse of jdn_from_date."""
    return date.fromordinal(int(jdn) - _JDN_ORDINAL_OFFSET)


def vietnam_now() -> datetime:
    """Default clock: current instant in Vietnam civil time."""
    return datetime.now(tz=VN_TZ)


def to_vietnam_date(x: Union[date, datetime]) -> date:
    """
    Resolve a calendar date in Vietnam civil time.

    - date: returned as-is (already a civil date)
    - aware datetime: converted to Asia/Ho_Chi_Minh first
    - naive datetime: taken to be Vietnam wall-clock time already
    """
    if isinstance(x, datetime):
        if x.tzinfo is None:
            return x.date()
        return x.astimezone(VN_TZ).date()
    return x


def today_vietnam(clock: Optional[Clock] = None) -> date:
    """Read the clock once and return today's civil date in Vietnam."""
    now = (clock or vietnam_now)()
    return to_vietnam_date(now)
