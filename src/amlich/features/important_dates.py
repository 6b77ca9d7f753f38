# src/amlich/features/important_dates.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional, Tuple, Union

from amlich.core.errors import OutOfRange
from amlich.core.lunisolar import LunisolarCalendar, default_calendar
from amlich.core.timeutil import Clock, to_vietnam_date, today_vietnam
from amlich.features.config import DEFAULT_LOCALE, LocaleTable
from amlich.features.lunar_date import LunarDate, format_lunar_date, lunar_date_for, lunar_date_from_lunar

log = logging.getLogger(__name__)

# (lunar_year, month, is_leap)
MonthKey = Tuple[int, int, bool]

# a missing (month, day) only ever needs one extra step; bound the loop anyway
_MAX_FORWARD_STEPS = 3


@dataclass(frozen=True)
class ImportantDates:
    from_date: date
    next_mong1: date
    next_ram: date
    mong1_info: LunarDate
    ram_info: LunarDate


@dataclass(frozen=True)
class TodaySummary:
    lunar_date: LunarDate
    formatted: str
    important: ImportantDates
    days_to_mong1: int
    days_to_ram: int


def next_lunar_month(key: MonthKey, *, calendar: Optional[LunisolarCalendar] = None) -> MonthKey:
    """
    Month that follows (year, month, is_leap).

    A regular month is followed by its own leap month when the year has one;
    12 wraps to month 1 of the next year.
    """
    cal = calendar if calendar is not None else default_calendar()
    year, month, is_leap = key
    if not is_leap and cal.leap_month_of_year(year) == month:
        return (year, month, True)
    if month == 12:
        return (year + 1, 1, False)
    return (year, month + 1, False)


def _resolve_forward(
    key: MonthKey,
    day: int,
    cal: LunisolarCalendar,
) -> MonthKey:
    for _ in range(_MAX_FORWARD_STEPS):
        res = cal.resolve(key[0], key[1], day, key[2])
        if res.ok:
            return key
        if isinstance(res.error, OutOfRange):
            # outside the supported window
            raise res.error
        log.debug("lunar %s day %d does not exist, stepping forward", key, day)
        key = next_lunar_month(key, calendar=cal)
    return key


def next_first_and_fifteenth(
    from_instant: Union[date, datetime, None] = None,
    *,
    clock: Optional[Clock] = None,
    locale: LocaleTable = DEFAULT_LOCALE,
    calendar: Optional[LunisolarCalendar] = None,
) -> ImportantDates:
    """
    Next Mồng 1 and Rằm relative to from_instant (Vietnam civil date).

    - lunar day < 15: Rằm of the current month, Mồng 1 of the following month
    - otherwise: Mồng 1 of the following month, Rằm of the month after that
    """
    cal = calendar if calendar is not None else default_calendar()
    today = to_vietnam_date(from_instant) if from_instant is not None else today_vietnam(clock)

    cur = cal.gregorian_to_lunar(today)
    cur_key: MonthKey = (cur.year, cur.month, cur.is_leap)

    mong1_key = _resolve_forward(next_lunar_month(cur_key, calendar=cal), 1, cal)
    if cur.day < 15:
        ram_key = cur_key
    else:
        ram_key = next_lunar_month(mong1_key, calendar=cal)
    ram_key = _resolve_forward(ram_key, 15, cal)

    mong1_info = lunar_date_from_lunar(mong1_key[0], mong1_key[1], 1, mong1_key[2], locale=locale, calendar=cal)
    ram_info = lunar_date_from_lunar(ram_key[0], ram_key[1], 15, ram_key[2], locale=locale, calendar=cal)
    return ImportantDates(
        from_date=today,
        next_mong1=mong1_info.gregorian_date,
        next_ram=ram_info.gregorian_date,
        mong1_info=mong1_info,
        ram_info=ram_info,
    )


def days_until(
    target: Union[date, datetime],
    *,
    today: Optional[date] = None,
    clock: Optional[Clock] = None,
) -> int:
    """Whole civil days from today (Vietnam) to target; negative if past."""
    t0 = today if today is not None else today_vietnam(clock)
    return (to_vietnam_date(target) - t0).days


def important_dates_for_year(
    lunar_year: int,
    *,
    locale: LocaleTable = DEFAULT_LOCALE,
    calendar: Optional[LunisolarCalendar] = None,
) -> List[LunarDate]:
    """Every Mồng 1 and Rằm of a lunar year (leap month included), ascending."""
    cal = calendar if calendar is not None else default_calendar()
    out: List[LunarDate] = []
    for m in cal.year_months(lunar_year):
        for day in (1, 15):
            res = cal.resolve(m.year, m.month, day, m.is_leap)
            if not res.ok:
                # only the edges of the supported window
                log.debug("skip %s/%s day %d: %s", m.year, m.month, day, res.error)
                continue
            out.append(lunar_date_for(res.unwrap(), locale=locale, calendar=cal))
    return out


def today_summary(
    *,
    clock: Optional[Clock] = None,
    locale: LocaleTable = DEFAULT_LOCALE,
    calendar: Optional[LunisolarCalendar] = None,
) -> TodaySummary:
    today = today_vietnam(clock)
    ld = lunar_date_for(today, locale=locale, calendar=calendar)
    imp = next_first_and_fifteenth(today, locale=locale, calendar=calendar)
    return TodaySummary(
        lunar_date=ld,
        formatted=format_lunar_date(ld, include_cycle=True, locale=locale),
        important=imp,
        days_to_mong1=days_until(imp.next_mong1, today=today),
        days_to_ram=days_until(imp.next_ram, today=today),
    )
