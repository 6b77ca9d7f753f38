# src/amlich/features/month_grid.py
from __future__ import annotations

import calendar as _pycal
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from amlich.core.lunisolar import LunisolarCalendar, default_calendar
from amlich.core.timeutil import Clock, today_vietnam
from amlich.features.config import DEFAULT_LOCALE, LocaleTable
from amlich.features.lunar_date import LunarDate, describe, is_important_lunar_date
from amlich.features.recurrence import Occurrence


@dataclass(frozen=True)
class CalendarDay:
    gregorian_date: date
    lunar_date: LunarDate
    is_today: bool
    is_current_month: bool
    is_important: bool
    holiday_name: Optional[str] = None
    occurrences: Tuple[Occurrence, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CalendarMonth:
    """Sunday-first grid for one Gregorian month plus lunar header info (from the 15th)."""
    year: int
    month: int
    days: Tuple[CalendarDay, ...]
    lunar_month_name: str
    lunar_year: int
    cycle_year_name: str
    zodiac_animal_name: str

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return date(self.year, self.month, _pycal.monthrange(self.year, self.month)[1])

    def weeks(self) -> List[Tuple[CalendarDay, ...]]:
        return [self.days[i:i + 7] for i in range(0, len(self.days), 7)]


def holiday_for(
    ld: LunarDate,
    g: date,
    *,
    locale: LocaleTable = DEFAULT_LOCALE,
) -> Optional[str]:
    """Lunar table first (regular months only), then the Gregorian table."""
    if not ld.is_leap_month:
        name = locale.lunar_holidays.get((ld.month, ld.day))
        if name is not None:
            return name
    return locale.gregorian_holidays.get((g.month, g.day))


def grid_bounds(year: int, month: int) -> Tuple[date, date]:
    """(Sunday on/before the 1st, Saturday on/after the last day)."""
    first = date(year, month, 1)
    last = date(year, month, _pycal.monthrange(year, month)[1])
    # date.weekday(): Monday=0 .. Sunday=6
    start = first - timedelta(days=(first.weekday() + 1) % 7)
    end = last + timedelta(days=(5 - last.weekday()) % 7)
    return start, end


def build_month(
    year: int,
    month: int,
    occurrences: Iterable[Occurrence] = (),
    *,
    today: Optional[date] = None,
    clock: Optional[Clock] = None,
    locale: LocaleTable = DEFAULT_LOCALE,
    calendar: Optional[LunisolarCalendar] = None,
) -> CalendarMonth:
    """
    Month grid for Gregorian (year, month), month in 1..12.

    today is read once (from clock, Vietnam time) when not given.
    """
    if not (1 <= int(month) <= 12):
        raise ValueError(f"month must be 1..12 (got {month})")
    cal = calendar if calendar is not None else default_calendar()
    t0 = today if today is not None else today_vietnam(clock)
    # also the range check for (year, month)
    mid = describe(cal.gregorian_to_lunar(date(year, month, 15)), date(year, month, 15), locale=locale)

    by_date: Dict[date, List[Occurrence]] = {}
    for occ in occurrences:
        by_date.setdefault(occ.gregorian_date, []).append(occ)

    start, end = grid_bounds(year, month)
    days: List[CalendarDay] = []
    for g, ymd in cal.lunar_dates_between(start, end + timedelta(days=1), strict=False):
        ld = describe(ymd, g, locale=locale)
        days.append(
            CalendarDay(
                gregorian_date=g,
                lunar_date=ld,
                is_today=(g == t0),
                is_current_month=(g.month == month and g.year == year),
                is_important=is_important_lunar_date(ymd.day),
                holiday_name=holiday_for(ld, g, locale=locale),
                occurrences=tuple(by_date.get(g, ())),
            )
        )

    return CalendarMonth(
        year=year,
        month=month,
        days=tuple(days),
        lunar_month_name=mid.month_name,
        lunar_year=mid.year,
        cycle_year_name=mid.cycle_year_name,
        zodiac_animal_name=mid.zodiac_animal_name,
    )
