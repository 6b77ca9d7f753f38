# src/amlich/features/recurrence.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from amlich.core.errors import InvalidLunarDate
from amlich.core.lunisolar import LunarYMD, LunisolarCalendar, default_calendar
from amlich.core.timeutil import Clock, today_vietnam
from amlich.features.config import DEFAULT_LOCALE, LocaleTable
from amlich.features.lunar_date import LunarDate, describe

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnniversaryDefinition:
    """
    A lunar (month, day) anniversary such as a giỗ.

    anchor_lunar_year is the lunar year the date was authored in; for a
    non-recurring definition it is the only year that counts.
    """
    lunar_month: int
    lunar_day: int
    is_leap_month: bool = False
    recurring: bool = True
    anchor_lunar_year: int = 0
    title: Optional[str] = None


@dataclass(frozen=True)
class Occurrence:
    gregorian_date: date
    lunar_date: LunarDate
    is_recurring_instance: bool
    definition: Optional[AnniversaryDefinition] = None


@dataclass(frozen=True)
class YearPlacement:
    """
    Result of placing a definition in one candidate lunar year.

    Exactly one of gregorian_date / reason is set. reason carries the
    InvalidLunarDate reason (e.g. "no_leap_month") or "out_of_range".
    """
    lunar_year: int
    gregorian_date: Optional[date] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.gregorian_date is not None


def place_in_year(
    definition: AnniversaryDefinition,
    lunar_year: int,
    *,
    calendar: Optional[LunisolarCalendar] = None,
) -> YearPlacement:
    """Never raises for dates that do not exist or fall outside the supported window."""
    cal = calendar if calendar is not None else default_calendar()
    res = cal.resolve(lunar_year, definition.lunar_month, definition.lunar_day, definition.is_leap_month)
    if res.ok:
        return YearPlacement(lunar_year=lunar_year, gregorian_date=res.date)
    err = res.error
    reason = err.reason if isinstance(err, InvalidLunarDate) else "out_of_range"
    return YearPlacement(lunar_year=lunar_year, reason=reason)


def _occurrence(
    definition: AnniversaryDefinition,
    lunar_year: int,
    g: date,
    locale: LocaleTable,
) -> Occurrence:
    ld = describe(_ymd(definition, lunar_year), g, locale=locale)
    return Occurrence(
        gregorian_date=g,
        lunar_date=ld,
        is_recurring_instance=(lunar_year != definition.anchor_lunar_year),
        definition=definition,
    )


def _ymd(definition: AnniversaryDefinition, lunar_year: int) -> LunarYMD:
    return LunarYMD(lunar_year, definition.lunar_month, definition.lunar_day, definition.is_leap_month)


def project_occurrences(
    definition: AnniversaryDefinition,
    window_start: date,
    window_end: date,
    *,
    locale: LocaleTable = DEFAULT_LOCALE,
    calendar: Optional[LunisolarCalendar] = None,
) -> List[Occurrence]:
    """
    Every Gregorian date in [window_start, window_end] (inclusive) on which
    the anniversary falls, ascending, without duplicates.

    A recurring definition is tried in each lunar year from
    window_start.year - 1 to window_end.year: the lunar year starts in
    Jan/Feb, so late-year lunar dates land in the next Gregorian year.
    """
    if window_end < window_start:
        raise ValueError(f"window_end {window_end} is before window_start {window_start}")

    cal = calendar if calendar is not None else default_calendar()

    if not definition.recurring:
        years: Iterable[int] = (definition.anchor_lunar_year,)
    else:
        years = range(window_start.year - 1, window_end.year + 1)

    found: Dict[date, Occurrence] = {}
    for y in years:
        placed = place_in_year(definition, y, calendar=cal)
        g = placed.gregorian_date
        if g is None:
            log.debug(
                "no occurrence of %02d/%02d%s in lunar year %d: %s",
                definition.lunar_month,
                definition.lunar_day,
                "L" if definition.is_leap_month else "",
                y,
                placed.reason,
            )
            continue
        if window_start <= g <= window_end and g not in found:
            found[g] = _occurrence(definition, y, g, locale)

    return [found[g] for g in sorted(found)]


def occurrences_in_gregorian_year(
    definition: AnniversaryDefinition,
    year: int,
    *,
    locale: LocaleTable = DEFAULT_LOCALE,
    calendar: Optional[LunisolarCalendar] = None,
) -> List[Occurrence]:
    return project_occurrences(
        definition,
        date(year, 1, 1),
        date(year, 12, 31),
        locale=locale,
        calendar=calendar,
    )


def upcoming_occurrences(
    definitions: Iterable[AnniversaryDefinition],
    *,
    today: Optional[date] = None,
    clock: Optional[Clock] = None,
    days: int = 7,
    locale: LocaleTable = DEFAULT_LOCALE,
    calendar: Optional[LunisolarCalendar] = None,
) -> List[Occurrence]:
    """Occurrences of all definitions within [today, today + days], by date then title."""
    if days < 0:
        raise ValueError(f"days must be >= 0 (got {days})")
    t0 = today if today is not None else today_vietnam(clock)
    t1 = t0 + timedelta(days=days)

    out: List[Occurrence] = []
    for d in definitions:
        out.extend(project_occurrences(d, t0, t1, locale=locale, calendar=calendar))
    out.sort(key=_sort_key)
    return out


def _sort_key(o: Occurrence) -> Tuple[date, str]:
    title = (o.definition.title if o.definition is not None else None) or ""
    return (o.gregorian_date, title)


def validate_definition(
    definition: AnniversaryDefinition,
    *,
    calendar: Optional[LunisolarCalendar] = None,
) -> None:
    """
    Raise InvalidLunarDate / OutOfRange if the authored date itself does not
    exist in its anchor year (for input forms).
    """
    cal = calendar if calendar is not None else default_calendar()
    res = cal.resolve(
        definition.anchor_lunar_year,
        definition.lunar_month,
        definition.lunar_day,
        definition.is_leap_month,
    )
    if res.error is not None:
        raise res.error
