# src/amlich/features/solar_terms.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional

from amlich.core.lunisolar import LunisolarCalendar, default_calendar
from amlich.core.timeutil import jdn_from_date
from amlich.features.config import DEFAULT_LOCALE, SOLAR_TERMS, LocaleTable, solar_term_kind_from_n


@dataclass(frozen=True)
class SolarTerm:
    index: int          # 0..23, 0 = Xuân Phân
    name: str
    longitude_deg: int  # 0, 15, ..., 345
    kind: str           # "trung_khi" / "tiet_khi"


@dataclass(frozen=True)
class SolarTermStart:
    date: date
    term: SolarTerm


def _term(n: int, locale: LocaleTable) -> SolarTerm:
    return SolarTerm(
        index=n,
        name=locale.solar_term_names[n],
        longitude_deg=SOLAR_TERMS[n][0],
        kind=solar_term_kind_from_n(n),
    )


def solar_term_for_day(
    d: date,
    *,
    locale: LocaleTable = DEFAULT_LOCALE,
    calendar: Optional[LunisolarCalendar] = None,
) -> SolarTerm:
    """
    Tiết khí in effect on civil day d.

    Sampled at the end of the day (the next local midnight), so the day a
    term begins already carries its name.
    """
    cal = calendar if calendar is not None else default_calendar()
    cal.check_gregorian(d)
    n = cal.engine.solar_term_index(jdn_from_date(d) + 1)
    return _term(n, locale)


def solar_term_starts_between(
    start: date,
    end: date,
    *,
    locale: LocaleTable = DEFAULT_LOCALE,
    calendar: Optional[LunisolarCalendar] = None,
) -> List[SolarTermStart]:
    """Days in [start, end) on which a new tiết khí begins."""
    if not (start < end):
        raise ValueError("start must be < end")
    cal = calendar if calendar is not None else default_calendar()
    cal.check_gregorian(start)
    cal.check_gregorian(end - timedelta(days=1))

    out: List[SolarTermStart] = []
    prev = cal.engine.solar_term_index(jdn_from_date(start))
    cur = start
    while cur < end:
        n = cal.engine.solar_term_index(jdn_from_date(cur) + 1)
        if n != prev:
            out.append(SolarTermStart(date=cur, term=_term(n, locale)))
        prev = n
        cur = cur + timedelta(days=1)
    return out
