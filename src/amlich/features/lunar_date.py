# src/amlich/features/lunar_date.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from amlich.core.lunisolar import LunarYMD, LunisolarCalendar, gregorian_to_lunar, lunar_to_gregorian
from amlich.core.timeutil import jdn_from_date
from amlich.features.config import (
    DEFAULT_LOCALE,
    MOON_PHASE_BANDS,
    SIGNIFICANCE_TEXT_BANDS,
    SIGNIFICANCE_TEXT_DEFAULT,
    LocaleTable,
)
from amlich.features.cyclical import get_can_chi_day, get_can_chi_month, get_can_chi_year, get_zodiac_animal


@dataclass(frozen=True)
class LunarDate:
    """
    A lunar date plus every display field derived from it.

    Build it with lunar_date_for() / lunar_date_from_lunar(); the
    constructor does not re-validate that day fits the month.
    """
    year: int
    month: int
    day: int
    is_leap_month: bool
    gregorian_date: date

    month_name: str
    day_name: str
    moon_phase: str
    moon_phase_label: str
    cycle_year_name: str
    cycle_month_name: str
    cycle_day_name: str
    zodiac_animal_name: str
    cultural_significance: Optional[str] = None

    @property
    def ymd(self) -> LunarYMD:
        return LunarYMD(self.year, self.month, self.day, self.is_leap_month)

    @property
    def is_important(self) -> bool:
        return is_important_lunar_date(self.day)


def is_important_lunar_date(lunar_day: int) -> bool:
    """Mồng 1 or Rằm."""
    return int(lunar_day) in (1, 15)


def moon_phase_for_day(lunar_day: int) -> str:
    d = int(lunar_day)
    for first, last, key in MOON_PHASE_BANDS:
        if first <= d <= last:
            return key
    raise ValueError(f"lunar_day out of range: {d}")


def cultural_significance_text(lunar_day: int) -> str:
    """Longer per-day text for detail views."""
    d = int(lunar_day)
    for first, last, text in SIGNIFICANCE_TEXT_BANDS:
        if first <= d <= last:
            return text
    return SIGNIFICANCE_TEXT_DEFAULT


def describe(ymd: LunarYMD, gregorian: date, *, locale: LocaleTable = DEFAULT_LOCALE) -> LunarDate:
    """Attach names to already-resolved lunar coordinates."""
    phase = moon_phase_for_day(ymd.day)
    return LunarDate(
        year=ymd.year,
        month=ymd.month,
        day=ymd.day,
        is_leap_month=ymd.is_leap,
        gregorian_date=gregorian,
        month_name=locale.month_name(ymd.month, ymd.is_leap),
        day_name=locale.day_name(ymd.day),
        moon_phase=phase,
        moon_phase_label=locale.moon_phase_label(phase),
        cycle_year_name=get_can_chi_year(ymd.year, locale=locale),
        cycle_month_name=get_can_chi_month(ymd.year, ymd.month, locale=locale),
        cycle_day_name=get_can_chi_day(jdn_from_date(gregorian), locale=locale),
        zodiac_animal_name=get_zodiac_animal(ymd.year, locale=locale),
        cultural_significance=locale.cultural_significance(ymd.month, ymd.day, ymd.is_leap),
    )


def lunar_date_for(
    d: date,
    *,
    locale: LocaleTable = DEFAULT_LOCALE,
    calendar: Optional[LunisolarCalendar] = None,
) -> LunarDate:
    """Gregorian date -> LunarDate with metadata."""
    return describe(gregorian_to_lunar(d, calendar=calendar), d, locale=locale)


def lunar_date_from_lunar(
    year: int,
    month: int,
    day: int,
    is_leap_month: bool = False,
    *,
    locale: LocaleTable = DEFAULT_LOCALE,
    calendar: Optional[LunisolarCalendar] = None,
) -> LunarDate:
    """Validated lunar coordinates -> LunarDate (raises InvalidLunarDate / OutOfRange)."""
    g = lunar_to_gregorian(year, month, day, is_leap_month, calendar=calendar)
    return describe(LunarYMD(int(year), int(month), int(day), bool(is_leap_month)), g, locale=locale)


def format_lunar_date(
    ld: LunarDate,
    include_cycle: bool = False,
    *,
    locale: LocaleTable = DEFAULT_LOCALE,
) -> str:
    """
    "Rằm Tháng Tám năm 2024"
    "Mồng 1 Tháng Tư nhuận năm 2020 (Canh Tý)" with include_cycle=True
    """
    s = f"{ld.day_name} {ld.month_name} {locale.year_word} {ld.year}"
    if include_cycle:
        s += f" ({ld.cycle_year_name})"
    return s
