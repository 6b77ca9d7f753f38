# src/amlich/features/cyclical.py
from __future__ import annotations

from dataclasses import dataclass

from amlich.features.config import DEFAULT_LOCALE, LocaleTable

# ============================================================
# Can Chi
#   year : stem (y - 4) % 10, branch (y - 4) % 12   (1984 = Giáp Tý)
#   month: stem (y * 12 + m + 3) % 10, branch (m + 1) % 12
#          month 1 is always a Dần month; a leap month shares its ordinal's name
#   day  : stem (jdn + 9) % 10, branch (jdn + 1) % 12
# ============================================================


@dataclass(frozen=True)
class CycleIndex:
    stem: int     # 0..9
    branch: int   # 0..11

    @property
    def sexagenary(self) -> int:
        """0..59 position in the 60-term cycle (0 = Giáp Tý)."""
        # CRT: x % 10 == stem and x % 12 == branch
        return (6 * self.stem - 5 * self.branch) % 60


def year_cycle_index(lunar_year: int) -> CycleIndex:
    y = int(lunar_year)
    return CycleIndex(stem=(y - 4) % 10, branch=(y - 4) % 12)


def month_cycle_index(lunar_year: int, lunar_month: int) -> CycleIndex:
    y = int(lunar_year)
    m = int(lunar_month)
    if not (1 <= m <= 12):
        raise ValueError(f"lunar_month out of range: {m}")
    return CycleIndex(stem=(y * 12 + m + 3) % 10, branch=(m + 1) % 12)


def day_cycle_index(jdn: int) -> CycleIndex:
    j = int(jdn)
    return CycleIndex(stem=(j + 9) % 10, branch=(j + 1) % 12)


def get_can_chi_year(lunar_year: int, *, locale: LocaleTable = DEFAULT_LOCALE) -> str:
    """e.g. 2024 -> "Giáp Thìn"."""
    ix = year_cycle_index(lunar_year)
    return locale.cycle_name(ix.stem, ix.branch)


def get_can_chi_month(lunar_year: int, lunar_month: int, *, locale: LocaleTable = DEFAULT_LOCALE) -> str:
    ix = month_cycle_index(lunar_year, lunar_month)
    return locale.cycle_name(ix.stem, ix.branch)


def get_can_chi_day(jdn: int, *, locale: LocaleTable = DEFAULT_LOCALE) -> str:
    ix = day_cycle_index(jdn)
    return locale.cycle_name(ix.stem, ix.branch)


def get_zodiac_animal(lunar_year: int, *, locale: LocaleTable = DEFAULT_LOCALE) -> str:
    """e.g. 2024 -> "Thìn (Rồng)", 2023 -> "Mão (Mèo)"."""
    return locale.zodiac_animals[year_cycle_index(lunar_year).branch]
