# src/amlich/core/lunisolar.py
from __future__ import annotations

import logging
import math
from bisect import bisect_right
from dataclasses import dataclass, field
from datetime import date, timedelta
from functools import lru_cache
from typing import Iterator, List, Optional, Tuple, Union

from .astronomy import SYNODIC_MONTH_DAYS, AstroProvider, AstronomyEngine, nearest_lunation_index
from .config import AMLICH_DEBUG_ENV, LuniSolarConfig, ProviderConfig, env_truthy
from .errors import AmLichError, EngineUnavailableError, InvalidLunarDate, OutOfRange
from .providers.meeus_provider import MeeusProvider
from .timeutil import date_from_jdn, jdn_from_date

log = logging.getLogger(__name__)

# month 11 search is anchored on Dec 31 relative to this day number
_MONTH11_BASE_JD = 2415021.0


def _debug_enabled() -> bool:
    return env_truthy(AMLICH_DEBUG_ENV)


# ============================================================
# Value types
# ============================================================

@dataclass(frozen=True)
class LunarYMD:
    year: int
    month: int
    day: int
    is_leap: bool = False

    def as_tuple(self) -> Tuple[int, int, int, bool]:
        return (self.year, self.month, self.day, self.is_leap)


@dataclass(frozen=True)
class LunarMonth:
    """One lunar month: [start, start + length)."""
    year: int
    month: int
    is_leap: bool
    start: date
    length: int

    @property
    def end(self) -> date:
        """Last civil day of the month (inclusive)."""
        return self.start + timedelta(days=self.length - 1)

    def contains(self, d: date) -> bool:
        return self.start <= d <= self.end


@dataclass(frozen=True)
class Resolution:
    """
    Non-raising result of a lunar -> Gregorian lookup.
    Exactly one of date / error is set.
    """
    year: int
    month: int
    day: int
    is_leap: bool
    date: Optional[date] = None
    error: Optional[AmLichError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> date:
        if self.error is not None:
            raise self.error
        if self.date is None:
            raise ValueError(f"empty resolution for {self.year}-{self.month:02d}-{self.day:02d}")
        return self.date


@dataclass(frozen=True)
class _SuiLayout:
    """
    Months between two consecutive month-11 starts (the solstice year).
    starts has len(months) + 1 entries; the last one is the next month 11.
    """
    starts: Tuple[int, ...]
    months: Tuple[LunarMonth, ...]
    leap_pos: Optional[int]


# ============================================================
# Calendar
# ============================================================

@dataclass(frozen=True)
class LunisolarCalendar:
    """
    Vietnamese lunisolar calendar on top of an AstronomyEngine.

    Rules:
      - a month starts on the civil day (UTC+7) containing a new moon
      - month 11 contains the winter solstice
      - if 13 new moons fall between two month-11 starts, the first month
        after month 11 without a major solar term is the leap month and takes
        the ordinal of the month before it
    """
    engine: AstronomyEngine
    config: LuniSolarConfig = field(default_factory=LuniSolarConfig)

    # ---------------- layout ----------------

    @lru_cache(maxsize=512)
    def month11_jdn(self, gregorian_year: int) -> int:
        """JDN of the first day of lunar month 11 that begins in gregorian_year."""
        off = jdn_from_date(date(gregorian_year, 12, 31)) - _MONTH11_BASE_JD
        k = math.floor(off / SYNODIC_MONTH_DAYS)
        nm = self.engine.new_moon_day(k)
        if self.engine.major_term_index(nm) >= 9:
            nm = self.engine.new_moon_day(k - 1)
        return nm

    def _leap_month_offset(self, a11: int) -> int:
        k = nearest_lunation_index(a11)
        i = 1
        arc = self.engine.major_term_index(self.engine.new_moon_day(k + i))
        while True:
            last = arc
            i += 1
            arc = self.engine.major_term_index(self.engine.new_moon_day(k + i))
            if not (arc != last and i < 14):
                break
        return i - 1

    @lru_cache(maxsize=512)
    def _sui(self, gregorian_year: int) -> _SuiLayout:
        a11 = self.month11_jdn(gregorian_year - 1)
        b11 = self.month11_jdn(gregorian_year)
        k = nearest_lunation_index(a11)

        starts: List[int] = [a11]
        i = 1
        while True:
            s = self.engine.new_moon_day(k + i)
            if s >= b11:
                if s != b11:
                    log.warning("month 11 mismatch: year=%d new_moon_day=%d b11=%d", gregorian_year, s, b11)
                break
            starts.append(s)
            i += 1
        starts.append(b11)

        leap_pos = self._leap_month_offset(a11) if b11 - a11 > 365 else None

        months: List[LunarMonth] = []
        for pos in range(len(starts) - 1):
            shift = 1 if (leap_pos is not None and pos >= leap_pos) else 0
            ordinal = (11 + pos - shift - 1) % 12 + 1
            year = gregorian_year - 1 if (ordinal >= 11 and pos < 4) else gregorian_year
            months.append(
                LunarMonth(
                    year=year,
                    month=ordinal,
                    is_leap=(pos == leap_pos),
                    start=date_from_jdn(starts[pos]),
                    length=starts[pos + 1] - starts[pos],
                )
            )

        if _debug_enabled():
            log.debug(
                "sui layout year=%d leap_pos=%s months=%s",
                gregorian_year,
                leap_pos,
                ", ".join(
                    f"{'L' if m.is_leap else ''}{m.year}/{m.month:02d}@{m.start.isoformat()}({m.length})"
                    for m in months
                ),
            )
        return _SuiLayout(starts=tuple(starts), months=tuple(months), leap_pos=leap_pos)

    @lru_cache(maxsize=512)
    def _year_months(self, lunar_year: int) -> Tuple[LunarMonth, ...]:
        out = [m for m in self._sui(lunar_year).months if m.year == lunar_year]
        out += [m for m in self._sui(lunar_year + 1).months if m.year == lunar_year]
        return tuple(out)

    # ---------------- range checks ----------------

    def check_gregorian(self, d: date) -> None:
        lo, hi = self.config.min_date, self.config.max_date
        if not (lo <= d <= hi):
            raise OutOfRange(d, lo, hi, what="date")

    def _lunar_year_error(self, lunar_year: int) -> Optional[OutOfRange]:
        lo, hi = self.config.min_lunar_year, self.config.max_lunar_year
        if not (lo <= lunar_year <= hi):
            return OutOfRange(lunar_year, lo, hi, what="lunar year")
        return None

    # ---------------- public operations ----------------

    def year_months(self, lunar_year: int) -> List[LunarMonth]:
        """Ordered months of a lunar year (12, or 13 with a leap month)."""
        err = self._lunar_year_error(lunar_year)
        if err is not None:
            raise err
        return list(self._year_months(lunar_year))

    def leap_month_of_year(self, lunar_year: int) -> Optional[int]:
        for m in self.year_months(lunar_year):
            if m.is_leap:
                return m.month
        return None

    def find_month(self, lunar_year: int, month: int, is_leap: bool = False) -> Optional[LunarMonth]:
        for m in self.year_months(lunar_year):
            if m.month == month and m.is_leap == bool(is_leap):
                return m
        return None

    def month_containing(self, d: date) -> LunarMonth:
        self.check_gregorian(d)
        return self._locate(d)

    def _locate(self, d: date) -> LunarMonth:
        jdn = jdn_from_date(d)
        gy = d.year if jdn < self.month11_jdn(d.year) else d.year + 1
        sui = self._sui(gy)
        i = bisect_right(sui.starts, jdn) - 1
        return sui.months[i]

    def gregorian_to_lunar(self, d: date) -> LunarYMD:
        m = self.month_containing(d)
        return LunarYMD(year=m.year, month=m.month, day=(d - m.start).days + 1, is_leap=m.is_leap)

    def resolve(self, year: int, month: int, day: int, is_leap: bool = False) -> Resolution:
        """Lunar -> Gregorian without raising; the error (if any) is returned."""
        def fail(err: AmLichError) -> Resolution:
            return Resolution(year, month, day, bool(is_leap), error=err)

        if not (1 <= int(month) <= 12):
            return fail(InvalidLunarDate(year, month, day, is_leap, "month_out_of_range"))
        if not (1 <= int(day) <= 30):
            return fail(InvalidLunarDate(year, month, day, is_leap, "day_out_of_range"))
        year_err = self._lunar_year_error(int(year))
        if year_err is not None:
            return fail(year_err)

        m = self.find_month(int(year), int(month), bool(is_leap))
        if m is None:
            leap = self.leap_month_of_year(int(year))
            reason = "no_leap_month" if leap is None else "leap_month_mismatch"
            return fail(InvalidLunarDate(year, month, day, is_leap, reason))
        if int(day) > m.length:
            return fail(InvalidLunarDate(year, month, day, is_leap, "day_exceeds_month_length"))

        g = m.start + timedelta(days=int(day) - 1)
        lo, hi = self.config.min_date, self.config.max_date
        if not (lo <= g <= hi):
            return fail(OutOfRange(g, lo, hi, what="date"))
        return Resolution(year, month, day, bool(is_leap), date=g)

    def lunar_to_gregorian(self, year: int, month: int, day: int, is_leap: bool = False) -> date:
        return self.resolve(year, month, day, is_leap).unwrap()

    def month_length(self, year: int, month: int, is_leap: bool = False) -> int:
        if not (1 <= int(month) <= 12):
            raise InvalidLunarDate(year, month, 1, is_leap, "month_out_of_range")
        m = self.find_month(int(year), int(month), bool(is_leap))
        if m is None:
            leap = self.leap_month_of_year(int(year))
            reason = "no_leap_month" if leap is None else "leap_month_mismatch"
            raise InvalidLunarDate(year, month, 1, is_leap, reason)
        return m.length

    def is_valid_lunar_date(self, year: int, month: int, day: int, is_leap: bool = False) -> bool:
        try:
            return self.resolve(int(year), int(month), int(day), bool(is_leap)).ok
        except (TypeError, ValueError):
            return False

    def lunar_dates_between(
        self,
        start: date,
        end: date,
        *,
        strict: bool = True,
    ) -> Iterator[Tuple[date, LunarYMD]]:
        """
        (date, LunarYMD) for every date in [start, end).

        strict=False lets a few padding days past the supported window through
        (month grids for Jan 1900 / Dec 2100).
        """
        if end <= start:
            return
        if strict:
            self.check_gregorian(start)
            self.check_gregorian(end - timedelta(days=1))
        cur = start
        m = self._locate(cur)
        while cur < end:
            if not m.contains(cur):
                m = self._locate(cur)
            yield cur, LunarYMD(m.year, m.month, (cur - m.start).days + 1, m.is_leap)
            cur = cur + timedelta(days=1)


# ============================================================
# Engine cache
# ============================================================

def build_provider(cfg: ProviderConfig) -> AstroProvider:
    if cfg.name == "meeus":
        return MeeusProvider()
    try:
        from .providers.skyfield_provider import SkyfieldProvider
        return SkyfieldProvider(ephemeris=cfg.ephemeris, ephemeris_path=cfg.ephemeris_path)
    except (ImportError, FileNotFoundError) as e:
        raise EngineUnavailableError(cfg.name, e) from e


@lru_cache(maxsize=4)
def calendar_for(provider: ProviderConfig, config: LuniSolarConfig) -> LunisolarCalendar:
    eng = AstronomyEngine(provider=build_provider(provider), tz_hours=config.tz_hours)
    log.debug("built lunisolar calendar provider=%s tz_hours=%s", provider.name, config.tz_hours)
    return LunisolarCalendar(engine=eng, config=config)


def default_calendar() -> LunisolarCalendar:
    """
    Calendar for the provider selected by AMLICH_PROVIDER (default "meeus").
    Month layouts are memoized per calendar, so reuse this instead of
    building new calendars per call.
    """
    return calendar_for(ProviderConfig.from_env(), LuniSolarConfig())


def _cal(calendar: Optional[LunisolarCalendar]) -> LunisolarCalendar:
    return calendar if calendar is not None else default_calendar()


# ============================================================
# Module-level API
# ============================================================

def gregorian_to_lunar(d: date, *, calendar: Optional[LunisolarCalendar] = None) -> LunarYMD:
    return _cal(calendar).gregorian_to_lunar(d)


def lunar_to_gregorian(
    year: int,
    month: int,
    day: int,
    is_leap: bool = False,
    *,
    calendar: Optional[LunisolarCalendar] = None,
) -> date:
    return _cal(calendar).lunar_to_gregorian(year, month, day, is_leap)


def resolve_lunar_date(
    year: int,
    month: int,
    day: int,
    is_leap: bool = False,
    *,
    calendar: Optional[LunisolarCalendar] = None,
) -> Resolution:
    return _cal(calendar).resolve(year, month, day, is_leap)


def month_length(
    year: int,
    month: int,
    is_leap: bool = False,
    *,
    calendar: Optional[LunisolarCalendar] = None,
) -> int:
    return _cal(calendar).month_length(year, month, is_leap)


def is_valid_lunar_date(
    year: int,
    month: int,
    day: int,
    is_leap: bool = False,
    *,
    calendar: Optional[LunisolarCalendar] = None,
) -> bool:
    try:
        return _cal(calendar).is_valid_lunar_date(year, month, day, is_leap)
    except AmLichError:
        return False


def leap_month_of_year(lunar_year: int, *, calendar: Optional[LunisolarCalendar] = None) -> Optional[int]:
    return _cal(calendar).leap_month_of_year(lunar_year)


def lunar_year_months(lunar_year: int, *, calendar: Optional[LunisolarCalendar] = None) -> List[LunarMonth]:
    return _cal(calendar).year_months(lunar_year)


def lunar_dates_between(
    start: date,
    end: date,
    *,
    calendar: Optional[LunisolarCalendar] = None,
) -> Iterator[Tuple[date, LunarYMD]]:
    return _cal(calendar).lunar_dates_between(start, end)


def julian_day_number(d: Union[date, LunarYMD], *, calendar: Optional[LunisolarCalendar] = None) -> int:
    """JDN of a Gregorian date, or of the Gregorian date a lunar date falls on."""
    if isinstance(d, LunarYMD):
        d = lunar_to_gregorian(d.year, d.month, d.day, d.is_leap, calendar=calendar)
    return jdn_from_date(d)
