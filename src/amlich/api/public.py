from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date
from typing import Any, Dict, Iterator, List, Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import Response
from pydantic import BaseModel, Field

from amlich.core.config import VIETNAM_TZ_NAME, ProviderConfig
from amlich.core.errors import AmLichError, EngineUnavailableError
from amlich.core.lunisolar import default_calendar, gregorian_to_lunar, leap_month_of_year
from amlich.core.timeutil import Clock
from amlich.features.ics_export import build_ics, entries_for_year
from amlich.features.important_dates import days_until, next_first_and_fifteenth
from amlich.features.lunar_date import (
    LunarDate,
    cultural_significance_text,
    format_lunar_date,
    lunar_date_for,
    lunar_date_from_lunar,
)
from amlich.features.month_grid import build_month, holiday_for
from amlich.features.recurrence import AnniversaryDefinition, project_occurrences
from amlich.features.solar_terms import solar_term_for_day

router = APIRouter(prefix="/api/v1", tags=["public"])

log = logging.getLogger("amlich.api.public")

# max window for /occurrences (days)
DEFAULT_LIMIT_DAYS = 366 * 5


# ============================================================
# Response Models
# ============================================================
class LunarDateModel(BaseModel):
    year: int
    month: int
    day: int
    is_leap: bool = Field(default=False, description="true for a leap month (tháng nhuận)")
    month_name: str
    day_name: str
    moon_phase: str
    moon_phase_label: str
    can_chi_year: str
    can_chi_month: str
    can_chi_day: str
    zodiac: str
    cultural_significance: Optional[str] = None
    label: str


class SolarTermModel(BaseModel):
    index: int
    name: str
    longitude_deg: int


class DayResponse(BaseModel):
    date: date
    tz: str
    lunar: LunarDateModel
    solar_term: SolarTermModel
    holiday: Optional[str] = None
    is_important: bool
    significance_text: str
    leap_month_of_year: Optional[int] = None


class CalendarDayModel(BaseModel):
    date: date
    lunar: LunarDateModel
    is_today: bool
    is_current_month: bool
    is_important: bool
    holiday: Optional[str] = None
    occurrences: List[str] = Field(default_factory=list, description="titles of anniversaries on this day")


class CalendarMonthResponse(BaseModel):
    year: int
    month: int
    lunar_month_name: str
    lunar_year: int
    can_chi_year: str
    zodiac: str
    days: List[CalendarDayModel]


class ImportantDateModel(BaseModel):
    date: date
    days_until: int
    lunar: LunarDateModel


class ImportantDatesResponse(BaseModel):
    from_date: date
    mong1: ImportantDateModel
    ram: ImportantDateModel


class OccurrenceModel(BaseModel):
    date: date
    is_recurring_instance: bool
    lunar: LunarDateModel


class OccurrencesResponse(BaseModel):
    start: date
    end: date
    title: Optional[str] = None
    occurrences: List[OccurrenceModel]


# ============================================================
# Helpers: parsing & error mapping
# ============================================================
def _parse_iso_date(s: str) -> date:
    try:
        return date.fromisoformat(s)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=f"Invalid date format: {s} (expected YYYY-MM-DD)") from e


def _parse_date_any(x: str | date) -> date:
    if isinstance(x, date):
        return x
    return _parse_iso_date(str(x))


@contextmanager
def _http_errors(what: str) -> Iterator[None]:
    """AmLichError / ValueError -> 422, missing provider -> 503."""
    try:
        yield
    except EngineUnavailableError as e:
        log.exception("provider unavailable while serving %s", what)
        raise HTTPException(status_code=503, detail=str(e)) from e
    except (AmLichError, ValueError) as e:
        log.warning("rejected %s: %s", what, e)
        raise HTTPException(status_code=422, detail=str(e)) from e


def _lunar_dict(ld: LunarDate) -> Dict[str, Any]:
    return {
        "year": ld.year,
        "month": ld.month,
        "day": ld.day,
        "is_leap": ld.is_leap_month,
        "month_name": ld.month_name,
        "day_name": ld.day_name,
        "moon_phase": ld.moon_phase,
        "moon_phase_label": ld.moon_phase_label,
        "can_chi_year": ld.cycle_year_name,
        "can_chi_month": ld.cycle_month_name,
        "can_chi_day": ld.cycle_day_name,
        "zodiac": ld.zodiac_animal_name,
        "cultural_significance": ld.cultural_significance,
        "label": format_lunar_date(ld),
    }


def _day_dict(ld: LunarDate) -> Dict[str, Any]:
    g = ld.gregorian_date
    term = solar_term_for_day(g)
    return {
        "date": g.isoformat(),
        "tz": VIETNAM_TZ_NAME,
        "lunar": _lunar_dict(ld),
        "solar_term": {"index": term.index, "name": term.name, "longitude_deg": term.longitude_deg},
        "holiday": holiday_for(ld, g),
        "is_important": ld.is_important,
        "significance_text": cultural_significance_text(ld.day),
        "leap_month_of_year": leap_month_of_year(ld.year),
    }


# =========================================================
# Public JSON API (function-style, HTTP-ready)
# =========================================================
def get_lunar_day(date_: str | date) -> dict:
    """Gregorian date -> lunar date with names, solar term and holiday."""
    d = _parse_date_any(date_)
    return _day_dict(lunar_date_for(d))


def get_gregorian_day(year: int, month: int, day: int, is_leap: bool = False) -> dict:
    """Lunar date -> same payload as get_lunar_day (raises InvalidLunarDate / OutOfRange)."""
    return _day_dict(lunar_date_from_lunar(year, month, day, is_leap))


def get_calendar_month(
    year: int,
    month: int,
    *,
    today: Optional[date] = None,
    clock: Optional[Clock] = None,
) -> dict:
    cm = build_month(year, month, today=today, clock=clock)
    return {
        "year": cm.year,
        "month": cm.month,
        "lunar_month_name": cm.lunar_month_name,
        "lunar_year": cm.lunar_year,
        "can_chi_year": cm.cycle_year_name,
        "zodiac": cm.zodiac_animal_name,
        "days": [
            {
                "date": d.gregorian_date.isoformat(),
                "lunar": _lunar_dict(d.lunar_date),
                "is_today": d.is_today,
                "is_current_month": d.is_current_month,
                "is_important": d.is_important,
                "holiday": d.holiday_name,
                "occurrences": [
                    (o.definition.title if o.definition is not None else None) or format_lunar_date(o.lunar_date)
                    for o in d.occurrences
                ],
            }
            for d in cm.days
        ],
    }


def get_next_important_dates(
    from_: Optional[str | date] = None,
    *,
    clock: Optional[Clock] = None,
) -> dict:
    start = _parse_date_any(from_) if from_ is not None else None
    imp = next_first_and_fifteenth(start, clock=clock)
    return {
        "from_date": imp.from_date.isoformat(),
        "mong1": {
            "date": imp.next_mong1.isoformat(),
            "days_until": days_until(imp.next_mong1, today=imp.from_date),
            "lunar": _lunar_dict(imp.mong1_info),
        },
        "ram": {
            "date": imp.next_ram.isoformat(),
            "days_until": days_until(imp.next_ram, today=imp.from_date),
            "lunar": _lunar_dict(imp.ram_info),
        },
    }


def get_occurrences(
    lunar_month: int,
    lunar_day: int,
    start: str | date,
    end: str | date,
    *,
    is_leap: bool = False,
    recurring: bool = True,
    anchor_year: Optional[int] = None,
    title: Optional[str] = None,
) -> dict:
    s = _parse_date_any(start)
    e = _parse_date_any(end)
    # default anchor: the lunar year the window starts in
    anchor = anchor_year if anchor_year is not None else gregorian_to_lunar(s).year
    definition = AnniversaryDefinition(
        lunar_month=int(lunar_month),
        lunar_day=int(lunar_day),
        is_leap_month=bool(is_leap),
        recurring=bool(recurring),
        anchor_lunar_year=int(anchor),
        title=title,
    )
    occ = project_occurrences(definition, s, e)
    return {
        "start": s.isoformat(),
        "end": e.isoformat(),
        "title": title,
        "occurrences": [
            {
                "date": o.gregorian_date.isoformat(),
                "is_recurring_instance": o.is_recurring_instance,
                "lunar": _lunar_dict(o.lunar_date),
            }
            for o in occ
        ],
    }


def get_important_ics(year: int) -> str:
    """iCalendar text with every Mồng 1 / Rằm of Gregorian year."""
    return build_ics(entries_for_year((), year), calendar_name=f"Âm lịch {year}")


def get_meta() -> dict:
    cal = default_calendar()
    return {
        "tz": VIETNAM_TZ_NAME,
        "provider": ProviderConfig.from_env().name,
        "supported": {
            "gregorian": [cal.config.min_date.isoformat(), cal.config.max_date.isoformat()],
            "lunar_years": [cal.config.min_lunar_year, cal.config.max_lunar_year],
        },
    }


# ============================================================
# Endpoints
# ============================================================
@router.get("/day", response_model=DayResponse)
def get_day_endpoint(
    date_str: str = Query(..., alias="date", description="YYYY-MM-DD"),
) -> DayResponse:
    with _http_errors("/day"):
        return DayResponse(**get_lunar_day(_parse_iso_date(date_str)))


@router.get("/lunar", response_model=DayResponse)
def get_lunar_endpoint(
    year: int = Query(...),
    month: int = Query(..., ge=1, le=12),
    day: int = Query(..., ge=1, le=30),
    leap: bool = Query(False),
) -> DayResponse:
    with _http_errors("/lunar"):
        return DayResponse(**get_gregorian_day(year, month, day, leap))


@router.get("/month", response_model=CalendarMonthResponse)
def get_month_endpoint(
    year: int = Query(...),
    month: int = Query(..., ge=1, le=12),
) -> CalendarMonthResponse:
    with _http_errors("/month"):
        return CalendarMonthResponse(**get_calendar_month(year, month))


@router.get("/important", response_model=ImportantDatesResponse)
def get_important_endpoint(
    from_str: Optional[str] = Query(None, alias="from", description="YYYY-MM-DD (default: today in Vietnam)"),
) -> ImportantDatesResponse:
    start = _parse_iso_date(from_str) if from_str else None
    with _http_errors("/important"):
        return ImportantDatesResponse(**get_next_important_dates(start))


@router.get("/occurrences", response_model=OccurrencesResponse)
def get_occurrences_endpoint(
    lunar_month: int = Query(..., ge=1, le=12),
    lunar_day: int = Query(..., ge=1, le=30),
    start_str: str = Query(..., alias="start", description="YYYY-MM-DD"),
    end_str: str = Query(..., alias="end", description="YYYY-MM-DD"),
    leap: bool = Query(False),
    recurring: bool = Query(True),
    anchor_year: Optional[int] = Query(None),
    title: Optional[str] = Query(None),
    limit_days: int = Query(DEFAULT_LIMIT_DAYS, ge=1, le=366 * 50),
) -> OccurrencesResponse:
    start = _parse_iso_date(start_str)
    end = _parse_iso_date(end_str)
    if end < start:
        raise HTTPException(status_code=422, detail="end must be >= start")

    days_count = (end - start).days + 1
    if days_count > limit_days:
        raise HTTPException(status_code=422, detail=f"range too large: {days_count} days (limit_days={limit_days})")

    with _http_errors("/occurrences"):
        return OccurrencesResponse(
            **get_occurrences(
                lunar_month,
                lunar_day,
                start,
                end,
                is_leap=leap,
                recurring=recurring,
                anchor_year=anchor_year,
                title=title,
            )
        )


@router.get("/export/{year}.ics")
def get_ics_endpoint(year: int) -> Response:
    with _http_errors("/export"):
        text = get_important_ics(year)
    return Response(content=text, media_type="text/calendar; charset=utf-8")


@router.get("/meta")
def get_meta_endpoint() -> Dict[str, Any]:
    with _http_errors("/meta"):
        return get_meta()
