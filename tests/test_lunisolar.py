from __future__ import annotations

from datetime import date, timedelta

import pytest

from amlich.core.errors import AmLichError, InvalidLunarDate, OutOfRange
from amlich.core.lunisolar import (
    LunarYMD,
    Resolution,
    default_calendar,
    gregorian_to_lunar,
    is_valid_lunar_date,
    julian_day_number,
    leap_month_of_year,
    lunar_dates_between,
    lunar_to_gregorian,
    lunar_year_months,
    month_length,
    resolve_lunar_date,
)


def _ymd(y: int, m: int, d: int, leap: bool = False) -> LunarYMD:
    return LunarYMD(year=y, month=m, day=d, is_leap=leap)


# ============================================================
# Known dates
# ============================================================

@pytest.mark.parametrize(
    "g, expected",
    [
        (date(2023, 1, 22), _ymd(2023, 1, 1)),
        (date(2024, 2, 10), _ymd(2024, 1, 1)),
        (date(2025, 1, 29), _ymd(2025, 1, 1)),
        # Vietnam (UTC+7) celebrates Tết 1985 a month before China
        (date(1985, 1, 21), _ymd(1985, 1, 1)),
        (date(2024, 9, 17), _ymd(2024, 8, 15)),
        (date(2024, 12, 31), _ymd(2024, 12, 1)),
        (date(2025, 1, 19), _ymd(2024, 12, 20)),
        (date(2025, 1, 28), _ymd(2024, 12, 29)),
        (date(2020, 5, 23), _ymd(2020, 4, 1, True)),
        (date(2023, 3, 22), _ymd(2023, 2, 1, True)),
        (date(2025, 6, 25), _ymd(2025, 6, 1)),
        (date(2025, 7, 25), _ymd(2025, 6, 1, True)),
        (date(2025, 8, 22), _ymd(2025, 6, 29, True)),
        (date(2025, 8, 23), _ymd(2025, 7, 1)),
    ],
)
def test_gregorian_to_lunar_known_dates(g, expected):
    assert gregorian_to_lunar(g) == expected


def test_window_edges():
    first = gregorian_to_lunar(date(1900, 1, 1))
    assert first.year == 1899
    assert first.month == 12

    last = gregorian_to_lunar(date(2100, 12, 31))
    assert last.year == 2100
    assert last.month in (11, 12)


def test_lunar_to_gregorian_known_dates():
    assert lunar_to_gregorian(2024, 1, 1) == date(2024, 2, 10)
    assert lunar_to_gregorian(2024, 12, 20) == date(2025, 1, 19)
    assert lunar_to_gregorian(2024, 12, 23) == date(2025, 1, 22)
    assert lunar_to_gregorian(2025, 6, 1, True) == date(2025, 7, 25)
    assert lunar_to_gregorian(2025, 7, 1) == date(2025, 8, 23)


@pytest.mark.parametrize(
    "year, leap",
    [
        (2012, 4),
        (2014, 9),
        (2017, 6),
        (2020, 4),
        (2023, 2),
        (2025, 6),
        (2024, None),
        (2026, None),
    ],
)
def test_leap_month_of_year(year, leap):
    assert leap_month_of_year(year) == leap


# ============================================================
# Month layout
# ============================================================

def test_year_months_layout_2025():
    months = lunar_year_months(2025)
    assert len(months) == 13
    assert [(m.month, m.is_leap) for m in months] == [
        (1, False), (2, False), (3, False), (4, False), (5, False), (6, False),
        (6, True), (7, False), (8, False), (9, False), (10, False), (11, False), (12, False),
    ]
    assert months[0].start == date(2025, 1, 29)


def test_year_months_are_contiguous_across_years():
    prev_end = None
    for y in range(1899, 2101):
        months = lunar_year_months(y)
        assert len(months) in (12, 13)
        assert sum(1 for m in months if m.is_leap) == (1 if len(months) == 13 else 0)
        for m in months:
            assert m.length in (29, 30)
            if prev_end is not None:
                assert m.start == prev_end + timedelta(days=1)
            prev_end = m.end


def test_month_length():
    assert month_length(2025, 6, False) == 30
    assert month_length(2025, 6, True) == 29
    assert month_length(2024, 12) == 29


def test_day_30_rejected_only_when_month_is_short():
    for y in range(2000, 2031):
        for m in range(1, 13):
            if month_length(y, m, False) == 29:
                with pytest.raises(InvalidLunarDate) as ei:
                    lunar_to_gregorian(y, m, 30, False)
                assert ei.value.reason == "day_exceeds_month_length"
            else:
                assert lunar_to_gregorian(y, m, 30, False) == lunar_to_gregorian(y, m, 29, False) + timedelta(days=1)


def test_2025_month_6_day_30_follows_month_length():
    if month_length(2025, 6, False) == 29:
        with pytest.raises(InvalidLunarDate):
            lunar_to_gregorian(2025, 6, 30, False)
    else:
        assert lunar_to_gregorian(2025, 6, 30, False) == date(2025, 7, 24)


# ============================================================
# Errors
# ============================================================

@pytest.mark.parametrize(
    "args, reason",
    [
        ((2024, 4, 1, True), "no_leap_month"),
        ((2025, 5, 1, True), "leap_month_mismatch"),
        ((2024, 13, 1, False), "month_out_of_range"),
        ((2024, 0, 1, False), "month_out_of_range"),
        ((2024, 1, 31, False), "day_out_of_range"),
        ((2024, 1, 0, False), "day_out_of_range"),
        ((2024, 12, 30, False), "day_exceeds_month_length"),
    ],
)
def test_invalid_lunar_date_reasons(args, reason):
    with pytest.raises(InvalidLunarDate) as ei:
        lunar_to_gregorian(*args)
    assert ei.value.reason == reason
    assert isinstance(ei.value, ValueError)
    assert isinstance(ei.value, AmLichError)


def test_out_of_range():
    with pytest.raises(OutOfRange):
        gregorian_to_lunar(date(1899, 12, 31))
    with pytest.raises(OutOfRange):
        gregorian_to_lunar(date(2101, 1, 1))
    with pytest.raises(OutOfRange):
        lunar_to_gregorian(1898, 1, 1)
    with pytest.raises(OutOfRange):
        lunar_to_gregorian(2101, 1, 1)
    # lunar year 2100 exists, but its month 12 ends up in 2101
    with pytest.raises(OutOfRange):
        lunar_to_gregorian(2100, 12, 20)


def test_month_length_never_defaults():
    with pytest.raises(OutOfRange):
        month_length(2500, 1)
    with pytest.raises(InvalidLunarDate):
        month_length(2024, 4, True)


def test_is_valid_never_raises():
    assert is_valid_lunar_date(2024, 1, 1)
    assert is_valid_lunar_date(2025, 6, 29, True)
    assert not is_valid_lunar_date(2025, 6, 30, True)
    assert not is_valid_lunar_date(2024, 13, 1)
    assert not is_valid_lunar_date(2024, 1, 31)
    assert not is_valid_lunar_date(3000, 1, 1)
    assert not is_valid_lunar_date(2024, 4, 1, True)


def test_resolve_returns_error_instead_of_raising():
    ok = resolve_lunar_date(2024, 8, 15)
    assert ok.ok
    assert ok.date == date(2024, 9, 17)

    bad = resolve_lunar_date(2024, 4, 1, True)
    assert not bad.ok
    assert bad.date is None
    assert isinstance(bad.error, InvalidLunarDate)
    with pytest.raises(InvalidLunarDate):
        bad.unwrap()


# ============================================================
# Properties over the whole window
# ============================================================

def test_reverse_round_trip_every_gregorian_day():
    cal = default_calendar()
    cur = cal.config.min_date
    end = cal.config.max_date
    while cur <= end:
        l = cal.gregorian_to_lunar(cur)
        assert cal.lunar_to_gregorian(l.year, l.month, l.day, l.is_leap) == cur, cur
        cur = cur + timedelta(days=1)


def test_round_trip_every_lunar_day():
    cal = default_calendar()
    for y in range(1900, 2100):
        for m in cal.year_months(y):
            for d in range(1, m.length + 1):
                g = cal.lunar_to_gregorian(y, m.month, d, m.is_leap)
                assert cal.gregorian_to_lunar(g) == LunarYMD(y, m.month, d, m.is_leap)


def test_monotonic_for_regular_months():
    cal = default_calendar()
    prev = None
    for y in range(1900, 2100):
        for m in cal.year_months(y):
            if m.is_leap:
                continue
            for d in (1, 15, m.length):
                g = cal.lunar_to_gregorian(y, m.month, d)
                if prev is not None:
                    assert g > prev
                prev = g


def test_lunar_dates_between_matches_single_conversions():
    start = date(2024, 12, 20)
    end = date(2025, 3, 1)
    rows = list(lunar_dates_between(start, end))
    assert len(rows) == (end - start).days
    for g, l in rows:
        assert gregorian_to_lunar(g) == l
    assert list(lunar_dates_between(end, start)) == []


def test_julian_day_number():
    assert julian_day_number(date(2000, 1, 1)) == 2451545
    # Tết 2024
    assert julian_day_number(_ymd(2024, 1, 1)) == julian_day_number(date(2024, 2, 10))
    with pytest.raises(InvalidLunarDate):
        julian_day_number(_ymd(2024, 4, 1, True))


def test_resolution_unwrap():
    res = resolve_lunar_date(2024, 1, 1)
    assert res.unwrap() == date(2024, 2, 10)

    with pytest.raises(InvalidLunarDate):
        resolve_lunar_date(2024, 4, 1, True).unwrap()
    with pytest.raises(ValueError):
        Resolution(2024, 1, 1, False).unwrap()
