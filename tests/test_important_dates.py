from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from amlich.core.errors import OutOfRange
from amlich.core.timeutil import VN_TZ
from amlich.features.important_dates import (
    days_until,
    important_dates_for_year,
    next_first_and_fifteenth,
    next_lunar_month,
    today_summary,
)


def _fixed_clock(dt: datetime):
    calls = []

    def clock() -> datetime:
        calls.append(dt)
        return dt

    return clock, calls


def test_before_ram_uses_current_month():
    res = next_first_and_fifteenth(date(2024, 2, 10))
    assert res.next_ram == date(2024, 2, 24)
    assert res.next_mong1 == date(2024, 3, 10)
    assert (res.ram_info.month, res.ram_info.day) == (1, 15)
    assert (res.mong1_info.month, res.mong1_info.day) == (2, 1)


def test_on_or_after_ram_skips_ahead():
    res = next_first_and_fifteenth(date(2024, 2, 24))
    assert res.next_mong1 == date(2024, 3, 10)
    assert res.next_ram == date(2024, 4, 23)


def test_year_wrap():
    # lunar 12/20 of 2024
    res = next_first_and_fifteenth(date(2025, 1, 19))
    assert res.next_mong1 == date(2025, 1, 29)
    assert (res.mong1_info.year, res.mong1_info.month) == (2025, 1)


def test_leap_month_follows_regular_month():
    # lunar 6/6/2025, leap month 6 follows
    res = next_first_and_fifteenth(date(2025, 6, 30))
    assert res.next_ram == date(2025, 7, 9)
    assert res.next_mong1 == date(2025, 7, 25)
    assert res.mong1_info.is_leap_month

    # lunar 6/16/2025
    res = next_first_and_fifteenth(date(2025, 7, 10))
    assert res.next_mong1 == date(2025, 7, 25)
    assert (res.ram_info.month, res.ram_info.day, res.ram_info.is_leap_month) == (7, 15, False)
    assert res.next_ram == date(2025, 9, 6)


def test_inside_leap_month_keeps_leap_flag_for_ram():
    # lunar leap 6/3/2025
    res = next_first_and_fifteenth(date(2025, 7, 27))
    assert res.ram_info.is_leap_month
    assert res.next_ram == date(2025, 8, 8)
    assert res.next_mong1 == date(2025, 8, 23)


def test_next_lunar_month():
    assert next_lunar_month((2025, 5, False)) == (2025, 6, False)
    assert next_lunar_month((2025, 6, False)) == (2025, 6, True)
    assert next_lunar_month((2025, 6, True)) == (2025, 7, False)
    assert next_lunar_month((2024, 12, False)) == (2025, 1, False)


def test_aware_instant_is_read_in_vietnam_time():
    # 2024-02-09 18:00 UTC is already Tết (01:00, 2024-02-10) in Vietnam
    res = next_first_and_fifteenth(datetime(2024, 2, 9, 18, 0, tzinfo=timezone.utc))
    assert res.from_date == date(2024, 2, 10)
    assert res.next_ram == date(2024, 2, 24)


def test_clock_is_read_once():
    clock, calls = _fixed_clock(datetime(2024, 2, 10, 8, 0, tzinfo=VN_TZ))
    res = next_first_and_fifteenth(clock=clock)
    assert res.from_date == date(2024, 2, 10)
    assert len(calls) == 1


def test_days_until():
    assert days_until(date(2024, 2, 24), today=date(2024, 2, 10)) == 14
    assert days_until(date(2024, 2, 1), today=date(2024, 2, 10)) == -9


def test_important_dates_for_year():
    rows = important_dates_for_year(2025)
    # 13 months in 2025
    assert len(rows) == 26
    assert all(r.day in (1, 15) for r in rows)
    dates = [r.gregorian_date for r in rows]
    assert dates == sorted(dates)
    assert dates[0] == date(2025, 1, 29)
    assert date(2025, 7, 25) in dates


def test_today_summary():
    clock, calls = _fixed_clock(datetime(2024, 9, 17, 9, 0, tzinfo=VN_TZ))
    s = today_summary(clock=clock)
    assert len(calls) == 1
    assert s.lunar_date.day == 15
    assert s.formatted == "Rằm Tháng Tám năm 2024 (Giáp Thìn)"
    assert s.days_to_mong1 == (s.important.next_mong1 - date(2024, 9, 17)).days
    assert s.days_to_ram > 0


def test_end_of_window_raises_out_of_range_for_the_target():
    with pytest.raises(OutOfRange) as ei:
        next_first_and_fifteenth(date(2100, 12, 31))
    err = ei.value
    if err.what == "date":
        assert err.value > date(2100, 12, 31)
    else:
        assert (err.what, err.value) == ("lunar year", 2101)
