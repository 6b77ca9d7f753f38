from __future__ import annotations

from datetime import date

import pytest

from amlich.core.errors import InvalidLunarDate
from amlich.features.recurrence import (
    AnniversaryDefinition,
    occurrences_in_gregorian_year,
    place_in_year,
    project_occurrences,
    upcoming_occurrences,
    validate_definition,
)


def _dates(occ) -> list:
    return [o.gregorian_date for o in occ]


def test_year_boundary_example():
    d = AnniversaryDefinition(lunar_month=12, lunar_day=20, recurring=True, anchor_lunar_year=2024)
    occ = project_occurrences(d, date(2025, 1, 1), date(2025, 2, 15))
    assert len(occ) == 1
    assert occ[0].gregorian_date == date(2025, 1, 19)
    assert occ[0].gregorian_date.month == 1
    assert occ[0].is_recurring_instance is False
    assert (occ[0].lunar_date.year, occ[0].lunar_date.month, occ[0].lunar_date.day) == (2024, 12, 20)


def test_one_occurrence_per_lunar_year():
    d = AnniversaryDefinition(lunar_month=8, lunar_day=15, anchor_lunar_year=2020)
    occ = project_occurrences(d, date(2020, 1, 1), date(2029, 12, 31))
    assert len(occ) == 10
    assert occ[0].gregorian_date == date(2020, 10, 1)
    assert date(2024, 9, 17) in _dates(occ)
    assert [o.is_recurring_instance for o in occ] == [False] + [True] * 9
    assert _dates(occ) == sorted(set(_dates(occ)))


def test_non_recurring_only_anchor_year():
    d = AnniversaryDefinition(lunar_month=8, lunar_day=15, recurring=False, anchor_lunar_year=2024)
    assert _dates(project_occurrences(d, date(2020, 1, 1), date(2030, 12, 31))) == [date(2024, 9, 17)]
    assert project_occurrences(d, date(2025, 1, 1), date(2030, 12, 31)) == []


def test_non_recurring_invalid_anchor_yields_nothing():
    d = AnniversaryDefinition(lunar_month=4, lunar_day=10, is_leap_month=True, recurring=False, anchor_lunar_year=2021)
    assert project_occurrences(d, date(2020, 1, 1), date(2030, 12, 31)) == []


def test_leap_anniversary_skips_years_without_that_leap_month():
    d = AnniversaryDefinition(lunar_month=4, lunar_day=10, is_leap_month=True, anchor_lunar_year=2020)
    occ = project_occurrences(d, date(2018, 1, 1), date(2030, 12, 31))
    assert _dates(occ) == [date(2020, 6, 1)]
    assert occ[0].lunar_date.is_leap_month


def test_place_in_year_reasons():
    leap4 = AnniversaryDefinition(lunar_month=4, lunar_day=10, is_leap_month=True, anchor_lunar_year=2020)
    assert place_in_year(leap4, 2020).gregorian_date == date(2020, 6, 1)
    assert place_in_year(leap4, 2021).reason == "no_leap_month"
    assert place_in_year(leap4, 2025).reason == "leap_month_mismatch"
    assert place_in_year(leap4, 2300).reason == "out_of_range"

    day30 = AnniversaryDefinition(lunar_month=12, lunar_day=30, anchor_lunar_year=2023)
    p = place_in_year(day30, 2024)
    assert not p.ok
    assert p.reason == "day_exceeds_month_length"


def test_day_30_anniversary_only_in_long_months():
    d = AnniversaryDefinition(lunar_month=12, lunar_day=30, anchor_lunar_year=2000)
    occ = project_occurrences(d, date(2001, 1, 1), date(2030, 12, 31))
    for o in occ:
        assert o.lunar_date.day == 30
        assert o.lunar_date.month == 12
    assert date(2025, 1, 28) not in _dates(occ)


def test_window_additivity_and_idempotence():
    d = AnniversaryDefinition(lunar_month=1, lunar_day=10, anchor_lunar_year=2000)
    whole = project_occurrences(d, date(2000, 1, 1), date(2030, 12, 31))
    assert whole == project_occurrences(d, date(2000, 1, 1), date(2030, 12, 31))

    left = project_occurrences(d, date(2000, 1, 1), date(2014, 2, 9))
    right = project_occurrences(d, date(2014, 2, 10), date(2030, 12, 31))
    assert _dates(left) + _dates(right) == _dates(whole)


def test_window_bounds_inclusive():
    d = AnniversaryDefinition(lunar_month=1, lunar_day=1, anchor_lunar_year=2024)
    assert _dates(project_occurrences(d, date(2024, 2, 10), date(2024, 2, 10))) == [date(2024, 2, 10)]


def test_window_end_before_start():
    d = AnniversaryDefinition(lunar_month=1, lunar_day=1, anchor_lunar_year=2024)
    with pytest.raises(ValueError):
        project_occurrences(d, date(2024, 2, 10), date(2024, 2, 9))


def test_supported_window_edges_do_not_raise():
    d = AnniversaryDefinition(lunar_month=12, lunar_day=20, anchor_lunar_year=2000)
    occ = project_occurrences(d, date(2100, 1, 1), date(2100, 12, 31))
    assert len(occ) == 1
    assert occ[0].lunar_date.year == 2099

    occ = project_occurrences(d, date(1900, 1, 1), date(1900, 12, 31))
    assert all(o.gregorian_date.year == 1900 for o in occ)


def test_occurrences_in_gregorian_year():
    d = AnniversaryDefinition(lunar_month=12, lunar_day=20, anchor_lunar_year=2024, title="Giỗ ông")
    occ = occurrences_in_gregorian_year(d, 2025)
    # 12/20 of lunar 2024 (January) and of lunar 2025 (early 2026 -> not in 2025)
    assert _dates(occ) == [date(2025, 1, 19)]
    assert occ[0].definition.title == "Giỗ ông"


def test_upcoming_occurrences_sorted():
    a = AnniversaryDefinition(lunar_month=1, lunar_day=1, anchor_lunar_year=2024, title="Tết")
    b = AnniversaryDefinition(lunar_month=12, lunar_day=23, anchor_lunar_year=2024, title="Ông Táo")
    occ = upcoming_occurrences([a, b], today=date(2025, 1, 20), days=10)
    assert [(o.gregorian_date, o.definition.title) for o in occ] == [
        (date(2025, 1, 22), "Ông Táo"),
        (date(2025, 1, 29), "Tết"),
    ]
    with pytest.raises(ValueError):
        upcoming_occurrences([a], today=date(2025, 1, 20), days=-1)


def test_validate_definition():
    validate_definition(AnniversaryDefinition(lunar_month=4, lunar_day=10, is_leap_month=True, anchor_lunar_year=2020))
    with pytest.raises(InvalidLunarDate):
        validate_definition(AnniversaryDefinition(lunar_month=4, lunar_day=10, is_leap_month=True, anchor_lunar_year=2021))
