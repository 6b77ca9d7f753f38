from __future__ import annotations

import os
from datetime import date
from pathlib import Path

import pytest

from amlich.core.astronomy import AstroProvider, AstronomyEngine, lunation_index, norm360
from amlich.core.config import LuniSolarConfig, ProviderConfig
from amlich.core.errors import EngineUnavailableError
from amlich.core.lunisolar import build_provider, calendar_for
from amlich.core.providers.meeus_provider import MeeusProvider
from amlich.core.timeutil import date_from_jdn, jdn_from_date


def _find_ephemeris_path() -> Path | None:
    env = os.environ.get("AMLICH_EPHEMERIS_PATH")
    if env:
        p = Path(env).expanduser()
        if p.exists():
            return p

    repo = Path(__file__).resolve().parents[1]
    for name in ("de440s.bsp", "de421.bsp"):
        p = repo / "data" / name
        if p.exists():
            return p
    return None


def _require_ephemeris() -> Path:
    p = _find_ephemeris_path()
    if p is None:
        pytest.skip("ephemeris not found (set AMLICH_EPHEMERIS_PATH or place data/de440s.bsp)")
    return p


def test_jdn_conversions():
    assert jdn_from_date(date(2000, 1, 1)) == 2451545
    assert date_from_jdn(2451545) == date(2000, 1, 1)
    assert date_from_jdn(jdn_from_date(date(1900, 1, 1))) == date(1900, 1, 1)


def test_norm360():
    assert norm360(-10.0) == pytest.approx(350.0)
    assert norm360(370.0) == pytest.approx(10.0)
    assert 0.0 <= norm360(-720.0) < 360.0


def test_meeus_is_an_astro_provider():
    assert isinstance(MeeusProvider(), AstroProvider)


def test_meeus_first_new_moon_of_1900():
    jd = MeeusProvider().new_moon_jd(0)
    assert jd == pytest.approx(2415021.08, abs=0.1)
    assert lunation_index(jd + 1.0) == 0


def test_meeus_sun_longitude_at_j2000():
    lon = norm360(MeeusProvider().sun_longitude_deg(2451545.0))
    assert lon == pytest.approx(280.4, abs=0.5)


def test_engine_new_moon_day_2025_tet():
    eng = AstronomyEngine(provider=MeeusProvider())
    # new moon 2025-01-29 12:36 UTC -> same civil day in UTC+7
    k = lunation_index(jdn_from_date(date(2025, 1, 30)))
    assert date_from_jdn(eng.new_moon_day(k)) == date(2025, 1, 29)


def test_engine_term_indices():
    eng = AstronomyEngine(provider=MeeusProvider())
    # after the December solstice, before the January minor term
    jdn = jdn_from_date(date(2024, 12, 25))
    assert eng.major_term_index(jdn) == 9
    assert eng.solar_term_index(jdn) == 18
    # just after the March equinox
    jdn = jdn_from_date(date(2024, 3, 25))
    assert eng.major_term_index(jdn) == 0
    assert eng.solar_term_index(jdn) == 0


def test_month11_contains_winter_solstice():
    cal = calendar_for(ProviderConfig(name="meeus"), LuniSolarConfig())
    assert date_from_jdn(cal.month11_jdn(2024)) == date(2024, 12, 1)
    for y in range(1900, 2101):
        start = date_from_jdn(cal.month11_jdn(y))
        assert date(y, 11, 1) <= start <= date(y, 12, 22)


def test_skyfield_provider_missing_ephemeris_is_engine_unavailable(tmp_path):
    cfg = ProviderConfig(name="skyfield", ephemeris_path=tmp_path / "missing.bsp")
    with pytest.raises(EngineUnavailableError):
        build_provider(cfg)


def test_skyfield_matches_meeus_month_starts():
    ephem_path = _require_ephemeris()
    cfg = LuniSolarConfig()
    meeus = calendar_for(ProviderConfig(name="meeus"), cfg)
    sky = calendar_for(ProviderConfig(name="skyfield", ephemeris_path=ephem_path), cfg)

    for y in (2020, 2023, 2024, 2025):
        a = [(m.month, m.is_leap, m.start) for m in meeus.year_months(y)]
        b = [(m.month, m.is_leap, m.start) for m in sky.year_months(y)]
        assert a == b
