# src/amlich/core/astronomy.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

# k = 0 is the new moon of 1900-01-01 (JD 2415021.0769...)
NEW_MOON_EPOCH_JD = 2415021.076998695
SYNODIC_MONTH_DAYS = 29.530588853


def norm360(deg: float) -> float:
    x = deg % 360.0
    return x + 360.0 if x < 0 else x


def lunation_index(jd: float) -> int:
    """Index k of the mean lunation in effect at jd."""
    return math.floor((jd - NEW_MOON_EPOCH_JD) / SYNODIC_MONTH_DAYS)


def nearest_lunation_index(jd: float) -> int:
    return math.floor(0.5 + (jd - NEW_MOON_EPOCH_JD) / SYNODIC_MONTH_DAYS)


@runtime_checkable
class AstroProvider(Protocol):
    def new_moon_jd(self, k: int) -> float:
        """Julian date (UT) of the k-th new moon counted from 1900-01-01."""
        ...

    def sun_longitude_deg(self, jd: float) -> float:
        """Apparent solar ecliptic longitude (degrees) at Julian date jd (UT)."""
        ...


@dataclass(frozen=True)
class AstronomyEngine:
    """
    Civil-day view of an AstroProvider for one fixed UTC offset.

    Every answer is keyed on a Julian day number (JDN, the civil day), not on
    an instant: lunar months start on the civil day that contains the new
    moon, and the sun's position is sampled at local midnight.
    """
    provider: AstroProvider
    tz_hours: float = 7.0

    def new_moon_day(self, k: int) -> int:
        """JDN of the local civil day containing the k-th new moon."""
        return math.floor(self.provider.new_moon_jd(k) + 0.5 + self.tz_hours / 24.0)

    def sun_lon_at_midnight(self, jdn: int) -> float:
        """Solar longitude at the local midnight that starts civil day jdn."""
        return norm360(self.provider.sun_longitude_deg(jdn - 0.5 - self.tz_hours / 24.0))

    def major_term_index(self, jdn: int) -> int:
        """0..11: which 30-degree sector (trung khí) the sun is in at the start of jdn."""
        return int(self.sun_lon_at_midnight(jdn) // 30.0) % 12

    def solar_term_index(self, jdn: int) -> int:
        """0..23: which 15-degree sector (tiết khí) the sun is in at the start of jdn."""
        return int(self.sun_lon_at_midnight(jdn) // 15.0) % 24
