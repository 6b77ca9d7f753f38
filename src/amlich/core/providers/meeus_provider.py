# src/amlich/core/providers/meeus_provider.py
"""
Closed-form new moon / solar longitude series.

Astronomical algorithms from "Astronomical Algorithms" by Jean Meeus (1998),
in the truncated form published by Ho Ngoc Duc for the Vietnamese calendar
(https://www.informatik.uni-leipzig.de/~duc/amlich/). These are the reference
series behind the published âm lịch tables, so they are used unchanged.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

_DR = math.pi / 180.0


@dataclass(frozen=True)
class MeeusProvider:
    """AstroProvider with no data files; accurate enough for civil-day boundaries 1800..2200."""

    def new_moon_jd(self, k: int) -> float:
        t = k / 1236.85
        t2 = t * t
        t3 = t2 * t
        jd1 = 2415020.75933 + 29.53058868 * k + 0.0001178 * t2 - 0.000000155 * t3
        jd1 = jd1 + 0.00033 * math.sin((166.56 + 132.87 * t - 0.009173 * t2) * _DR)
        m = 359.2242 + 29.10535608 * k - 0.0000333 * t2 - 0.00000347 * t3
        mpr = 306.0253 + 385.81691806 * k + 0.0107306 * t2 + 0.00001236 * t3
        f = 21.2964 + 390.67050646 * k - 0.0016528 * t2 - 0.00000239 * t3

        c1 = (0.1734 - 0.000393 * t) * math.sin(m * _DR) + 0.0021 * math.sin(2 * _DR * m)
        c1 = c1 - 0.4068 * math.sin(mpr * _DR) + 0.0161 * math.sin(_DR * 2 * mpr)
        c1 = c1 - 0.0004 * math.sin(_DR * 3 * mpr)
        c1 = c1 + 0.0104 * math.sin(_DR * 2 * f) - 0.0051 * math.sin(_DR * (m + mpr))
        c1 = c1 - 0.0074 * math.sin(_DR * (m - mpr)) + 0.0004 * math.sin(_DR * (2 * f + m))
        c1 = c1 - 0.0004 * math.sin(_DR * (2 * f - m)) - 0.0006 * math.sin(_DR * (2 * f + mpr))
        c1 = c1 + 0.0010 * math.sin(_DR * (2 * f - mpr)) + 0.0005 * math.sin(_DR * (2 * mpr + m))

        # delta T (days)
        if t < -11:
            deltat = 0.001 + 0.000839 * t + 0.0002261 * t2 - 0.00000845 * t3 - 0.000000081 * t * t3
        else:
            deltat = -0.000278 + 0.000265 * t + 0.000262 * t2
        return jd1 + c1 - deltat

    def sun_longitude_deg(self, jd: float) -> float:
        t = (jd - 2451545.0) / 36525.0
        t2 = t * t
        m = 357.52910 + 35999.05030 * t - 0.0001559 * t2 - 0.00000048 * t * t2
        l0 = 280.46645 + 36000.76983 * t + 0.0003032 * t2
        dl = (1.914600 - 0.004817 * t - 0.000014 * t2) * math.sin(_DR * m)
        dl += (0.019993 - 0.000101 * t) * math.sin(_DR * 2 * m) + 0.000290 * math.sin(_DR * 3 * m)

        lon = (l0 + dl) * _DR
        lon = lon - math.pi * 2 * int(lon / (math.pi * 2))
        return lon / _DR
