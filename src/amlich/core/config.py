# src/amlich/core/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Literal, Optional

ProviderName = Literal["meeus", "skyfield"]

AMLICH_PROVIDER_ENV = "AMLICH_PROVIDER"
AMLICH_EPHEMERIS_ENV = "AMLICH_EPHEMERIS"
AMLICH_EPHEMERIS_PATH_ENV = "AMLICH_EPHEMERIS_PATH"
AMLICH_DEBUG_ENV = "AMLICH_DEBUG_LUNISOLAR"

VIETNAM_TZ_NAME = "Asia/Ho_Chi_Minh"


def env_truthy(name: str) -> bool:
    v = os.environ.get(name, "")
    return v.strip().lower() in ("1", "true", "yes", "y", "on")


@dataclass(frozen=True)
class LuniSolarConfig:
    """
    Calendar-level settings.

    tz_hours is the civil UTC offset whose midnight separates lunar days.
    Vietnam has used UTC+7 for the whole supported window as far as the
    published âm lịch tables are concerned (the 1968 switch to UTC+7 is what
    separates the Vietnamese from the Chinese calendar).
    """
    tz_hours: float = 7.0

    # supported Gregorian years (inclusive)
    min_year: int = 1900
    max_year: int = 2100

    @property
    def min_date(self) -> date:
        return date(self.min_year, 1, 1)

    @property
    def max_date(self) -> date:
        return date(self.max_year, 12, 31)

    @property
    def min_lunar_year(self) -> int:
        # 1900-01-01 is still inside lunar year 1899 (Kỷ Hợi)
        return self.min_year - 1

    @property
    def max_lunar_year(self) -> int:
        return self.max_year


@dataclass(frozen=True)
class ProviderConfig:
    """
    Which astronomy provider backs the conversion.

    - "meeus": closed-form series, no data files (default)
    - "skyfield": JPL ephemeris, needs data/<ephemeris> or ephemeris_path
    """
    name: ProviderName = "meeus"
    ephemeris: str = "de440s.bsp"
    ephemeris_path: Optional[Path] = None

    @classmethod
    def from_env(cls) -> "ProviderConfig":
        name = os.environ.get(AMLICH_PROVIDER_ENV, "").strip().lower() or "meeus"
        if name not in ("meeus", "skyfield"):
            raise ValueError(f"{AMLICH_PROVIDER_ENV} must be 'meeus' or 'skyfield' (got {name!r})")
        ephem = os.environ.get(AMLICH_EPHEMERIS_ENV, "").strip() or "de440s.bsp"
        path_raw = os.environ.get(AMLICH_EPHEMERIS_PATH_ENV, "").strip()
        path = Path(path_raw).expanduser() if path_raw else None
        return cls(name=name, ephemeris=ephem, ephemeris_path=path)  # type: ignore[arg-type]
