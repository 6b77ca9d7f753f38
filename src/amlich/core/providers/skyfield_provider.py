# src/amlich/core/providers/skyfield_provider.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

from skyfield import almanac
from skyfield.api import Loader

from amlich.core.astronomy import NEW_MOON_EPOCH_JD, SYNODIC_MONTH_DAYS

log = logging.getLogger(__name__)

# true new moon is within ~0.7 days of the mean one; search a wider bracket
_NEW_MOON_SEARCH_DAYS = 3.0


def _resolve_ecliptic_frame():
    """
    Prefer the true ecliptic/equinox of date; older Skyfield versions only
    ship ecliptic_frame (also "of date").
    """
    try:
        from skyfield.framelib import true_ecliptic_and_equinox_of_date  # type: ignore
        return true_ecliptic_and_equinox_of_date
    except ImportError:
        from skyfield.framelib import ecliptic_frame
        return ecliptic_frame


# ----------------------------
# Ephemeris path resolution
# ----------------------------
def _project_data_dir() -> Path:
    return Path(__file__).resolve().parents[4] / "data"


def _default_ephemeris_path() -> Path:
    """
    Prefer de440s (longer coverage) if present; otherwise fall back to de421.
    """
    data_dir = _project_data_dir()
    p440s = data_dir / "de440s.bsp"
    p421 = data_dir / "de421.bsp"
    return p440s if p440s.exists() else p421


def _resolve_ephemeris_path(
    *,
    ephemeris_path: Optional[Path],
    ephemeris: Optional[Union[str, Path]],
) -> Path:
    """
    Resolution priority:
      1) ephemeris_path (Path) if provided
      2) ephemeris (str|Path): absolute path as is, bare name under data/
      3) default: de440s if present else de421
    """
    if ephemeris_path is not None:
        return ephemeris_path

    if ephemeris is not None:
        p = ephemeris if isinstance(ephemeris, Path) else Path(ephemeris)
        if p.is_absolute():
            return p
        return _project_data_dir() / p

    return _default_ephemeris_path()


@dataclass(frozen=True)
class SkyfieldProvider:
    """
    AstroProvider backed by a JPL ephemeris.

    Gives the same civil-day answers as MeeusProvider except on the rare
    days where a new moon or a major solar term falls within minutes of
    local midnight.
    """

    ephemeris_path: Optional[Path] = None
    ephemeris: Optional[Union[str, Path]] = None

    def __post_init__(self) -> None:
        resolved = _resolve_ephemeris_path(
            ephemeris_path=self.ephemeris_path,
            ephemeris=self.ephemeris,
        )
        object.__setattr__(self, "ephemeris_path", resolved)

        if not self.ephemeris_path.exists():
            data_dir = _project_data_dir()
            candidates = [
                data_dir / "de440s.bsp",
                data_dir / "de421.bsp",
            ]
            cand_str = "\n".join(f"  - {p}" for p in candidates)
            raise FileNotFoundError(
                f"Ephemeris not found: {self.ephemeris_path}\n"
                f"Place one of the following files under {data_dir}:\n"
                f"{cand_str}\n"
                "Or pass ephemeris='de440s.bsp' / ephemeris_path=Path(...)."
            )

        loader = Loader(str(self.ephemeris_path.parent))
        eph = loader(self.ephemeris_path.name)
        ts = loader.timescale()

        object.__setattr__(self, "_eph", eph)
        object.__setattr__(self, "_ts", ts)
        object.__setattr__(self, "_earth", eph["earth"])
        object.__setattr__(self, "_sun", eph["sun"])
        object.__setattr__(self, "_phases", almanac.moon_phases(eph))
        object.__setattr__(self, "_frame", _resolve_ecliptic_frame())

        start_jd, end_jd = self._compute_ephemeris_jd_range()
        object.__setattr__(self, "_ephem_start_jd", start_jd)
        object.__setattr__(self, "_ephem_end_jd", end_jd)

    def _compute_ephemeris_jd_range(self) -> Tuple[float, float]:
        """
        Coverage from SPK segments, so out-of-range requests fail with a
        readable error instead of Skyfield's EphemerisRangeError.
        """
        segments = getattr(self._eph, "spk", None)
        if segments is None or not getattr(segments, "segments", None):
            return float("-inf"), float("inf")
        segs = segments.segments
        return min(s.start_jd for s in segs), max(s.end_jd for s in segs)

    def _check_ephemeris_range(self, jd: float) -> None:
        if jd < self._ephem_start_jd or jd > self._ephem_end_jd:
            raise ValueError(
                "Requested Julian date is outside ephemeris coverage.\n"
                f"  requested: {jd:.5f}\n"
                f"  ephemeris: {self.ephemeris_path}\n"
                f"  coverage : {self._ephem_start_jd:.1f} .. {self._ephem_end_jd:.1f}\n"
                "Hint: use de440s.bsp (place it under ./data or pass ephemeris='de440s.bsp')."
            )

    def sun_longitude_deg(self, jd: float) -> float:
        self._check_ephemeris_range(jd)
        t = self._ts.ut1_jd(jd)
        obs = self._earth.at(t).observe(self._sun).apparent()
        _lat, lon, _dist = obs.frame_latlon(self._frame)
        return float(lon.degrees % 360.0)

    def new_moon_jd(self, k: int) -> float:
        approx = NEW_MOON_EPOCH_JD + SYNODIC_MONTH_DAYS * k
        self._check_ephemeris_range(approx - _NEW_MOON_SEARCH_DAYS)
        self._check_ephemeris_range(approx + _NEW_MOON_SEARCH_DAYS)

        t0 = self._ts.ut1_jd(approx - _NEW_MOON_SEARCH_DAYS)
        t1 = self._ts.ut1_jd(approx + _NEW_MOON_SEARCH_DAYS)
        times, phases = almanac.find_discrete(t0, t1, self._phases)

        hits = [float(t.ut1) for t, ph in zip(times, phases) if int(ph) == 0]
        if not hits:
            log.warning("no new moon found near k=%d (approx jd=%.3f)", k, approx)
            raise RuntimeError(f"new moon not found near lunation k={k}")
        return min(hits, key=lambda jd: abs(jd - approx))
