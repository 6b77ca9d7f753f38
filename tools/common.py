from __future__ import annotations

import argparse
import json
import os
import sys
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional, Tuple

from amlich.core.config import (
    AMLICH_EPHEMERIS_ENV,
    AMLICH_EPHEMERIS_PATH_ENV,
    AMLICH_PROVIDER_ENV,
    LuniSolarConfig,
    ProviderConfig,
)
from amlich.core.errors import EngineUnavailableError
from amlich.core.lunisolar import LunisolarCalendar, calendar_for

DEFAULT_PROVIDER = "meeus"
DEFAULT_EPHEMERIS = "de440s.bsp"


@dataclass(frozen=True)
class ProviderChoice:
    config: ProviderConfig
    skip_reason: Optional[str]


def add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--date", help="YYYY-MM-DD")
    parser.add_argument("--start", help="YYYY-MM-DD")
    parser.add_argument("--end", help="YYYY-MM-DD")
    parser.add_argument("--provider", default="", choices=["", "meeus", "skyfield"])
    parser.add_argument("--ephemeris", default="")
    parser.add_argument("--ephemeris-path", default="")
    parser.add_argument("--json", action="store_true")
    parser.add_argument("--verbose", action="store_true")


def parse_date(s: str) -> date:
    return date.fromisoformat(s)


def resolve_provider(provider_arg: str, name_arg: str, path_arg: str) -> ProviderChoice:
    name = (provider_arg or "").strip() or os.environ.get(AMLICH_PROVIDER_ENV, "").strip() or DEFAULT_PROVIDER
    ephem = (name_arg or "").strip() or os.environ.get(AMLICH_EPHEMERIS_ENV, "").strip() or DEFAULT_EPHEMERIS
    if name == "meeus":
        return ProviderChoice(config=ProviderConfig(name="meeus", ephemeris=ephem), skip_reason=None)

    path_raw = (path_arg or "").strip() or os.environ.get(AMLICH_EPHEMERIS_PATH_ENV, "").strip()
    if path_raw:
        p = Path(path_raw).expanduser()
        if p.exists():
            return ProviderChoice(config=ProviderConfig(name="skyfield", ephemeris=ephem, ephemeris_path=p), skip_reason=None)
        return ProviderChoice(config=ProviderConfig(name="skyfield", ephemeris=ephem), skip_reason=f"ephemeris_path not found: {p}")

    local = Path("data") / ephem
    if local.exists():
        return ProviderChoice(
            config=ProviderConfig(name="skyfield", ephemeris=ephem, ephemeris_path=local.resolve()),
            skip_reason=None,
        )

    return ProviderChoice(
        config=ProviderConfig(name="skyfield", ephemeris=ephem),
        skip_reason=(
            "ephemeris not found. set AMLICH_EPHEMERIS_PATH or provide --ephemeris-path, "
            "or place data/<ephemeris>."
        ),
    )


def calendar_from_args(args: argparse.Namespace) -> LunisolarCalendar:
    choice = resolve_provider(args.provider, args.ephemeris, args.ephemeris_path)
    if choice.skip_reason:
        skip(choice.skip_reason)
    try:
        return calendar_for(choice.config, LuniSolarConfig())
    except EngineUnavailableError as e:
        skip(str(e))
        raise


def resolve_date_range(args: argparse.Namespace) -> Tuple[Optional[date], Optional[date]]:
    if args.start and args.end:
        return parse_date(args.start), parse_date(args.end)
    if args.date:
        d = parse_date(args.date)
        return d, d
    return None, None


def dump_json(obj: object) -> None:
    print(json.dumps(obj, ensure_ascii=False, indent=2))


def skip(msg: str) -> None:
    print(f"SKIP: {msg}")
    sys.exit(0)
