"""
Compare month layouts from two astronomy providers (meeus vs skyfield).

Differences are expected only where a new moon or a major solar term falls
within minutes of local midnight.
"""

from __future__ import annotations

import argparse

from amlich.core.config import LuniSolarConfig, ProviderConfig
from amlich.core.errors import EngineUnavailableError
from amlich.core.lunisolar import calendar_for

from tools.common import add_common_args, dump_json, resolve_date_range, resolve_provider, skip


def main() -> None:
    parser = argparse.ArgumentParser(description="Provider comparison (meeus vs skyfield)")
    add_common_args(parser)
    parser.add_argument("--year", type=int, help="single lunar year")
    args = parser.parse_args()

    start, end = resolve_date_range(args)
    if args.year:
        years = [int(args.year)]
    elif start and end:
        years = list(range(start.year, end.year + 1))
    else:
        parser.error("--year or --date or --start/--end required")

    choice = resolve_provider("skyfield", args.ephemeris, args.ephemeris_path)
    if choice.skip_reason:
        skip(choice.skip_reason)

    cfg = LuniSolarConfig()
    meeus = calendar_for(ProviderConfig(name="meeus"), cfg)
    try:
        sky = calendar_for(choice.config, cfg)
    except EngineUnavailableError as e:
        skip(str(e))
        return

    diffs = []
    for year in years:
        a = [(m.month, m.is_leap, m.start.isoformat(), m.length) for m in meeus.year_months(year)]
        b = [(m.month, m.is_leap, m.start.isoformat(), m.length) for m in sky.year_months(year)]
        if a != b:
            diffs.append({"year": year, "meeus": a, "skyfield": b})
            if not args.json:
                print(f"{year}: DIFF")
                for x, y in zip(a, b):
                    mark = "" if x == y else "  <--"
                    print(f"  meeus={x}  skyfield={y}{mark}")
        elif args.verbose and not args.json:
            print(f"{year}: same")

    if args.json:
        dump_json({"years": years, "diffs": diffs})
    else:
        print(f"years={len(years)} diffs={len(diffs)}")


if __name__ == "__main__":
    main()
