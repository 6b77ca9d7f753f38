"""
Lunisolar (âm lịch) check script.

Prints the lunar date of every day in a range; with --roundtrip, instead
verifies lunar -> Gregorian -> lunar for the range and lists failures.

Uses:
- amlich.core.lunisolar.LunisolarCalendar
- amlich.features.lunar_date.describe / format_lunar_date
"""

from __future__ import annotations

import argparse
import sys
from datetime import timedelta

from amlich.features.lunar_date import describe, format_lunar_date

from tools.common import add_common_args, calendar_from_args, dump_json, resolve_date_range


def _format_label(month: int, day: int, is_leap: bool) -> str:
    return f"{month:02d}{'L' if is_leap else ''}/{day:02d}"


def main() -> None:
    parser = argparse.ArgumentParser(description="Lunisolar (âm lịch) check")
    add_common_args(parser)
    parser.add_argument("--roundtrip", action="store_true", help="verify round trips instead of listing")
    args = parser.parse_args()

    start, end = resolve_date_range(args)
    if start is None or end is None:
        parser.error("--date or --start/--end required")

    cal = calendar_from_args(args)

    if args.roundtrip:
        failures = []
        count = 0
        for g, l in cal.lunar_dates_between(start, end + timedelta(days=1)):
            count += 1
            back = cal.lunar_to_gregorian(l.year, l.month, l.day, l.is_leap)
            if back != g:
                failures.append({"date": g.isoformat(), "lunar": list(l.as_tuple()), "back": back.isoformat()})
        if args.json:
            dump_json({"checked": count, "failures": failures})
        else:
            print(f"checked={count} failures={len(failures)}")
            for f in failures:
                print(f"  {f['date']} -> {f['lunar']} -> {f['back']}")
        sys.exit(1 if failures else 0)

    rows = []
    for g, l in cal.lunar_dates_between(start, end + timedelta(days=1)):
        ld = describe(l, g)
        label = _format_label(l.month, l.day, l.is_leap)

        if args.json:
            rows.append(
                {
                    "date": g.isoformat(),
                    "year": l.year,
                    "month": l.month,
                    "day": l.day,
                    "leap": l.is_leap,
                    "label": label,
                    "month_name": ld.month_name,
                    "can_chi_day": ld.cycle_day_name,
                }
            )
        else:
            sep = "\n" if (l.day == 1 and g != start) else ""
            text = format_lunar_date(ld, include_cycle=True) if args.verbose else ld.month_name
            print(f"{sep}{g.isoformat()}  L={label}  year={l.year} {text}")

    if args.json:
        dump_json({"rows": rows})


if __name__ == "__main__":
    main()
