"""
Leap month (tháng nhuận) check script.

Uses:
- amlich.core.lunisolar.LunisolarCalendar.year_months / month11_jdn
- amlich.features.config.LocaleTable.month_name
"""

from __future__ import annotations

import argparse

from amlich.core.timeutil import date_from_jdn
from amlich.features.config import DEFAULT_LOCALE

from tools.common import add_common_args, calendar_from_args, dump_json, resolve_date_range


def _years_from_args(args, start, end) -> list[int]:
    if args.year:
        return [int(args.year)]
    if start and end:
        return list(range(start.year, end.year + 1))
    return []


def main() -> None:
    parser = argparse.ArgumentParser(description="Leap month (tháng nhuận) check")
    add_common_args(parser)
    parser.add_argument("--year", type=int, help="target lunar year")
    parser.add_argument("--only-leap", action="store_true", help="print leap years only")
    args = parser.parse_args()

    start, end = resolve_date_range(args)
    years = _years_from_args(args, start, end)
    if not years:
        parser.error("--year or --date or --start/--end required")

    cal = calendar_from_args(args)

    out_rows = []
    for year in years:
        months = cal.year_months(year)
        leap = next((m for m in months if m.is_leap), None)
        if args.only_leap and leap is None:
            continue

        leap_info = None
        if leap is not None:
            leap_info = {
                "month_no": leap.month,
                "month_name": DEFAULT_LOCALE.month_name(leap.month, True),
                "start": leap.start.isoformat(),
                "length": leap.length,
            }

        row = {
            "year": year,
            "month_count": len(months),
            "leap": leap_info,
            "month11_start": date_from_jdn(cal.month11_jdn(year)).isoformat(),
        }
        if args.verbose:
            row["months"] = [
                {
                    "month": m.month,
                    "leap": m.is_leap,
                    "start": m.start.isoformat(),
                    "length": m.length,
                }
                for m in months
            ]
        out_rows.append(row)

        if not args.json:
            if leap_info is None:
                print(f"{year}: leap=none month_count={len(months)}")
            else:
                print(
                    f"{year}: leap month_no={leap_info['month_no']} month_name={leap_info['month_name']} "
                    f"start={leap_info['start']} length={leap_info['length']} month_count={len(months)}"
                )
            if args.verbose:
                for m in months:
                    print(f"  {m.month:02d}{'L' if m.is_leap else ' '} {m.start.isoformat()} ({m.length})")

    if args.json:
        dump_json({"years": out_rows})


if __name__ == "__main__":
    main()
