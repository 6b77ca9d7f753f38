"""
Solar term (tiết khí) check script.

Uses:
- amlich.features.solar_terms.solar_term_starts_between / solar_term_for_day
"""

from __future__ import annotations

import argparse
from datetime import timedelta

from amlich.features.solar_terms import solar_term_for_day, solar_term_starts_between

from tools.common import add_common_args, calendar_from_args, dump_json, resolve_date_range


def main() -> None:
    parser = argparse.ArgumentParser(description="Solar term (tiết khí) check")
    add_common_args(parser)
    parser.add_argument("--daily", action="store_true", help="list the term in effect for every day")
    args = parser.parse_args()

    start, end = resolve_date_range(args)
    if start is None or end is None:
        parser.error("--date or --start/--end required")

    cal = calendar_from_args(args)

    rows = [
        {
            "date": s.date.isoformat(),
            "index": s.term.index,
            "name": s.term.name,
            "degree": s.term.longitude_deg,
            "kind": s.term.kind,
        }
        for s in solar_term_starts_between(start, end + timedelta(days=1), calendar=cal)
    ]

    daily = {}
    if args.daily:
        cur = start
        while cur <= end:
            daily[cur.isoformat()] = solar_term_for_day(cur, calendar=cal).name
            cur = cur + timedelta(days=1)

    if args.json:
        payload = {"terms": rows}
        if args.daily:
            payload["daily"] = daily
        dump_json(payload)
        return

    for r in rows:
        print(f"{r['date']}  {r['degree']:3d}°  {r['name']}  ({r['kind']})")
    for d, name in daily.items():
        print(f"  {d}  {name}")


if __name__ == "__main__":
    main()
