# src/amlich/features/ics_export.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional

from amlich.core.lunisolar import LunisolarCalendar, default_calendar
from amlich.core.timeutil import UTC
from amlich.features.config import DEFAULT_LOCALE, LocaleTable
from amlich.features.important_dates import important_dates_for_year
from amlich.features.lunar_date import format_lunar_date
from amlich.features.recurrence import AnniversaryDefinition, occurrences_in_gregorian_year

log = logging.getLogger(__name__)

CALENDAR_NAME = "Âm lịch Việt Nam"
PRODID = "-//amlich//Vietnamese Lunar Calendar//VI"
CATEGORY_IMPORTANT = "Mồng 1 / Rằm"
CATEGORY_ANNIVERSARY = "Ngày giỗ"

# content line limit (octets, CRLF excluded)
ICS_LINE_OCTETS = 75


@dataclass(frozen=True)
class ExportEntry:
    title: str
    date: date
    description: Optional[str] = None
    category: str = CATEGORY_ANNIVERSARY


def yyyymmdd(d: date) -> str:
    return d.strftime("%Y%m%d")


def dtstamp_utc(now: Optional[datetime] = None) -> str:
    t = now if now is not None else datetime.now(tz=UTC)
    if t.tzinfo is None:
        t = t.replace(tzinfo=UTC)
    return t.astimezone(UTC).strftime("%Y%m%dT%H%M%SZ")


def escape_text(s: str) -> str:
    """TEXT value escaping (backslash, semicolon, comma, newline)."""
    return (
        s.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
    )


def fold_line(line: str, limit: int = ICS_LINE_OCTETS) -> List[str]:
    """
    Split one content line into physical lines of at most limit UTF-8 octets.
    Continuation lines start with a single space; characters are never split.
    """
    out: List[str] = []
    cur = ""
    size = 0
    for ch in line:
        n = len(ch.encode("utf-8"))
        if size + n > limit:
            out.append(cur)
            cur = " "
            size = 1
        cur += ch
        size += n
    out.append(cur)
    return out


def build_ics(
    entries: Iterable[ExportEntry],
    *,
    calendar_name: str = CALENDAR_NAME,
    stamp: Optional[datetime] = None,
) -> str:
    """
    All-day VEVENTs, one per entry, ordered by date then title.
    UID is YYYYMMDD + per-date counter, so re-exports are stable.
    """
    lines: List[str] = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        f"X-WR-CALNAME:{escape_text(calendar_name)}",
        "X-WR-TIMEZONE:Asia/Ho_Chi_Minh",
    ]

    ts = dtstamp_utc(stamp)
    per_date_counter: Dict[str, int] = {}

    for e in sorted(entries, key=lambda x: (x.date, x.title)):
        ds = yyyymmdd(e.date)
        x = per_date_counter.get(ds, 0)
        per_date_counter[ds] = x + 1

        lines.append("BEGIN:VEVENT")
        lines.append(f"UID:{ds}{x}@amlich")
        lines.append(f"DTSTAMP:{ts}")
        lines.append(f"SUMMARY:{escape_text(e.title)}")
        lines.append(f"DTSTART;VALUE=DATE:{ds}")
        lines.append(f"DTEND;VALUE=DATE:{yyyymmdd(e.date + timedelta(days=1))}")
        lines.append(f"CATEGORIES:{escape_text(e.category)}")
        lines.append("TRANSP:TRANSPARENT")
        if e.description:
            lines.append(f"DESCRIPTION:{escape_text(e.description)}")
        lines.append("END:VEVENT")

    lines.append("END:VCALENDAR")
    physical = [p for line in lines for p in fold_line(line)]
    return "\r\n".join(physical) + "\r\n"


def entries_for_year(
    definitions: Iterable[AnniversaryDefinition],
    year: int,
    *,
    include_important: bool = True,
    locale: LocaleTable = DEFAULT_LOCALE,
    calendar: Optional[LunisolarCalendar] = None,
) -> List[ExportEntry]:
    """Mồng 1 / Rằm markers plus every definition's occurrences in Gregorian year."""
    cal = calendar if calendar is not None else default_calendar()
    out: List[ExportEntry] = []

    if include_important:
        # lunar year (year - 1) spills into Jan/Feb of year
        for ly in (year - 1, year):
            for ld in important_dates_for_year(ly, locale=locale, calendar=cal):
                if ld.gregorian_date.year != year:
                    continue
                out.append(
                    ExportEntry(
                        title=f"{ld.day_name} {ld.month_name}",
                        date=ld.gregorian_date,
                        description=format_lunar_date(ld, include_cycle=True, locale=locale),
                        category=CATEGORY_IMPORTANT,
                    )
                )

    for d in definitions:
        for occ in occurrences_in_gregorian_year(d, year, locale=locale, calendar=cal):
            lunar_txt = format_lunar_date(occ.lunar_date, locale=locale)
            out.append(
                ExportEntry(
                    title=d.title or lunar_txt,
                    date=occ.gregorian_date,
                    description=lunar_txt,
                    category=CATEGORY_ANNIVERSARY,
                )
            )

    log.debug("export entries for %d: %d", year, len(out))
    out.sort(key=lambda e: (e.date, e.title))
    return out
