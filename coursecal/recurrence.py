"""RRULE / EXDATE lines for a weekly class meeting."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Sequence

from coursecal.config import EXDATE_CHUNK


def build_weekly_rrule(days: Sequence[str], end_date: date) -> str:
    """
    FREQ=WEEKLY;BYDAY=MO,WE;UNTIL=20251217T235959Z

    UNTIL is the last second of the end date in UTC, built from the date's own
    year/month/day so a date-only value never slides a day with the local zone.
    """
    until = f"{end_date.year:04d}{end_date.month:02d}{end_date.day:02d}T235959Z"
    return f"FREQ=WEEKLY;BYDAY={','.join(days)};UNTIL={until}"


def build_exdate_lines(dates: Iterable[date], chunk: int = EXDATE_CHUNK) -> list[str]:
    values = [d.strftime("%Y%m%d") for d in dates]
    return [
        f"EXDATE;VALUE=DATE:{','.join(values[i:i + chunk])}"
        for i in range(0, len(values), chunk)
    ]


def build_recurrence(days: Sequence[str], end_date: date, exception_dates: Iterable[date] = ()) -> list[str]:
    return [f"RRULE:{build_weekly_rrule(days, end_date)}", *build_exdate_lines(exception_dates)]
