"""Clock times, ISO dates and the first class meeting of a term."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

WEEKDAY_CODES = ("MO", "TU", "WE", "TH", "FR", "SA", "SU")  # date.weekday() order

_TIME_DEFAULT = datetime(1970, 1, 1)


def parse_hour_minute(time_str: str) -> tuple[int, int]:
    """'11:30 AM' -> (11, 30), '12:50 PM' -> (12, 50), '12:05 AM' -> (0, 5).

    An empty or unreadable time gives midnight rather than an error.
    """
    if not time_str or not time_str.strip():
        return 0, 0
    try:
        parsed = date_parser.parse(time_str, default=_TIME_DEFAULT)
    except (ValueError, OverflowError):
        logger.warning("Unreadable clock time %r, using midnight", time_str)
        return 0, 0
    return parsed.hour, parsed.minute


def parse_iso_date(value) -> Optional[date]:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        return None


def first_occurrence_on_or_after(start: date, days: Iterable[str]) -> date:
    """First date in [start, start + 6] whose weekday is one of ``days``."""
    wanted = set(days)
    for offset in range(7):
        candidate = start + timedelta(days=offset)
        if WEEKDAY_CODES[candidate.weekday()] in wanted:
            return candidate
    return start


def build_local_datetime(day: date, hour: int, minute: int) -> str:
    """Naive local timestamp; the time zone travels next to it, never inside."""
    return f"{day.isoformat()}T{hour:02d}:{minute:02d}:00"
