"""
Settings for coursecal.

Everything here is a plain module constant; the few values that change per
machine (default time zone, days-off file, Google credential paths) can be
overridden through COURSECAL_* environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

import pytz

from coursecal.errors import UnsupportedTimezoneError

# Column header names expected in the export (exact match after trimming)
COLUMNS = {
    "course": "Course Listing",
    "section": "Section",
    "meeting_pattern": "Meeting Patterns",
    "start_date": "Start Date",
    "end_date": "End Date",
}

SUPPORTED_TIMEZONES = (
    "America/Los_Angeles",
    "America/Chicago",
    "America/New_York",
    "UTC",
)
DEFAULT_TIMEZONE = "America/Chicago"

# Workday puts the header on row 3; otherwise scan this many rows for it
HEADER_ROW_GUESS = 3
HEADER_SCAN_ROWS = 30

EXDATE_CHUNK = 20

GOOGLE_SCOPES = [
    "https://www.googleapis.com/auth/calendar",
    "https://www.googleapis.com/auth/calendar.events",
]
CREATE_CALENDAR_OPTION = "__create__"


def validate_timezone(name: str) -> str:
    """Return ``name`` if it is one of the supported zones, else raise."""
    name = (name or "").strip()
    if name not in SUPPORTED_TIMEZONES:
        raise UnsupportedTimezoneError(name, SUPPORTED_TIMEZONES)
    try:
        pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        raise UnsupportedTimezoneError(name, SUPPORTED_TIMEZONES)
    return name


@dataclass
class Settings:
    timezone: str = DEFAULT_TIMEZONE
    days_off_path: Optional[str] = None
    credentials_path: str = "credentials.json"
    token_path: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            timezone=validate_timezone(os.environ.get("COURSECAL_TIMEZONE", DEFAULT_TIMEZONE)),
            days_off_path=os.environ.get("COURSECAL_DAYS_OFF") or None,
            credentials_path=os.environ.get("COURSECAL_CREDENTIALS", "credentials.json"),
            token_path=os.environ.get("COURSECAL_TOKEN") or None,
        )
